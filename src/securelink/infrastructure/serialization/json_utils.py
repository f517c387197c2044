"""
고성능 JSON 유틸리티

orjson 기반 직렬화 헬퍼입니다.
웹소켓 I/O에 맞춰 json_dumps는 str(UTF-8)로, Kafka용 json_dumps_bytes는 bytes로 반환합니다.
"""

from __future__ import annotations

from typing import Any

import orjson


def json_loads(data: Any) -> Any:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return orjson.loads(data)
    return orjson.loads(str(data).encode("utf-8"))


def json_dumps(obj: Any) -> str:
    # orjson.dumps → bytes 반환, websockets.send는 str를 기대
    return json_dumps_bytes(obj).decode("utf-8")


def json_dumps_bytes(obj: Any) -> bytes:
    return orjson.dumps(obj, option=orjson.OPT_NON_STR_KEYS)
