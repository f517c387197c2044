"""
거래 지문(Fingerprint) 생성 및 비교

거래 속성(amount, timestamp, merchant, card)으로부터 결정적인 32자리 대문자
16진수 지문을 만듭니다. 같은 입력은 항상 같은 지문을 만듭니다.

주의: 이 변환은 데모용 상관관계 키입니다. 충돌 저항성이 없으므로
인증이나 무결성 검증 용도로 사용하면 안 됩니다.

한계:
    - LCG 출력의 state % 256만 사용하므로 star map은 seed의 하위 8비트로만
      결정됩니다. 가능한 키스트림은 256가지뿐입니다.
    - XOR 패턴은 정규화된 입력의 앞 16글자만 씁니다. 일반 거래에서 이 구간은
      amount와 timestamp로 채워지므로 merchant와 card는 seed 하위 바이트를
      통해서만 지문에 영향을 줍니다. 따라서 이 두 필드만 다른 거래끼리는
      지문이 충돌할 수 있습니다.

처리 순서:
    1. amount, timestamp, merchant, card를 구분자 없이 이어 붙임
    2. UTF-16 코드 유닛 기반 롤링 해시 (signed 32-bit wrap) -> seed
    3. seed로 LCG를 16회 돌려 star map(0~255) 생성
    4. 정규화된 패턴 문자와 star map을 XOR 하여 16바이트 지문 생성
"""

import re
from dataclasses import dataclass
from typing import Union

Amount = Union[int, float]

FINGERPRINT_BYTES = 16
FINGERPRINT_LENGTH = FINGERPRINT_BYTES * 2

# LCG 상수 (glibc rand와 동일)
LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MASK = 0x7FFFFFFF

# 정규화 후 패턴이 비어있을 때 사용하는 문자 코드 ('A')
EMPTY_PATTERN_CODE = 65

_NON_ALNUM = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class FingerprintResult:
    """
    지문 생성 결과

    Attributes:
        fingerprint: 32자리 대문자 16진수 지문
        star_map: 지문 생성에 사용된 16개 키스트림 값 (0~255)
        seed: 롤링 해시 값의 문자열 표현
        pattern: 원본 입력 문자열 (표시용, 비교에 사용하지 않음)
    """

    fingerprint: str
    star_map: tuple[int, ...]
    seed: str
    pattern: str


def _to_int32(value: int) -> int:
    """정수를 signed 32-bit 범위로 감쌉니다."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _utf16_code_units(data: str) -> list[int]:
    """문자열을 UTF-16 코드 유닛 목록으로 변환합니다 (BMP 밖 문자는 surrogate pair)."""
    encoded = data.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(encoded[i:i + 2], "little") for i in range(0, len(encoded), 2)]


def hash_string(data: str) -> int:
    """
    롤링 multiply-and-add 해시를 계산합니다.

    hash = ((hash << 5) - hash) + code_unit 을 매 단계 signed 32-bit로 감싸고,
    최종 값의 절댓값을 반환합니다.

    Args:
        data: 해시할 문자열

    Returns:
        0 이상의 정수 해시 (최대 2**31)
    """
    hash_value = 0
    for code_unit in _utf16_code_units(data):
        hash_value = _to_int32(_to_int32(hash_value << 5) - hash_value + code_unit)
    return abs(hash_value)


def generate_star_map(seed: int) -> list[int]:
    """
    seed로부터 16개의 키스트림 값(star map)을 생성합니다.

    Args:
        seed: hash_string()의 결과

    Returns:
        0~255 범위 정수 16개. 같은 seed는 항상 같은 star map을 만듭니다.
    """
    state = seed
    star_map = []
    for _ in range(FINGERPRINT_BYTES):
        state = (state * LCG_MULTIPLIER + LCG_INCREMENT) & LCG_MASK
        star_map.append(state % 256)
    return star_map


def encrypt_pattern(data: str) -> FingerprintResult:
    """
    임의의 문자열로부터 지문을 생성합니다.

    모든 문자열 입력에 대해 정의된 전함수(total function)이며 예외를 발생시키지 않습니다.

    Args:
        data: 지문을 만들 원본 문자열

    Returns:
        FingerprintResult

    Examples:
        >>> result = encrypt_pattern("25000-1707561234-Amazon India-4532123456789012")
        >>> len(result.fingerprint)
        32
        >>> result == encrypt_pattern("25000-1707561234-Amazon India-4532123456789012")
        True
    """
    pattern = _NON_ALNUM.sub("", data.lower())
    seed = hash_string(data)
    star_map = generate_star_map(seed)

    octets = []
    for i in range(FINGERPRINT_BYTES):
        pattern_code = ord(pattern[i % len(pattern)]) if pattern else EMPTY_PATTERN_CODE
        octets.append(f"{(pattern_code ^ star_map[i]) % 256:02x}")

    return FingerprintResult(
        fingerprint="".join(octets).upper(),
        star_map=tuple(star_map),
        seed=str(seed),
        pattern=data,
    )


def format_amount(amount: Amount) -> str:
    """
    금액을 자연스러운 10진 문자열로 표현합니다.

    정수로 떨어지는 float는 소수점 없이 표현합니다 (25000.0 -> "25000").
    """
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)


def generate_transaction_fingerprint(
    amount: Amount, timestamp: int, merchant: str, card: str
) -> FingerprintResult:
    """
    거래 속성으로부터 지문을 생성합니다.

    필드 순서(amount, timestamp, merchant, card)는 고정이며 구분자를 넣지 않습니다.

    Args:
        amount: 거래 금액
        timestamp: 밀리초 단위 Unix timestamp
        merchant: 가맹점 이름
        card: 전체 카드 번호

    Returns:
        FingerprintResult
    """
    data = f"{format_amount(amount)}{timestamp}{merchant}{card}"
    return encrypt_pattern(data)


def fingerprints_match(first: str, second: str) -> bool:
    """두 지문이 정확히 같은지 확인합니다. 링 형성 여부는 이 함수로만 판단합니다."""
    return first == second


def fingerprint_similarity(first: str, second: str) -> int:
    """
    두 지문의 유사도(%)를 계산합니다.

    짧은 쪽 길이만큼 같은 위치의 문자를 비교하며, 완전히 같으면 100을 반환합니다.
    표시용 진단 값이며 링 형성에는 사용하지 않습니다.

    Args:
        first: 첫 번째 지문 (16진 문자열)
        second: 두 번째 지문 (16진 문자열)

    Returns:
        0~100 정수 (반올림)
    """
    if first == second:
        return 100

    length = min(len(first), len(second))
    if length == 0:
        return 0

    matches = sum(1 for i in range(length) if first[i] == second[i])
    return int(matches * 100 / length + 0.5)
