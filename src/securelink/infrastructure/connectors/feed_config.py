"""
은행 거래 피드 설정 팩토리

은행 WebSocket 거래 피드 연결에 필요한 FeedConfig를 생성하는 헬퍼 함수를 제공합니다.
"""

from typing import Iterable, Optional

from securelink.domain.exceptions import InvalidConfigurationError
from securelink.domain.models.feed_config import FeedConfig
from securelink.domain.models.transaction import Bank


DEFAULT_FEED_NAME = "bank-feed"

# 피드 서버 idle timeout(60초)보다 충분히 짧은 Ping 간격
DEFAULT_PING_INTERVAL = 20

# 재연결 설정
DEFAULT_MAX_RECONNECT_ATTEMPTS = 10
DEFAULT_EXPONENTIAL_BACKOFF_MAX = 60


def create_bank_feed_config(
    websocket_url: str,
    banks: Optional[Iterable[str | Bank]] = None,
    feed_name: str = DEFAULT_FEED_NAME,
    ping_interval_seconds: int = DEFAULT_PING_INTERVAL,
    max_reconnect_attempts: int = DEFAULT_MAX_RECONNECT_ATTEMPTS,
    exponential_backoff_max_seconds: int = DEFAULT_EXPONENTIAL_BACKOFF_MAX,
) -> FeedConfig:
    """
    은행 거래 피드 연결을 위한 FeedConfig를 생성합니다.

    Args:
        websocket_url: 피드 WebSocket URL (ws:// 또는 wss://)
        banks: 수신할 은행 코드 (예: {"HDFC", "SBI"}). None이면 모든 은행.
        feed_name: 로그에 표시할 피드 이름
        ping_interval_seconds: WebSocket Ping 전송 간격 (초)
        max_reconnect_attempts: 최대 재연결 시도 횟수. 0이면 무한 재시도.
        exponential_backoff_max_seconds: 지수 백오프 최대 대기 시간 (초)

    Raises:
        InvalidConfigurationError: 설정 검증 실패 시

    Examples:
        >>> config = create_bank_feed_config("wss://feed.example.com/tx", {"hdfc", "SBI"})
        >>> sorted(bank.value for bank in config.subscribed_banks)
        ['HDFC', 'SBI']
    """
    selected = frozenset(Bank) if banks is None else frozenset(banks)
    if not selected:
        raise InvalidConfigurationError(
            f"Bank feed {feed_name} must subscribe to at least one bank"
        )

    return FeedConfig(
        feed_name=feed_name,
        websocket_url=websocket_url,
        subscribed_banks=selected,
        ping_interval_seconds=ping_interval_seconds,
        max_reconnect_attempts=max_reconnect_attempts,
        exponential_backoff_max_seconds=exponential_backoff_max_seconds,
    )
