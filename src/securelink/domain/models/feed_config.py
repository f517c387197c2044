"""
은행 거래 피드 연결 설정 모델

WebSocket 거래 피드 연결에 필요한 설정을 담는 불변 도메인 모델입니다.
"""

from dataclasses import dataclass, field
from typing import FrozenSet
from urllib.parse import urlparse

from securelink.domain.exceptions import InvalidConfigurationError
from securelink.domain.models.transaction import Bank


@dataclass(frozen=True)
class FeedConfig:
    """
    은행 거래 피드 연결 설정

    Attributes:
        feed_name: 피드 이름 (로그 표시용)
        websocket_url: 거래 피드 WebSocket URL (ws:// 또는 wss://)
        subscribed_banks: 수신할 은행 집합. 다른 은행의 거래는 무시합니다.
        ping_interval_seconds: WebSocket ping 간격 (초)
        max_reconnect_attempts: 재연결 시도 최대 횟수. 0이면 무한 재시도.
        exponential_backoff_max_seconds: 지수 백오프 최대 대기 시간 (초)
    """

    feed_name: str
    websocket_url: str
    subscribed_banks: FrozenSet[Bank] = field(default_factory=lambda: frozenset(Bank))
    ping_interval_seconds: int = 20
    max_reconnect_attempts: int = 10
    exponential_backoff_max_seconds: int = 60

    def __post_init__(self) -> None:
        """문자열 은행 코드를 Bank로 정규화하고 검증합니다."""
        try:
            normalized = frozenset(
                bank if isinstance(bank, Bank) else Bank(str(bank).upper())
                for bank in self.subscribed_banks
            )
        except ValueError as e:
            raise InvalidConfigurationError(
                f"FeedConfig validation failed for {self.feed_name}: unknown bank", cause=e
            )
        object.__setattr__(self, "subscribed_banks", normalized)

        self.validate()

    def validate(self) -> None:
        """
        설정 값의 유효성을 검사합니다.

        Raises:
            InvalidConfigurationError: 설정이 유효하지 않을 경우
        """
        errors = []

        if not self.feed_name or not isinstance(self.feed_name, str):
            errors.append("feed_name must be a non-empty string.")

        if not self._is_valid_websocket_url(self.websocket_url):
            errors.append(f"Invalid websocket_url format: {self.websocket_url}")

        if not self.subscribed_banks:
            errors.append("subscribed_banks cannot be empty.")

        if self.ping_interval_seconds < 1:
            errors.append("ping_interval_seconds must be at least 1 second.")

        if self.max_reconnect_attempts < 0:
            errors.append("max_reconnect_attempts cannot be negative.")

        if self.exponential_backoff_max_seconds < 1:
            errors.append("exponential_backoff_max_seconds must be at least 1 second.")

        if errors:
            raise InvalidConfigurationError(
                f"FeedConfig validation failed for {self.feed_name}: "
                f"{'; '.join(errors)}"
            )

    def _is_valid_websocket_url(self, url: str) -> bool:
        """ws/wss 스킴과 호스트를 가진 URL인지 검사합니다."""
        try:
            result = urlparse(url)
            return result.scheme in ("ws", "wss") and bool(result.netloc)
        except (ValueError, AttributeError):
            return False

    def is_infinite_reconnect(self) -> bool:
        """max_reconnect_attempts가 0이면 무한 재시도를 의미합니다."""
        return self.max_reconnect_attempts == 0

    def __str__(self) -> str:
        banks = ", ".join(sorted(bank.value for bank in self.subscribed_banks))
        return (
            f"FeedConfig(feed_name={self.feed_name}, "
            f"websocket_url={self.websocket_url}, banks=[{banks}])"
        )
