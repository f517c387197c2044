"""
탐지 및 시뮬레이션 설정 모델

탐지 윈도우, 시뮬레이션 주기 등 실행 설정을 담는 불변 도메인 모델입니다.
"""

from dataclasses import dataclass
from typing import Optional

from securelink.domain.exceptions import InvalidConfigurationError

DEFAULT_WINDOW_MS = 60 * 1000
DEFAULT_RECENT_RINGS_LIMIT = 5
DEFAULT_MAX_CONSECUTIVE_FAILURES = 10

MIN_TRANSACTION_INTERVAL_MS = 200
MAX_TRANSACTION_INTERVAL_MS = 2000


@dataclass(frozen=True)
class DetectionConfig:
    """
    링 탐지 설정

    Attributes:
        window_ms: 최근 거래 버퍼 보관 기간 및 활성 링 판정 기간 (밀리초)
        recent_rings_limit: 최근 링 조회 시 기본 개수
        max_consecutive_failures: 연속 발행 실패 허용 횟수
    """

    window_ms: int = DEFAULT_WINDOW_MS
    recent_rings_limit: int = DEFAULT_RECENT_RINGS_LIMIT
    max_consecutive_failures: int = DEFAULT_MAX_CONSECUTIVE_FAILURES

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        설정 값의 유효성을 검사합니다.

        Raises:
            InvalidConfigurationError: 설정이 유효하지 않을 경우
        """
        errors = []

        if self.window_ms <= 0:
            errors.append("window_ms must be positive.")

        if self.recent_rings_limit < 1:
            errors.append("recent_rings_limit must be at least 1.")

        if self.max_consecutive_failures < 1:
            errors.append("max_consecutive_failures must be at least 1.")

        if errors:
            raise InvalidConfigurationError(
                f"DetectionConfig validation failed: {'; '.join(errors)}"
            )


@dataclass(frozen=True)
class SimulationConfig:
    """
    거래 시뮬레이션 설정

    Attributes:
        transaction_interval_ms: 일반 거래 생성 간격 (200~2000ms)
        ring_interval_min_ms: 사기 링 주입 최소 간격
        ring_interval_jitter_ms: 사기 링 주입 간격에 더해지는 무작위 지터 상한
        ring_member_spacing_ms: 같은 링 거래 사이 간격
        max_transactions: 생성할 최대 거래 수 (None이면 무한)
    """

    transaction_interval_ms: int = 800
    ring_interval_min_ms: int = 30000
    ring_interval_jitter_ms: int = 15000
    ring_member_spacing_ms: int = 500
    max_transactions: Optional[int] = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        설정 값의 유효성을 검사합니다.

        Raises:
            InvalidConfigurationError: 설정이 유효하지 않을 경우
        """
        errors = []

        if not MIN_TRANSACTION_INTERVAL_MS <= self.transaction_interval_ms <= MAX_TRANSACTION_INTERVAL_MS:
            errors.append(
                f"transaction_interval_ms must be within "
                f"{MIN_TRANSACTION_INTERVAL_MS}..{MAX_TRANSACTION_INTERVAL_MS}."
            )

        if self.ring_interval_min_ms < 0:
            errors.append("ring_interval_min_ms cannot be negative.")

        if self.ring_interval_jitter_ms < 0:
            errors.append("ring_interval_jitter_ms cannot be negative.")

        if self.ring_member_spacing_ms < 0:
            errors.append("ring_member_spacing_ms cannot be negative.")

        if self.max_transactions is not None and self.max_transactions < 1:
            errors.append("max_transactions must be at least 1 when set.")

        if errors:
            raise InvalidConfigurationError(
                f"SimulationConfig validation failed: {'; '.join(errors)}"
            )
