"""
거래 소스 연결 상태 모델

은행 거래 피드(WebSocket, 시뮬레이터)의 연결 상태와 상태 전환 검증 로직입니다.

상태 전환 다이어그램:
    DISCONNECTED --> CONNECTING --> CONNECTED
         ^                |             |
         |                v             v
         +------------- FAILED     RECONNECTING
                                   |    |    |
                                   v    v    v
                             CONNECTED FAILED DISCONNECTED
"""

from enum import Enum

from securelink.domain.exceptions import InvalidTransitionError


class ConnectionState(Enum):
    """
    거래 소스 연결 상태

    Attributes:
        DISCONNECTED: 연결되지 않은 상태 (초기 상태)
        CONNECTING: 연결 시도 중
        CONNECTED: 연결 완료, 거래 수신 가능
        RECONNECTING: 연결 끊김 후 재연결 시도 중
        FAILED: 연결 실패 (재시도 전 정리 필요)

    Examples:
        >>> ConnectionState.DISCONNECTED.is_valid_transition(ConnectionState.CONNECTING)
        True
        >>> ConnectionState.DISCONNECTED.is_valid_transition(ConnectionState.CONNECTED)
        False
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"

    @classmethod
    def _get_valid_transitions(cls) -> dict["ConnectionState", set["ConnectionState"]]:
        """현재 상태별 전환 가능한 상태 매트릭스"""
        return {
            cls.DISCONNECTED: {cls.CONNECTING},
            cls.CONNECTING: {cls.CONNECTED, cls.FAILED},
            cls.CONNECTED: {cls.DISCONNECTED, cls.RECONNECTING, cls.FAILED},
            cls.RECONNECTING: {cls.CONNECTED, cls.FAILED, cls.DISCONNECTED},
            cls.FAILED: {cls.DISCONNECTED},
        }

    def is_valid_transition(self, target: "ConnectionState") -> bool:
        """
        특정 상태로의 전환이 가능한지 확인합니다.

        동일한 상태로의 전환은 항상 허용합니다 (멱등성).
        """
        if self == target:
            return True
        return target in self._get_valid_transitions().get(self, set())

    def validate_transition(self, target: "ConnectionState") -> None:
        """
        상태 전환 유효성 검증

        Raises:
            InvalidTransitionError: 허용되지 않는 전환인 경우
        """
        if not self.is_valid_transition(target):
            valid_transitions = self._get_valid_transitions().get(self, set())
            raise InvalidTransitionError(
                f"Invalid state transition: {self.name} -> {target.name}. "
                f"Valid transitions from {self.name} are: "
                f"{', '.join(sorted(s.name for s in valid_transitions))}"
            )
