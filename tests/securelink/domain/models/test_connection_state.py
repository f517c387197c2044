"""
ConnectionState 연결 상태 Enum 테스트

거래 소스의 연결 상태 전환 규칙을 검증합니다.
"""

import pytest

from securelink.domain.exceptions import InvalidTransitionError, ValidationException
from securelink.domain.models.connection_state import ConnectionState


class TestConnectionStateTransitions:
    """ConnectionState 상태 전환 규칙 테스트"""

    @pytest.mark.parametrize(
        "source, target",
        [
            (ConnectionState.DISCONNECTED, ConnectionState.CONNECTING),
            (ConnectionState.CONNECTING, ConnectionState.CONNECTED),
            (ConnectionState.CONNECTING, ConnectionState.FAILED),
            (ConnectionState.CONNECTED, ConnectionState.DISCONNECTED),
            (ConnectionState.CONNECTED, ConnectionState.RECONNECTING),
            (ConnectionState.CONNECTED, ConnectionState.FAILED),
            (ConnectionState.RECONNECTING, ConnectionState.CONNECTED),
            (ConnectionState.RECONNECTING, ConnectionState.DISCONNECTED),
            (ConnectionState.RECONNECTING, ConnectionState.FAILED),
            (ConnectionState.FAILED, ConnectionState.DISCONNECTED),
        ],
    )
    def test_allowed_transitions(self, source, target) -> None:
        assert source.is_valid_transition(target)

    @pytest.mark.parametrize(
        "source, target",
        [
            (ConnectionState.FAILED, ConnectionState.CONNECTING),
            (ConnectionState.CONNECTED, ConnectionState.CONNECTING),
            (ConnectionState.DISCONNECTED, ConnectionState.RECONNECTING),
            (ConnectionState.DISCONNECTED, ConnectionState.CONNECTED),
            (ConnectionState.RECONNECTING, ConnectionState.CONNECTING),
        ],
    )
    def test_forbidden_transitions(self, source, target) -> None:
        assert not source.is_valid_transition(target)

    def test_same_state_transition_allowed(self) -> None:
        for state in ConnectionState:
            assert state.is_valid_transition(state)

    def test_validate_transition_failure_lists_valid_targets(self) -> None:
        """
        GIVEN: FAILED 상태
        WHEN: CONNECTING으로 전환을 검증하면
        THEN: 허용되는 전환 목록을 담은 InvalidTransitionError가 발생해야 함
        """
        with pytest.raises(InvalidTransitionError) as exc_info:
            ConnectionState.FAILED.validate_transition(ConnectionState.CONNECTING)

        assert "FAILED -> CONNECTING" in str(exc_info.value)
        assert "DISCONNECTED" in str(exc_info.value)
        assert isinstance(exc_info.value, ValidationException)

    def test_validate_transition_success(self) -> None:
        ConnectionState.CONNECTING.validate_transition(ConnectionState.CONNECTED)
