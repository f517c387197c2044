"""
SecureLink 예외 계층 테스트
"""

import pytest

from securelink.domain.exceptions import (
    ConnectionClosedError,
    ConnectionException,
    ConnectionFailedError,
    InvalidConfigurationError,
    InvalidMessageError,
    InvalidTransactionError,
    InvalidTransitionError,
    PublishException,
    SecureLinkException,
    ValidationException,
)


class TestSecureLinkException:
    def test_message_only(self) -> None:
        exc = SecureLinkException("Test error")

        assert isinstance(exc, Exception)
        assert str(exc) == "Test error"
        assert exc.message == "Test error"

    def test_exception_chaining(self) -> None:
        """
        GIVEN: 원본 예외
        WHEN: cause로 SecureLinkException을 생성하면
        THEN: __cause__가 설정되고 문자열에 원인이 포함되어야 함
        """
        original = ValueError("bad payload")

        exc = SecureLinkException("Failed to decode transaction", cause=original)

        assert exc.__cause__ is original
        assert str(exc) == "Failed to decode transaction (Caused by: bad payload)"


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_type, parent",
        [
            (ValidationException, SecureLinkException),
            (InvalidTransactionError, ValidationException),
            (InvalidMessageError, ValidationException),
            (InvalidConfigurationError, ValidationException),
            (InvalidTransitionError, ValidationException),
            (ConnectionException, SecureLinkException),
            (ConnectionFailedError, ConnectionException),
            (ConnectionClosedError, ConnectionException),
            (PublishException, SecureLinkException),
        ],
    )
    def test_inheritance(self, exc_type, parent) -> None:
        assert issubclass(exc_type, parent)

    def test_catch_all_with_base_exception(self) -> None:
        with pytest.raises(SecureLinkException):
            raise PublishException("Failed to publish ring RING1")
