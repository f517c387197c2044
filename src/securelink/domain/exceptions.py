"""
SecureLink 예외 정의

이 모듈은 교차 은행 사기 탐지 시스템에서 발생할 수 있는 모든 예외를 정의합니다.
모든 예외는 명확한 계층 구조를 가지며, 컨텍스트 정보를 포함하고
예외 체이닝(__cause__)을 지원합니다.

예외 계층 구조:
    Exception
    └── SecureLinkException (기본 예외)
        ├── ValidationException (검증 실패)
        │   ├── InvalidTransactionError (잘못된 거래 입력)
        │   ├── InvalidMessageError (해석 불가능한 피드 메시지)
        │   ├── InvalidConfigurationError (잘못된 설정)
        │   └── InvalidTransitionError (허용되지 않는 상태 전환)
        ├── ConnectionException (피드 연결 관련)
        └── PublishException (경고 발행 실패)

"사기 없음"은 예외가 아니라 None 결과입니다.
"""


class SecureLinkException(Exception):
    """
    SecureLink의 기본 예외 클래스

    이 예외를 catch하면 SecureLink의 모든 예외를 처리할 수 있습니다.

    Attributes:
        message: 예외 메시지 (컨텍스트 정보 포함)

    Examples:
        >>> try:
        ...     raise ValueError("bad payload")
        ... except ValueError as e:
        ...     raise SecureLinkException("Failed to decode transaction", cause=e)
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        """
        Args:
            message: 예외 메시지. 가능한 많은 컨텍스트 정보를 포함해야 합니다.
                    (예: "Transaction TXN1 rejected: amount must be positive")
            cause: 이 예외를 발생시킨 원본 예외 (선택 사항)
        """
        self.message = message
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """예외를 문자열로 표현"""
        if self.__cause__:
            return f"{self.message} (Caused by: {self.__cause__})"
        return self.message


class ValidationException(SecureLinkException):
    """
    데이터 검증 실패 예외

    잘못된 거래 레코드, 해석할 수 없는 피드 메시지, 잘못된 설정값 등
    입력 계약 위반을 나타냅니다.
    """

    pass


class InvalidTransactionError(ValidationException):
    """
    거래 레코드가 계약을 위반했음을 나타냅니다.

    탐지 엔진 경계에서 발생하는 유일한 "invalid input" 에러 종류입니다.
    """

    pass


class InvalidMessageError(ValidationException):
    """수신된 피드 메시지의 형식이 잘못되었거나 필수 필드가 누락되었음을 나타냅니다."""

    pass


class InvalidConfigurationError(ValidationException):
    """잘못된 설정 값을 나타냅니다."""

    pass


class InvalidTransitionError(ValidationException):
    """상태 머신에서 허용되지 않는 상태 전환을 나타냅니다."""

    pass


class ConnectionException(SecureLinkException):
    """
    연결 관련 예외

    은행 거래 피드(WebSocket) 연결 실패, 재연결 실패 등을 나타냅니다.
    """

    pass


class ConnectionFailedError(ConnectionException):
    """연결 시도 실패를 나타냅니다."""

    pass


class ConnectionClosedError(ConnectionException):
    """예상치 못하게 연결이 종료되었음을 나타냅니다."""

    pass


class PublishException(SecureLinkException):
    """
    경고 발행 실패 예외

    Kafka 브로커 연결 실패, 전송 타임아웃, 직렬화 실패 등
    사기 조직(FraudRing) 경고를 발행하는 과정의 에러를 나타냅니다.
    """

    pass
