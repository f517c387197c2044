"""
거래 소스 포트 인터페이스

탐지 엔진에 거래를 공급하는 외부 생성기(시뮬레이터, 은행 WebSocket 피드)의
추상 인터페이스입니다. 도메인/애플리케이션 계층은 이 인터페이스에만 의존하며,
실제 구현은 Infrastructure Layer에서 제공됩니다.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from securelink.domain.models.connection_state import ConnectionState
from securelink.domain.models.transaction import Transaction


class TransactionSource(ABC):
    """
    거래 소스 포트 인터페이스

    Implementation Requirements:
        1. connect()와 disconnect()는 멱등(idempotent)해야 함
        2. stream_transactions()는 지문이 계산된 Transaction만 yield 해야 함
        3. 거래는 한 번에 하나씩 제공되며, 소비자가 처리를 끝낸 뒤 다음 거래를 요청함
        4. 모든 외부 예외는 Domain Layer의 예외로 변환되어야 함

    Examples:
        >>> source: TransactionSource = SimulatedTransactionSource(simulator, config)
        >>> await source.connect()
        >>> async for transaction in source.stream_transactions():
        ...     engine.add_transaction(transaction)
        >>> await source.disconnect()
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        소스에 연결

        Raises:
            ConnectionException: 연결 실패 시
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """소스 연결을 해제하고 리소스를 정리합니다."""
        pass

    @abstractmethod
    def stream_transactions(self) -> AsyncIterator[Transaction]:
        """
        거래 스트리밍

        Yields:
            Transaction: 지문이 계산된 거래

        Raises:
            ConnectionException: 복구할 수 없는 연결 끊김
        """
        pass

    @abstractmethod
    def get_connection_state(self) -> ConnectionState:
        """현재 연결 상태 조회"""
        pass
