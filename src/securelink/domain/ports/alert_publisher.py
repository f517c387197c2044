"""
경고 발행자 포트 인터페이스

탐지된 사기 조직(FraudRing)을 대시보드/메시지 브로커로 발행하는 추상 인터페이스입니다.
Domain Layer는 이 인터페이스에만 의존하며, Kafka 등 실제 구현은 Infrastructure Layer에서 제공됩니다.
"""

from abc import ABC, abstractmethod

from securelink.domain.models.fraud_ring import FraudRing


class AlertPublisher(ABC):
    """
    경고 발행자 포트 인터페이스

    Implementation Requirements:
        1. publish()는 링의 현재 스냅샷(멤버 포함)을 발행해야 함
        2. flush()는 버퍼의 모든 경고를 실제로 전송해야 함
        3. close()는 멱등해야 하며 모든 리소스를 정리해야 함
        4. publish() 실패 시 PublishException을 발생시켜야 함
    """

    @abstractmethod
    async def publish(self, ring: FraudRing) -> None:
        """
        경고 발행

        링이 생성되거나 확장될 때마다 호출됩니다. 같은 링이 여러 번 발행될 수 있으며,
        소비자는 ring.id로 최신 스냅샷을 식별합니다.

        Raises:
            PublishException: 발행 실패 시
        """
        pass

    @abstractmethod
    async def flush(self, timeout: float = 5.0) -> int:
        """
        버퍼 플러시

        Returns:
            전송되지 못한 경고 수 (0이면 모두 성공)

        Raises:
            PublishException: 플러시 실패 시
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """미전송 경고를 전송하고 리소스를 정리합니다."""
        pass
