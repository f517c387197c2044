"""
로그 기반 경고 발행자

Kafka 없이 데모를 실행할 때 탐지된 링을 로그로 출력합니다.
"""

import logging

from securelink.domain.models.fraud_ring import FraudRing
from securelink.domain.ports.alert_publisher import AlertPublisher

logger = logging.getLogger(__name__)


class LoggingAlertPublisher(AlertPublisher):
    """탐지된 링을 WARNING 레벨 로그로 남기는 AlertPublisher"""

    def __init__(self) -> None:
        self.published_count = 0

    async def publish(self, ring: FraudRing) -> None:
        self.published_count += 1
        banks = ", ".join(bank.value for bank in ring.banks_involved)
        logger.warning(
            f"FRAUD RING ALERT {ring.id}: fingerprint={ring.fingerprint} "
            f"transactions={ring.size} banks=[{banks}] amount={ring.total_amount:.0f}"
        )

    async def flush(self, timeout: float = 5.0) -> int:
        return 0

    async def close(self) -> None:
        logger.debug(f"Logging alert publisher closed after {self.published_count} alerts")
