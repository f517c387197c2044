"""
LoggingAlertPublisher 테스트
"""

import logging

import pytest

from securelink.domain.models.fraud_ring import FraudRing
from securelink.domain.models.transaction import Bank
from securelink.infrastructure.alerts.logging_publisher import LoggingAlertPublisher

FP = "0123456789ABCDEF0123456789ABCDEF"


@pytest.mark.asyncio
async def test_publish_logs_ring_alert(make_transaction, caplog) -> None:
    """
    GIVEN: 두 은행에 걸친 링
    WHEN: publish()를 호출하면
    THEN: 링 id, 지문, 은행이 담긴 WARNING 로그를 남겨야 함
    """
    ring = FraudRing(id="RING1", fingerprint=FP, timestamp=1000)
    ring.add_transaction(make_transaction("A", Bank.HDFC, FP))
    ring.add_transaction(make_transaction("B", Bank.ICICI, FP))
    publisher = LoggingAlertPublisher()

    with caplog.at_level(logging.WARNING):
        await publisher.publish(ring)

    assert "FRAUD RING ALERT RING1" in caplog.text
    assert "banks=[HDFC, ICICI]" in caplog.text
    assert publisher.published_count == 1
    assert await publisher.flush() == 0
    await publisher.close()
