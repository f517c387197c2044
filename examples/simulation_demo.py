"""
SecureLink 시뮬레이션 데모

시뮬레이션 거래를 탐지 서비스에 흘려보내고, 탐지된 사기 조직을 로그로 출력합니다.

사용법:
    python examples/simulation_demo.py [최대 거래 수]

    KAFKA_BOOTSTRAP_SERVERS 환경 변수가 있으면 경고를 Kafka로 발행합니다.
"""

import asyncio
import logging
import os
import signal
import sys

from securelink.application.services.detection_service import DetectionService
from securelink.domain.models.detection_config import SimulationConfig
from securelink.infrastructure.alerts.logging_publisher import LoggingAlertPublisher
from securelink.infrastructure.kafka.kafka_publisher import KafkaAlertPublisher
from securelink.infrastructure.simulation.simulated_source import SimulatedTransactionSource
from securelink.infrastructure.simulation.transaction_simulator import TransactionSimulator

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


async def main(max_transactions: int | None) -> None:
    # 데모에서는 링이 자주 나오도록 주기를 줄입니다.
    config = SimulationConfig(
        transaction_interval_ms=300,
        ring_interval_min_ms=5000,
        ring_interval_jitter_ms=5000,
        max_transactions=max_transactions,
    )

    bootstrap_servers = os.environ.get("KAFKA_BOOTSTRAP_SERVERS")
    if bootstrap_servers:
        publisher = KafkaAlertPublisher({"bootstrap.servers": bootstrap_servers})
    else:
        publisher = LoggingAlertPublisher()

    source = SimulatedTransactionSource(TransactionSimulator(), config)
    service = DetectionService(source, publisher)

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, shutdown_event.set)

    await service.start()
    logger.info("=" * 80)
    logger.info("SecureLink 시뮬레이션 시작 (Ctrl+C로 종료)")
    logger.info("=" * 80)

    finished = asyncio.create_task(service.wait())
    stopped = asyncio.create_task(shutdown_event.wait())
    try:
        await asyncio.wait({finished, stopped}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stopped.cancel()
        await service.stop()
        await publisher.close()

    metrics = service.get_metrics()
    logger.info("=" * 80)
    logger.info(f"분석한 거래: {metrics.transactions_analyzed}")
    logger.info(f"차단한 사기 거래: {metrics.fraud_blocked}")
    logger.info(f"보호한 금액: ₹{metrics.money_saved:,.0f}")
    logger.info(f"활성 사기 조직: {metrics.active_fraud_rings}")
    for ring in service.get_recent_rings():
        logger.info(f"  {ring}")
    logger.info("=" * 80)


if __name__ == "__main__":
    limit = int(sys.argv[1]) if len(sys.argv) > 1 else None
    asyncio.run(main(limit))
