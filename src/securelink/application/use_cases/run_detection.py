"""
사기 조직 탐지 실행 유즈케이스

거래 소스(시뮬레이터 또는 은행 WebSocket 피드)를 탐지 서비스에 연결하고,
탐지된 링을 Kafka 또는 로그로 발행하는 전체 파이프라인을 관리합니다.
"""

import asyncio
import logging
from typing import Any, Iterable, Optional

from securelink.application.services.detection_service import DetectionService
from securelink.domain.exceptions import ValidationException
from securelink.domain.models.detection_config import DetectionConfig, SimulationConfig
from securelink.domain.models.detection_metrics import DetectionMetrics
from securelink.domain.ports.alert_publisher import AlertPublisher
from securelink.infrastructure.alerts.logging_publisher import LoggingAlertPublisher
from securelink.infrastructure.connectors.feed_config import create_bank_feed_config
from securelink.infrastructure.connectors.websocket_feed import BankFeedConnector
from securelink.infrastructure.kafka.kafka_publisher import KafkaAlertPublisher
from securelink.infrastructure.simulation.simulated_source import SimulatedTransactionSource
from securelink.infrastructure.simulation.transaction_simulator import TransactionSimulator

logger = logging.getLogger(__name__)


def _create_publisher(kafka_config: Optional[dict[str, Any]]) -> AlertPublisher:
    if kafka_config is None:
        logger.info("No Kafka config given, ring alerts will be logged only")
        return LoggingAlertPublisher()
    return KafkaAlertPublisher(kafka_config)


async def run_simulated_detection(
    simulation_config: Optional[SimulationConfig] = None,
    kafka_config: Optional[dict[str, Any]] = None,
    detection_config: Optional[DetectionConfig] = None,
) -> DetectionMetrics:
    """
    시뮬레이션 거래로 탐지 파이프라인을 실행합니다.

    max_transactions가 설정되면 해당 건수를 처리한 뒤 종료하고,
    설정되지 않으면 외부에서 취소될 때까지 실행됩니다.

    Args:
        simulation_config: 시뮬레이션 설정 (기본값: SimulationConfig())
        kafka_config: Kafka Producer 설정. None이면 링 경고를 로그로만 남깁니다.
        detection_config: 탐지 설정 (기본값: DetectionConfig())

    Returns:
        종료 시점의 DetectionMetrics

    Examples:
        >>> metrics = await run_simulated_detection(SimulationConfig(max_transactions=100))
        >>> metrics.transactions_analyzed
        100
    """
    simulation_config = simulation_config or SimulationConfig()

    source = SimulatedTransactionSource(TransactionSimulator(), simulation_config)
    publisher = _create_publisher(kafka_config)
    service = DetectionService(source, publisher, config=detection_config)

    try:
        await service.start()
        logger.info("Simulated detection started successfully")
        await service.wait()
    except asyncio.CancelledError:
        logger.info("Simulated detection cancelled, stopping service...")
        raise
    finally:
        await service.stop()
        await publisher.close()

    metrics = service.get_metrics()
    logger.info(
        f"Simulation finished: analyzed={metrics.transactions_analyzed} "
        f"blocked={metrics.fraud_blocked} saved={metrics.money_saved:.0f}"
    )
    return metrics


async def stream_bank_feed(
    websocket_url: str,
    banks: Iterable[str],
    kafka_config: dict[str, Any],
    detection_config: Optional[DetectionConfig] = None,
) -> None:
    """
    은행 WebSocket 피드 탐지 유즈케이스

    피드로부터 거래를 수신하여 링을 탐지하고 Kafka로 경고를 발행합니다.
    이 함수는 외부에서 중단되거나 복구 불가능한 오류가 날 때까지 실행됩니다.

    Args:
        websocket_url: 은행 거래 피드 WebSocket URL
        banks: 수신할 은행 코드 (예: {"HDFC", "SBI"})
        kafka_config: Kafka Producer 설정 딕셔너리

    Raises:
        ValidationException: banks가 비어있거나 설정이 잘못된 경우
        ConnectionFailedError: 피드 연결 실패 시
        PublishException: Kafka 발행 실패가 연속 한도에 도달한 경우

    Examples:
        >>> kafka_config = {"bootstrap.servers": "localhost:9092"}
        >>> await stream_bank_feed("wss://feed.example.com/tx", {"HDFC", "SBI"}, kafka_config)
    """
    banks = set(banks)
    if not banks:
        raise ValidationException("banks cannot be empty")

    feed_config = create_bank_feed_config(websocket_url, banks)
    logger.info(f"Starting bank feed detection: {feed_config}")

    connector = BankFeedConnector(feed_config)
    publisher = KafkaAlertPublisher(kafka_config)
    service = DetectionService(connector, publisher, config=detection_config)

    try:
        await service.start()
        logger.info("Bank feed detection started successfully")
        await service.wait()
    except asyncio.CancelledError:
        logger.info("Bank feed detection cancelled, stopping service...")
        raise
    except Exception as e:
        logger.error(f"Unexpected error in bank feed detection: {e}")
        raise
    finally:
        logger.info("Stopping bank feed detection...")
        await service.stop()
        await publisher.close()
        logger.info("Bank feed detection stopped")
