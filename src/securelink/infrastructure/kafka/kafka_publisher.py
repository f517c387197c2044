"""
Kafka 경고 발행자 구현

탐지된 FraudRing 스냅샷을 JSON으로 직렬화하여 Kafka로 발행합니다.
AlertPublisher 인터페이스를 구현하며, confluent-kafka 라이브러리를 사용합니다.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from confluent_kafka import KafkaException, Producer
from prometheus_client import Counter, Gauge, Histogram

from securelink.domain.exceptions import PublishException
from securelink.domain.models.fraud_ring import FraudRing
from securelink.domain.ports.alert_publisher import AlertPublisher
from securelink.infrastructure.serialization.json_utils import json_dumps_bytes
from securelink.infrastructure.serialization.transaction_mapper import ring_to_dict

logger = logging.getLogger(__name__)

DEFAULT_ALERT_TOPIC = "securelink.fraud-rings.v1"
MAX_BUFFER_RETRIES = 10

# ===== Prometheus Metrics =====
# 주의: 모듈 단위 등록. 테스트 프로세스 내 중복 import 환경이 아니라고 가정합니다.
ALERT_PUBLISH_ATTEMPTS = Counter(
    "securelink_alert_publish_attempts_total",
    "Number of fraud ring alert publish attempts",
    ["topic"],
)

ALERT_PUBLISH_BUFFER_FULL = Counter(
    "securelink_alert_buffer_full_total",
    "Number of BufferError occurrences during alert publish",
    ["topic"],
)

ALERT_QUEUE_LENGTH = Gauge(
    "securelink_alert_queue_length",
    "Current length of alert producer internal queue",
)

ALERT_DELIVERY_RESULTS = Counter(
    "securelink_alert_delivery_results_total",
    "Alert delivery results labeled by topic/result/error_code",
    ["topic", "result", "error_code"],
)

ALERT_PUBLISH_LATENCY = Histogram(
    "securelink_alert_publish_latency_seconds",
    "Latency of alert publish operations",
    ["topic"],
)


class KafkaAlertPublisher(AlertPublisher):
    """
    Kafka 경고 발행자

    파티션 키는 링 지문입니다. 같은 링의 스냅샷은 같은 파티션으로 전송되어
    생성 -> 확장 순서가 보장됩니다.

    Attributes:
        _config: Kafka Producer 설정
        _topic: 경고 토픽
        _producer: confluent-kafka Producer 인스턴스
    """

    def __init__(self, config: Dict[str, Any], topic: str = DEFAULT_ALERT_TOPIC) -> None:
        """
        Args:
            config: Kafka Producer 설정 딕셔너리
                - bootstrap.servers: Kafka 브로커 주소 (필수)
                - 기타 confluent-kafka Producer 설정
            topic: 경고를 발행할 토픽 이름

        Raises:
            ValueError: 필수 설정값이 누락된 경우
            PublishException: Producer 생성 실패 시
        """
        if "bootstrap.servers" not in config:
            raise ValueError("bootstrap.servers is required in Kafka config")

        # 경고는 건수가 적으므로 지연보다 내구성을 우선합니다.
        recommended_defaults: Dict[str, Any] = {
            "acks": "all",
            "linger.ms": 5,
            "enable.idempotence": True,
        }

        self._config = {**recommended_defaults, **config}
        self._config["error_cb"] = self._error_callback
        self._topic = topic

        try:
            self._producer: Optional[Producer] = Producer(self._config)
            logger.info(
                f"Initialized Kafka alert publisher: {config.get('bootstrap.servers')} -> {topic}"
            )
        except Exception as e:
            logger.error(f"Failed to initialize Kafka Producer: {e}", exc_info=True)
            raise PublishException("Failed to initialize Kafka Producer", cause=e)

    @property
    def topic(self) -> str:
        return self._topic

    async def publish(self, ring: FraudRing) -> None:
        """
        링 스냅샷을 Kafka로 발행합니다.

        Raises:
            PublishException: 발행에 실패한 경우
        """
        if self._producer is None:
            raise PublishException(f"Cannot publish ring {ring.id}: producer is closed")

        topic = self._topic
        ALERT_PUBLISH_ATTEMPTS.labels(topic=topic).inc()

        try:
            with ALERT_PUBLISH_LATENCY.labels(topic=topic).time():
                value = json_dumps_bytes(ring_to_dict(ring))
                key = ring.fingerprint.encode("utf-8")

                retry_count = 0
                while retry_count < MAX_BUFFER_RETRIES:
                    try:
                        self._producer.produce(
                            topic=topic,
                            key=key,
                            value=value,
                            callback=self._delivery_callback,
                        )
                        break
                    except BufferError:
                        # 큐가 가득 찬 경우 poll()로 공간 확보
                        logger.debug(f"Buffer full, polling... (retry {retry_count + 1})")
                        ALERT_PUBLISH_BUFFER_FULL.labels(topic=topic).inc()
                        self._producer.poll(0.1)
                        retry_count += 1
                        await asyncio.sleep(0.01)

                if retry_count >= MAX_BUFFER_RETRIES:
                    raise PublishException(
                        f"Failed to publish ring {ring.id} to {topic}: "
                        f"Buffer full after {MAX_BUFFER_RETRIES} retries"
                    )

                self._producer.poll(0)
                ALERT_QUEUE_LENGTH.set(len(self._producer))

            logger.debug(f"Published ring {ring.id} ({ring.size} transactions) to {topic}")

        except PublishException:
            raise

        except KafkaException as e:
            logger.error(f"Kafka error while publishing ring {ring.id}: {e}", exc_info=True)
            raise PublishException(f"Failed to publish ring {ring.id} to {topic}", cause=e)

        except Exception as e:
            logger.error(f"Unexpected error while publishing ring {ring.id}: {e}", exc_info=True)
            raise PublishException(f"Failed to publish ring {ring.id} to {topic}", cause=e)

    async def flush(self, timeout: float = 5.0) -> int:
        """
        대기 중인 모든 경고를 전송합니다.

        Returns:
            전송되지 못한 경고 수 (0이면 모두 성공)

        Raises:
            PublishException: flush 작업 중 오류가 발생한 경우
        """
        if self._producer is None:
            return 0

        try:
            remaining = self._producer.flush(timeout=timeout)
        except KafkaException as e:
            logger.error(f"Kafka error during flush: {e}", exc_info=True)
            raise PublishException("Failed to flush alerts", cause=e)

        if remaining > 0:
            logger.warning(f"Failed to flush {remaining} alerts within {timeout}s timeout")
        else:
            logger.debug("Successfully flushed all alerts")
        return remaining

    async def close(self) -> None:
        """Producer를 종료합니다. 종료 전에 대기 중인 경고를 flush합니다."""
        if self._producer is None:
            logger.debug("Alert publisher already closed")
            return

        try:
            remaining = await self.flush(timeout=10.0)
            if remaining > 0:
                logger.warning(f"Closed alert publisher with {remaining} unsent alerts")
        except PublishException as e:
            logger.error(f"Error while closing alert publisher: {e}")
        finally:
            self._producer = None
            logger.info("Kafka alert publisher closed")

    # ========== Private Methods ==========

    def _delivery_callback(self, err: Optional[Any], msg: Any) -> None:
        """경고 전송 성공/실패 콜백"""
        if err is not None:
            logger.error(f"Alert delivery failed: {err.str()} (error code: {err.code()})")
            ALERT_DELIVERY_RESULTS.labels(
                topic=self._topic, result="failure", error_code=str(err.code())
            ).inc()
        else:
            logger.debug(f"Alert delivered to {msg.topic()} [partition: {msg.partition()}]")
            ALERT_DELIVERY_RESULTS.labels(
                topic=self._topic, result="success", error_code="none"
            ).inc()

    def _error_callback(self, err: Any) -> None:
        """Kafka 에러 콜백"""
        logger.error(f"Kafka error: {err.str()} (error code: {err.code()})")

    # ========== Context Manager Support ==========

    async def __aenter__(self) -> "KafkaAlertPublisher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
