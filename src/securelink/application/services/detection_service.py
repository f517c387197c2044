"""
사기 조직 탐지 오케스트레이션 서비스

TransactionSource와 AlertPublisher를 조합하여 실시간 탐지 파이프라인을 관리합니다.
"""

import asyncio
import dataclasses
import logging
from typing import Optional

from prometheus_client import Counter, Gauge

from securelink.domain.exceptions import (
    InvalidTransactionError,
    PublishException,
    SecureLinkException,
)
from securelink.domain.models.detection_config import DetectionConfig
from securelink.domain.models.detection_metrics import DetectionMetrics
from securelink.domain.models.fraud_ring import FraudRing
from securelink.domain.models.transaction import Transaction
from securelink.domain.ports.alert_publisher import AlertPublisher
from securelink.domain.ports.transaction_source import TransactionSource
from securelink.domain.services.merchant_risk_ledger import MerchantRiskLedger
from securelink.domain.services.ring_detection_engine import RingDetectionEngine

logger = logging.getLogger(__name__)

# ===== Prometheus Metrics =====
TRANSACTIONS_PROCESSED = Counter(
    "securelink_transactions_processed_total",
    "Number of transactions run through ring detection",
    ["bank"],
)

TRANSACTIONS_REJECTED = Counter(
    "securelink_transactions_rejected_total",
    "Number of transactions rejected by validation",
)

RINGS_DETECTED = Counter(
    "securelink_rings_detected_total",
    "Number of new cross-bank fraud rings",
)

RINGS_EXTENDED = Counter(
    "securelink_rings_extended_total",
    "Number of times an existing fraud ring gained a member",
)

ACTIVE_RINGS = Gauge(
    "securelink_active_rings",
    "Fraud rings created within the current detection window",
)


class DetectionService:
    """
    사기 조직 탐지 오케스트레이션 서비스

    TransactionSource로부터 거래를 받아 RingDetectionEngine으로 교차 은행 링을
    탐지하고, 링이 생성되거나 확장될 때마다 AlertPublisher로 스냅샷을 발행합니다.

    Features:
        - 비동기 거래 스트리밍
        - 가맹점 신뢰도 갱신 (MerchantRiskLedger)
        - 대시보드 지표 집계 (DetectionMetrics)
        - Graceful shutdown
        - 연속 발행 실패 시 서비스 중단

    Attributes:
        _source: 거래 소스
        _publisher: 경고 발행 대상
        _engine: 링 탐지 엔진
        _ledger: 가맹점 위험 원장
        _config: 탐지 설정
        _metrics: 누적 지표
        _ring_sizes: 링 id -> 마지막으로 집계한 멤버 수
        _running: 서비스 실행 상태
        _lock: start/stop 동시성 제어용 락
        _consecutive_failures: 연속 발행 실패 횟수
        _background_task: 백그라운드 태스크 참조
    """

    def __init__(
        self,
        source: TransactionSource,
        publisher: AlertPublisher,
        engine: Optional[RingDetectionEngine] = None,
        ledger: Optional[MerchantRiskLedger] = None,
        config: Optional[DetectionConfig] = None,
    ):
        """
        DetectionService 초기화

        Args:
            source: 거래 소스
            publisher: 경고 발행 대상
            engine: 링 탐지 엔진 (기본값: config.window_ms 윈도우의 새 엔진)
            ledger: 가맹점 위험 원장 (기본값: 기본 카탈로그로 생성)
            config: 탐지 설정 (기본값: DetectionConfig())
        """
        self._config = config or DetectionConfig()
        self._source = source
        self._publisher = publisher
        self._engine = engine or RingDetectionEngine(window_ms=self._config.window_ms)
        self._ledger = ledger or MerchantRiskLedger()

        self._metrics = DetectionMetrics()
        self._ring_sizes: dict[str, int] = {}

        self._running = False
        self._lock = asyncio.Lock()
        self._consecutive_failures = 0
        self._background_task: Optional[asyncio.Task] = None

    @property
    def engine(self) -> RingDetectionEngine:
        return self._engine

    @property
    def ledger(self) -> MerchantRiskLedger:
        return self._ledger

    async def start(self) -> None:
        """
        서비스 시작

        1. TransactionSource 연결
        2. 백그라운드에서 거래 수신 및 탐지 시작

        Raises:
            RuntimeError: 이미 실행 중인 경우
            ConnectionFailedError: 연결 실패 시
        """
        async with self._lock:
            if self._running:
                raise RuntimeError("Service is already running")

            logger.info("Starting DetectionService...")

            await self._source.connect()

            self._running = True
            self._background_task = asyncio.create_task(self._consume_and_detect())

            logger.info("DetectionService started successfully")

    async def wait(self) -> None:
        """
        백그라운드 탐지 루프가 끝날 때까지 대기합니다.

        소스 스트림이 끝나거나 (예: max_transactions 도달) 루프가 예외로 종료되면
        반환합니다. 루프의 예외는 그대로 전파됩니다.
        """
        if self._background_task is not None:
            await self._background_task

    async def stop(self) -> None:
        """
        서비스 중단 (Graceful Shutdown)

        1. 백그라운드 태스크 중단 대기
        2. Publisher flush (대기 중인 경고 전송)
        3. TransactionSource 연결 종료

        멱등성을 보장하여 여러 번 호출해도 안전합니다.
        """
        async with self._lock:
            if not self._running:
                logger.debug("Service is not running, skipping stop")
                return

            logger.info("Stopping DetectionService...")
            self._running = False

        try:
            if self._background_task:
                try:
                    await asyncio.wait_for(self._background_task, timeout=5.0)
                except asyncio.TimeoutError:
                    logger.warning("Background task did not finish within timeout, cancelling")
                    self._background_task.cancel()
                    try:
                        await self._background_task
                    except asyncio.CancelledError:
                        pass
                except SecureLinkException as e:
                    logger.error(f"Detection loop ended with error: {e}")

            try:
                remaining = await self._publisher.flush(timeout=5.0)
                if remaining:
                    logger.warning(f"{remaining} alerts were not delivered before shutdown")
            except PublishException as e:
                logger.error(f"Failed to flush publisher: {e}")

            try:
                await self._source.disconnect()
            except SecureLinkException as e:
                logger.error(f"Failed to disconnect source: {e}")

        finally:
            logger.info(
                f"DetectionService stopped "
                f"(analyzed={self._metrics.transactions_analyzed}, "
                f"rings={len(self._ring_sizes)})"
            )

    async def process_transaction(self, transaction: Transaction) -> Optional[FraudRing]:
        """
        거래 하나를 검증, 탐지, 집계하고 필요 시 경고를 발행합니다.

        Args:
            transaction: 처리할 거래

        Returns:
            생성되었거나 확장된 FraudRing, 해당 없거나 거부된 경우 None

        Raises:
            PublishException: 연속 발행 실패가 max_consecutive_failures에 도달한 경우
        """
        try:
            if not isinstance(transaction, Transaction):
                raise InvalidTransactionError(
                    f"Expected Transaction, got {type(transaction).__name__}"
                )
            transaction.validate()
            ring = self._engine.add_transaction(transaction)
        except InvalidTransactionError as e:
            self._metrics.rejected_transactions += 1
            TRANSACTIONS_REJECTED.inc()
            logger.warning(f"Rejected transaction: {e}")
            return None

        self._metrics.transactions_analyzed += 1
        self._metrics.fingerprints_generated += 1
        TRANSACTIONS_PROCESSED.labels(bank=transaction.bank.value).inc()

        if ring is None:
            self._ledger.record_transaction(transaction.merchant, transaction.amount)
            self._refresh_active_rings()
            return None

        new_members = self._collect_new_members(ring)
        self._refresh_active_rings()
        if not new_members:
            return ring

        now = self._engine.now()
        for member in new_members:
            self._ledger.record_fraud_incident(member.merchant, now)

        self._metrics.fraud_blocked += len(new_members)
        self._metrics.money_saved += sum(member.amount for member in new_members)

        await self._publish(ring)
        return ring

    def get_metrics(self) -> DetectionMetrics:
        """현재 지표의 사본 (활성 링 수는 조회 시점 기준으로 갱신)"""
        self._refresh_active_rings()
        return dataclasses.replace(self._metrics)

    def get_recent_rings(self, limit: Optional[int] = None) -> list[FraudRing]:
        """
        최근 생성된 링 목록

        Args:
            limit: 최대 개수 (기본값: config.recent_rings_limit)
        """
        if limit is None:
            limit = self._config.recent_rings_limit
        return self._engine.get_recent_rings(limit)

    def get_status(self) -> dict:
        """
        서비스 상태 조회

        Returns:
            상태 정보 딕셔너리:
                - running: 실행 중 여부
                - analyzed: 처리된 거래 수
                - rings: 탐지된 링 수
                - consecutive_failures: 연속 발행 실패 횟수
        """
        return {
            "running": self._running,
            "analyzed": self._metrics.transactions_analyzed,
            "rings": len(self._ring_sizes),
            "consecutive_failures": self._consecutive_failures,
        }

    # ========== Private Methods ==========

    async def _consume_and_detect(self) -> None:
        """
        거래 수신 및 탐지 메인 루프

        Raises:
            PublishException: 연속 발행 실패 한도 도달 시
            ConnectionException: 소스 연결을 복구할 수 없는 경우
        """
        logger.info("Starting detection loop...")

        try:
            async for transaction in self._source.stream_transactions():
                if not self._running:
                    logger.info("Service stopped, exiting detection loop")
                    break

                await self.process_transaction(transaction)

                analyzed = self._metrics.transactions_analyzed
                if analyzed and analyzed % 1000 == 0:
                    logger.info(f"Analyzed {analyzed} transactions")

        except SecureLinkException as e:
            logger.error(f"Error in detection loop: {e}")
            raise
        finally:
            logger.info("Detection loop ended")

    def _collect_new_members(self, ring: FraudRing) -> list[Transaction]:
        """지난 집계 이후 링에 새로 들어온 멤버를 반환하고 집계 크기를 갱신합니다."""
        previous = self._ring_sizes.get(ring.id)
        members = list(ring.transactions)
        self._ring_sizes[ring.id] = len(members)

        if previous is None:
            RINGS_DETECTED.inc()
            return members

        if len(members) > previous:
            RINGS_EXTENDED.inc()
        return members[previous:]

    async def _publish(self, ring: FraudRing) -> None:
        try:
            await self._publisher.publish(ring)
            self._consecutive_failures = 0

        except PublishException as e:
            self._consecutive_failures += 1
            logger.error(
                f"Failed to publish ring {ring.id} "
                f"(consecutive failures: {self._consecutive_failures}): {e}"
            )

            if self._consecutive_failures >= self._config.max_consecutive_failures:
                logger.critical(
                    f"Consecutive publish failures reached {self._config.max_consecutive_failures}. "
                    "Shutting down service."
                )
                raise

    def _refresh_active_rings(self) -> None:
        active = self._engine.get_active_ring_count()
        self._metrics.active_fraud_rings = active
        ACTIVE_RINGS.set(active)
