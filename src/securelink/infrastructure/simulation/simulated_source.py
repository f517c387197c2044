"""
SimulatedTransactionSource - 시뮬레이터 기반 거래 소스

TransactionSimulator로 정상 거래를 일정 간격으로 만들고, 주기적으로
사기 조직 거래 묶음을 끼워 넣어 TransactionSource 포트로 제공합니다.
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from typing import Callable, Optional

from securelink.domain.exceptions import ConnectionClosedError
from securelink.domain.models.connection_state import ConnectionState
from securelink.domain.models.detection_config import SimulationConfig
from securelink.domain.models.transaction import Transaction
from securelink.domain.ports.transaction_source import TransactionSource
from securelink.infrastructure.simulation.transaction_simulator import TransactionSimulator

logger = logging.getLogger(__name__)


class SimulatedTransactionSource(TransactionSource):
    """
    시뮬레이션 거래 소스

    스트림 규칙:
        - 매 transaction_interval_ms마다 정상 거래 1건
        - ring_interval_min_ms + U(0, ring_interval_jitter_ms)마다 사기 조직 묶음
          (묶음 내 거래 간격: ring_member_spacing_ms)
        - max_transactions가 설정되면 해당 건수 후 종료

    Attributes:
        _simulator: 거래 생성기
        _config: 시뮬레이션 설정
        _state: 현재 연결 상태
        _emitted: 지금까지 yield한 거래 수
    """

    def __init__(
        self,
        simulator: TransactionSimulator,
        config: Optional[SimulationConfig] = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            simulator: 거래 생성기
            config: 시뮬레이션 설정 (기본값: SimulationConfig())
            monotonic: 단조 시계 (초 단위, 테스트에서 주입 가능)
        """
        self._simulator = simulator
        self._config = config or SimulationConfig()
        self._monotonic = monotonic
        self._state = ConnectionState.DISCONNECTED
        self._emitted = 0

    async def connect(self) -> None:
        if self._state == ConnectionState.CONNECTED:
            logger.debug("Simulation already running, skipping connect()")
            return
        self._transition_state(ConnectionState.CONNECTING)
        self._transition_state(ConnectionState.CONNECTED)
        logger.info(
            f"Simulation started (interval={self._config.transaction_interval_ms}ms, "
            f"ring every >= {self._config.ring_interval_min_ms}ms)"
        )

    async def disconnect(self) -> None:
        if self._state == ConnectionState.DISCONNECTED:
            logger.debug("Simulation already stopped, skipping disconnect()")
            return
        self._transition_state(ConnectionState.DISCONNECTED)
        logger.info(f"Simulation stopped after {self._emitted} transactions")

    def get_connection_state(self) -> ConnectionState:
        return self._state

    @property
    def emitted_count(self) -> int:
        return self._emitted

    async def stream_transactions(self) -> AsyncIterator[Transaction]:
        """
        시뮬레이션 거래 스트림

        Yields:
            Transaction: 정상 거래 또는 사기 조직 거래

        Raises:
            ConnectionClosedError: connect() 전에 호출된 경우
        """
        if self._state != ConnectionState.CONNECTED:
            raise ConnectionClosedError("Simulation is not running, call connect() first")

        next_ring_at = self._monotonic() + self._next_ring_delay_seconds()

        while self._state == ConnectionState.CONNECTED and not self._limit_reached():
            if self._monotonic() >= next_ring_at:
                ring_transactions = self._simulator.generate_fraud_ring()
                logger.debug(f"Injecting fraud ring burst of {len(ring_transactions)} transactions")

                for index, transaction in enumerate(ring_transactions):
                    if self._limit_reached() or self._state != ConnectionState.CONNECTED:
                        break
                    if index:
                        await asyncio.sleep(self._config.ring_member_spacing_ms / 1000)
                    self._emitted += 1
                    yield transaction

                next_ring_at = self._monotonic() + self._next_ring_delay_seconds()
                continue

            self._emitted += 1
            yield self._simulator.generate_transaction()
            await asyncio.sleep(self._config.transaction_interval_ms / 1000)

    # ========== Private Methods ==========

    def _limit_reached(self) -> bool:
        limit = self._config.max_transactions
        return limit is not None and self._emitted >= limit

    def _next_ring_delay_seconds(self) -> float:
        jitter = self._simulator.random() * self._config.ring_interval_jitter_ms
        return (self._config.ring_interval_min_ms + jitter) / 1000

    def _transition_state(self, target_state: ConnectionState) -> None:
        self._state.validate_transition(target_state)
        logger.debug(f"State transition: {self._state.name} -> {target_state.name}")
        self._state = target_state
