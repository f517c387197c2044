"""
은행 거래 피드 WebSocket 커넥터

은행(또는 은행 게이트웨이)이 WebSocket으로 보내는 거래를 수신하여
지문이 계산된 Transaction으로 제공합니다.
- 연결 생명주기 관리 (connect, disconnect, reconnect)
- 자동 재연결 및 지수 백오프
- 구독 은행 필터링

피드 메시지 형식:
    - 구독 요청: {"type": "subscribe", "banks": ["HDFC", "SBI"]}
    - 거래: {"id": ..., "bank": "HDFC", "amount": ..., "timestamp": ..., ...}
    - 거래 묶음: [{...}, {...}]
    - 제어 메시지: {"type": "heartbeat"} / {"type": "subscribed", ...} (무시)
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from securelink.domain.exceptions import (
    ConnectionClosedError,
    ConnectionException,
    ConnectionFailedError,
    InvalidMessageError,
)
from securelink.domain.models.connection_state import ConnectionState
from securelink.domain.models.feed_config import FeedConfig
from securelink.domain.models.transaction import Transaction
from securelink.domain.ports.transaction_source import TransactionSource
from securelink.infrastructure.serialization.json_utils import json_dumps, json_loads
from securelink.infrastructure.serialization.transaction_mapper import transaction_from_dict

logger = logging.getLogger(__name__)

CONTROL_MESSAGE_TYPES = frozenset({"heartbeat", "subscribed", "ack"})

# pong 미수신 시 연결 종료까지의 대기 시간 (초)
PING_TIMEOUT_SECONDS = 30


class BankFeedConnector(TransactionSource):
    """
    은행 거래 피드 커넥터

    Attributes:
        _config: 피드 연결 설정
        _state: 현재 연결 상태
        _websocket: WebSocket 연결 객체
        _reconnect_attempts: 현재까지의 재연결 시도 횟수
        _connect_lock: 동시 연결/해제 방지를 위한 락
        _skipped: 파싱 실패 또는 구독하지 않은 은행이라 건너뛴 메시지 수
    """

    def __init__(self, config: FeedConfig) -> None:
        self._config = config
        self._state = ConnectionState.DISCONNECTED
        self._websocket: ClientConnection | None = None
        self._reconnect_attempts = 0
        self._connect_lock = asyncio.Lock()
        self._skipped = 0

        logger.info(f"Initialized BankFeedConnector for {config}")

    @property
    def skipped_count(self) -> int:
        return self._skipped

    async def connect(self) -> None:
        """
        피드 WebSocket 연결을 수립하고 구독 요청을 보냅니다.

        이미 CONNECTED 상태면 즉시 반환합니다. 동시 호출은 락으로 직렬화되며,
        락을 획득한 뒤 상태를 다시 확인합니다.

        Raises:
            ConnectionFailedError: 연결 수립 또는 구독 요청에 실패한 경우
        """
        if self._state == ConnectionState.CONNECTED:
            logger.debug("Already connected, skipping connect()")
            return

        async with self._connect_lock:
            if self._state == ConnectionState.CONNECTED:
                logger.debug("Already connected (double-check), skipping connect()")
                return

            try:
                if self._state == ConnectionState.FAILED:
                    self._transition_state(ConnectionState.DISCONNECTED)
                self._transition_state(ConnectionState.CONNECTING)

                logger.info(f"Connecting to {self._config.websocket_url}...")
                self._websocket = await connect(
                    self._config.websocket_url,
                    ping_interval=self._config.ping_interval_seconds,
                    ping_timeout=PING_TIMEOUT_SECONDS,
                )

                await self._send_subscription_message()

                self._transition_state(ConnectionState.CONNECTED)
                self._reconnect_attempts = 0

                logger.info(f"Successfully connected to {self._config.feed_name}")

            except Exception as e:
                logger.error(f"Failed to connect: {e}", exc_info=True)
                self._transition_state(ConnectionState.FAILED)
                await self._cleanup()
                raise ConnectionFailedError(
                    f"Failed to connect to {self._config.websocket_url}", cause=e
                )

    async def disconnect(self) -> None:
        """WebSocket 연결을 종료합니다. 이미 DISCONNECTED 상태면 아무것도 하지 않습니다."""
        if self._state == ConnectionState.DISCONNECTED:
            logger.debug("Already disconnected, skipping disconnect()")
            return

        async with self._connect_lock:
            if self._state == ConnectionState.DISCONNECTED:
                logger.debug("Already disconnected (double-check), skipping disconnect()")
                return

            logger.info(f"Disconnecting from {self._config.feed_name}...")
            await self._cleanup()
            self._transition_state(ConnectionState.DISCONNECTED)
            logger.info(f"Disconnected from {self._config.feed_name}")

    def get_connection_state(self) -> ConnectionState:
        return self._state

    async def stream_transactions(self) -> AsyncIterator[Transaction]:
        """
        피드로부터 거래 스트림을 제공합니다.

        연결이 끊기면 자동으로 재연결을 시도합니다. 해석할 수 없는 메시지는
        경고 로그 후 건너뛰며 연결을 유지합니다.

        Yields:
            Transaction: 구독한 은행의 검증된 거래

        Raises:
            ConnectionClosedError: 재연결 시도가 최대 횟수를 초과한 경우
        """
        while True:
            try:
                if self._state != ConnectionState.CONNECTED:
                    await self.connect()

                if self._websocket is None:
                    raise ConnectionClosedError("WebSocket is not connected")

                raw_message = await self._websocket.recv()

                for transaction in self._parse_message(raw_message):
                    yield transaction

            except asyncio.CancelledError:
                logger.info("Stream cancelled, shutting down gracefully")
                raise

            except ConnectionClosed as e:
                logger.warning(f"WebSocket connection closed: {e}")
                await self._handle_connection_closed()

            except (OSError, asyncio.TimeoutError) as e:
                logger.warning(f"Network/Timeout error: {e}")
                await self._handle_connection_closed()

            except ConnectionFailedError as e:
                logger.warning(f"Connection attempt failed: {e}")
                await self._handle_connection_closed()

    # ========== Private Methods: Messages ==========

    async def _send_subscription_message(self) -> None:
        """
        구독할 은행 목록을 피드에 전송합니다.

        Raises:
            ConnectionException: 구독 메시지 전송에 실패한 경우
        """
        if self._websocket is None:
            raise ConnectionException("WebSocket is not connected")

        banks = sorted(bank.value for bank in self._config.subscribed_banks)
        await self._websocket.send(json_dumps({"type": "subscribe", "banks": banks}))
        logger.debug(f"Sent subscription for banks: {banks}")

    def _parse_message(self, raw_message: Any) -> list[Transaction]:
        """
        원시 메시지를 Transaction 목록으로 변환합니다.

        제어 메시지, 잘못된 페이로드, 구독하지 않은 은행의 거래는 결과에서 제외됩니다.
        """
        try:
            parsed = json_loads(raw_message)
        except ValueError as e:
            self._skipped += 1
            logger.warning(f"Failed to decode JSON message: {e}")
            return []

        if isinstance(parsed, dict):
            if parsed.get("type") in CONTROL_MESSAGE_TYPES:
                logger.debug(f"Control message: {parsed.get('type')}")
                return []
            payloads = [parsed]
        elif isinstance(parsed, list):
            payloads = parsed
        else:
            self._skipped += 1
            logger.warning(f"Unexpected message type: {type(parsed).__name__}")
            return []

        transactions = []
        for payload in payloads:
            try:
                transaction = transaction_from_dict(payload)
            except InvalidMessageError as e:
                self._skipped += 1
                logger.warning(f"Skipping invalid transaction message: {e}")
                continue

            if transaction.bank not in self._config.subscribed_banks:
                self._skipped += 1
                logger.debug(f"Received transaction for unsubscribed bank: {transaction.bank.value}")
                continue

            transactions.append(transaction)

        return transactions

    # ========== Private Methods: Connection Management ==========

    def _transition_state(self, target_state: ConnectionState) -> None:
        self._state.validate_transition(target_state)
        logger.debug(f"State transition: {self._state.name} -> {target_state.name}")
        self._state = target_state

    async def _cleanup(self) -> None:
        if self._websocket is not None:
            try:
                await self._websocket.close()
            except (ConnectionClosed, OSError) as e:
                logger.warning(f"Error closing WebSocket: {e}")
            self._websocket = None

    # ========== Private Methods: Reconnection ==========

    async def _handle_connection_closed(self) -> None:
        """
        연결 종료 상황을 처리하고 재연결을 시도합니다.

        Raises:
            ConnectionClosedError: 최대 재연결 시도 횟수를 초과한 경우
        """
        if self._state == ConnectionState.CONNECTED:
            self._transition_state(ConnectionState.RECONNECTING)

        await self._cleanup()

        while self._should_attempt_reconnect():
            self._reconnect_attempts += 1
            delay = self._calculate_backoff_delay()

            logger.info(
                f"Reconnection attempt {self._reconnect_attempts}/"
                f"{self._config.max_reconnect_attempts} in {delay:.2f}s..."
            )
            await asyncio.sleep(delay)

            if self._state != ConnectionState.DISCONNECTED:
                self._transition_state(ConnectionState.DISCONNECTED)

            try:
                await self.connect()
                logger.info("Reconnection successful")
                return
            except ConnectionFailedError:
                # connect()가 실패하면 상태는 FAILED로 남음
                logger.warning(f"Reconnection attempt {self._reconnect_attempts} failed")

        if self._state != ConnectionState.DISCONNECTED:
            self._transition_state(ConnectionState.FAILED)
        raise ConnectionClosedError(
            f"Failed to reconnect to {self._config.feed_name} "
            f"after {self._reconnect_attempts} attempts"
        )

    def _should_attempt_reconnect(self) -> bool:
        if self._config.is_infinite_reconnect():
            return True
        return self._reconnect_attempts < self._config.max_reconnect_attempts

    def _calculate_backoff_delay(self) -> float:
        """지수 백오프: 1, 2, 4, ... 초 (exponential_backoff_max_seconds 상한)"""
        delay = min(
            2 ** (self._reconnect_attempts - 1),
            self._config.exponential_backoff_max_seconds,
        )
        return float(delay)
