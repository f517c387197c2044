"""
RingDetectionEngine - 교차 은행 사기 조직 탐지 엔진

최근 거래를 시간 윈도우 버퍼에 보관하고, 서로 다른 은행에서 같은 지문을 가진
거래가 나타나면 사기 조직(FraudRing)을 생성하거나 기존 링을 확장합니다.

탐지 로직:
    1. 거래를 버퍼에 추가
    2. now - window_ms 이전 거래를 버퍼에서 제거 (거래 시각이 아닌 처리 시각 기준)
    3. 같은 지문의 링이 이미 있으면 그 링에 추가하고 반환
    4. 없으면 버퍼에서 같은 지문 + 다른 은행 거래를 찾아 새 링 생성
    5. 조건을 만족하지 않으면 None

링의 "활성" 여부는 생성 시각만으로 판단합니다. 나중에 확장되어도
생성 시각이 윈도우를 벗어나면 활성 링 수에서 빠집니다.
"""

import logging
import threading
import time
import uuid
from typing import Callable, Optional

from securelink.domain.exceptions import InvalidTransactionError
from securelink.domain.models.detection_config import (
    DEFAULT_RECENT_RINGS_LIMIT,
    DEFAULT_WINDOW_MS,
)
from securelink.domain.models.fraud_ring import FraudRing
from securelink.domain.models.transaction import Transaction
from securelink.domain.services.fingerprint import fingerprints_match

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def current_time_ms() -> int:
    """현재 시각 (밀리초 단위 Unix timestamp)"""
    return int(time.time() * 1000)


class RingDetectionEngine:
    """
    교차 은행 링 탐지 엔진

    엔진 인스턴스 하나가 독립적인 탐지 도메인입니다. 인스턴스 간에 상태를
    공유하지 않으며, 버퍼와 링 목록은 인스턴스별 단일 락으로 보호합니다.

    Attributes:
        _window_ms: 버퍼 보관 및 활성 링 판정 기간 (밀리초)
        _clock: 현재 시각(ms)을 반환하는 함수 (테스트에서 주입 가능)
        _recent_transactions: 윈도우 내 최근 거래 버퍼
        _detected_rings: 지금까지 탐지한 모든 링 (생성 순서, 삭제 없음)
        _rings_by_fingerprint: 지문 -> 링 인덱스
        _lock: 상태 보호용 락
    """

    def __init__(
        self,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Args:
            window_ms: 윈도우 길이 (밀리초, 기본값: 60초)
            clock: 현재 시각(ms) 공급 함수 (기본값: 시스템 시계)
        """
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")

        self._window_ms = window_ms
        self._clock = clock or current_time_ms
        self._recent_transactions: list[Transaction] = []
        self._detected_rings: list[FraudRing] = []
        self._rings_by_fingerprint: dict[str, FraudRing] = {}
        self._lock = threading.Lock()

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def now(self) -> int:
        """엔진 시계 기준 현재 시각 (밀리초)"""
        return self._clock()

    @property
    def recent_transaction_count(self) -> int:
        """현재 버퍼에 남아 있는 거래 수 (마지막 정리 시점 기준)"""
        with self._lock:
            return len(self._recent_transactions)

    def add_transaction(self, transaction: Transaction) -> Optional[FraudRing]:
        """
        거래를 처리하여 링을 생성하거나 확장합니다.

        Args:
            transaction: 지문이 계산된 거래

        Returns:
            생성되었거나 확장된 FraudRing, 해당 없으면 None

        Raises:
            InvalidTransactionError: Transaction이 아닌 값이 전달된 경우
        """
        if not isinstance(transaction, Transaction):
            raise InvalidTransactionError(
                f"Expected Transaction, got {type(transaction).__name__}"
            )

        with self._lock:
            now = self._clock()

            self._recent_transactions.append(transaction)
            self._evict_expired(now)

            existing_ring = self._find_matching_ring(transaction)
            if existing_ring is not None:
                if existing_ring.add_transaction(transaction):
                    logger.info(
                        f"Extended ring {existing_ring.id} with {transaction.id} "
                        f"({transaction.bank.value}), size={existing_ring.size}"
                    )
                else:
                    logger.debug(
                        f"Transaction {transaction.id} already in ring {existing_ring.id}"
                    )
                return existing_ring

            matches = self._find_cross_bank_matches(transaction)
            if len(matches) < 2:
                return None

            ring = self._create_ring(matches, now)
            self._detected_rings.append(ring)
            self._rings_by_fingerprint[ring.fingerprint] = ring

            logger.info(
                f"Detected ring {ring.id}: {ring.size} transactions across "
                f"{', '.join(bank.value for bank in ring.banks_involved)}"
            )
            return ring

    def get_active_ring_count(self) -> int:
        """
        생성 시각이 현재 윈도우 안에 있는 링의 수를 반환합니다.

        확장 시각은 고려하지 않습니다.
        """
        with self._lock:
            cutoff = self._clock() - self._window_ms
            return sum(1 for ring in self._detected_rings if ring.timestamp > cutoff)

    def get_recent_rings(self, limit: int = DEFAULT_RECENT_RINGS_LIMIT) -> list[FraudRing]:
        """
        가장 최근에 생성된 링을 생성 순서대로 최대 limit개 반환합니다.

        Args:
            limit: 반환할 최대 개수 (0 이하이면 빈 목록)
        """
        if limit <= 0:
            return []
        with self._lock:
            return self._detected_rings[-limit:]

    def get_all_rings(self) -> list[FraudRing]:
        """탐지된 모든 링 (생성 순서)"""
        with self._lock:
            return list(self._detected_rings)

    def get_ring(self, fingerprint: str) -> Optional[FraudRing]:
        """지문에 해당하는 링을 반환합니다."""
        with self._lock:
            return self._rings_by_fingerprint.get(fingerprint)

    # ========== Private Methods ==========

    def _evict_expired(self, now: int) -> None:
        """now - window_ms 이전 거래를 버퍼에서 제거합니다."""
        cutoff = now - self._window_ms
        before = len(self._recent_transactions)
        self._recent_transactions = [
            tx for tx in self._recent_transactions if tx.timestamp > cutoff
        ]
        evicted = before - len(self._recent_transactions)
        if evicted:
            logger.debug(f"Evicted {evicted} transactions older than {cutoff}")

    def _find_matching_ring(self, transaction: Transaction) -> Optional[FraudRing]:
        ring = self._rings_by_fingerprint.get(transaction.fingerprint)
        if ring is not None and fingerprints_match(ring.fingerprint, transaction.fingerprint):
            return ring
        return None

    def _find_cross_bank_matches(self, transaction: Transaction) -> list[Transaction]:
        """
        트리거 거래와 같은 지문을 가진 다른 은행 거래를 수집합니다.

        트리거 거래가 항상 첫 번째이며, 이후 버퍼 순서를 따릅니다 (id 중복 제거).
        같은 은행 내 지문 충돌은 교차 은행 사기가 아니므로 제외합니다.
        """
        matches = [transaction]
        seen_ids = {transaction.id}

        for candidate in self._recent_transactions:
            if candidate.id in seen_ids:
                continue
            if not fingerprints_match(candidate.fingerprint, transaction.fingerprint):
                continue
            if candidate.bank == transaction.bank:
                continue
            matches.append(candidate)
            seen_ids.add(candidate.id)

        return matches

    def _create_ring(self, transactions: list[Transaction], now: int) -> FraudRing:
        ring = FraudRing(
            id=f"RING{now}{uuid.uuid4().hex[:6]}".upper(),
            fingerprint=transactions[0].fingerprint,
            timestamp=now,
        )
        for transaction in transactions:
            ring.add_transaction(transaction)
        return ring
