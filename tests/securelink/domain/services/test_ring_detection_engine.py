"""
RingDetectionEngine 테스트

교차 은행 링 생성, 확장, 윈도우 기반 정리, 활성 링 집계를 검증합니다.
시계는 주입 가능한 가짜 시계를 사용합니다.
"""

import threading

import pytest

from securelink.domain.exceptions import InvalidTransactionError
from securelink.domain.models.transaction import Bank
from securelink.domain.services.ring_detection_engine import RingDetectionEngine

FP_RING = "AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
FP_OTHER = "BBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBB"
NOW = 1_707_561_234_000


class FakeClock:
    """테스트용 가짜 밀리초 시계"""

    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> RingDetectionEngine:
    return RingDetectionEngine(window_ms=60000, clock=clock)


class TestRingCreation:
    """링 생성 규칙 테스트"""

    def test_single_transaction_creates_no_ring(self, engine, make_transaction) -> None:
        assert engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW)) is None

    def test_same_bank_collision_creates_no_ring(self, engine, make_transaction) -> None:
        """
        GIVEN: 같은 은행(X)의 거래 A
        WHEN: 같은 은행, 같은 지문의 거래 B가 들어오면
        THEN: 링이 생성되지 않아야 함
        """
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW))

        result = engine.add_transaction(make_transaction("B", Bank.HDFC, FP_RING, NOW + 100))

        assert result is None
        assert engine.get_all_rings() == []

    def test_minimal_cross_bank_ring(self, engine, clock, make_transaction) -> None:
        """
        GIVEN: 은행 X의 거래 A
        WHEN: 다른 은행 Y에서 같은 지문의 거래 B가 들어오면
        THEN: 트리거 거래 B가 먼저인 2건짜리 링이 생성되어야 함
        """
        a = make_transaction("A", Bank.HDFC, FP_RING, NOW)
        b = make_transaction("B", Bank.ICICI, FP_RING, NOW + 500)

        engine.add_transaction(a)
        ring = engine.add_transaction(b)

        assert ring is not None
        assert ring.fingerprint == FP_RING
        assert [tx.id for tx in ring.transactions] == ["B", "A"]
        assert ring.banks_involved == [Bank.ICICI, Bank.HDFC]
        assert ring.timestamp == clock.now
        assert ring.id.startswith("RING")

    def test_different_fingerprints_do_not_ring(self, engine, make_transaction) -> None:
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW))

        result = engine.add_transaction(make_transaction("B", Bank.SBI, FP_OTHER, NOW))

        assert result is None

    def test_same_bank_members_are_excluded_from_new_ring(self, engine, make_transaction) -> None:
        """
        GIVEN: 은행 X의 거래 A1, A2와 은행 Y의 거래 B (모두 같은 지문)
        WHEN: 은행 X의 거래 C가 트리거가 되면
        THEN: 트리거와 같은 은행의 버퍼 거래는 새 링에 들어가지 않아야 함
        """
        engine.add_transaction(make_transaction("A1", Bank.HDFC, FP_RING, NOW))
        engine.add_transaction(make_transaction("A2", Bank.HDFC, FP_RING, NOW))
        ring = engine.add_transaction(make_transaction("B", Bank.ICICI, FP_RING, NOW))

        assert [tx.id for tx in ring.transactions] == ["B", "A1", "A2"]
        assert ring.banks_involved == [Bank.ICICI, Bank.HDFC]

    def test_now_reads_injected_clock(self, engine, clock) -> None:
        assert engine.now() == clock.now
        clock.advance(1500)
        assert engine.now() == clock.now

    def test_ring_is_indexed_by_fingerprint(self, engine, make_transaction) -> None:
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW))
        ring = engine.add_transaction(make_transaction("B", Bank.SBI, FP_RING, NOW))

        assert engine.get_ring(FP_RING) is ring
        assert engine.get_ring(FP_OTHER) is None


class TestRingExtension:
    """기존 링 확장 테스트"""

    def test_extension_returns_same_ring_with_new_bank(self, engine, make_transaction) -> None:
        """
        GIVEN: 거래 A(X), B(Y)로 만들어진 링
        WHEN: 은행 Z에서 같은 지문의 거래 C가 들어오면
        THEN: 같은 링 객체가 반환되고 C와 Z가 추가되어야 함
        """
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW))
        ring = engine.add_transaction(make_transaction("B", Bank.ICICI, FP_RING, NOW))

        extended = engine.add_transaction(make_transaction("C", Bank.SBI, FP_RING, NOW))

        assert extended is ring
        assert [tx.id for tx in ring.transactions] == ["B", "A", "C"]
        assert ring.banks_involved == [Bank.ICICI, Bank.HDFC, Bank.SBI]
        assert len(engine.get_all_rings()) == 1

    def test_same_bank_transaction_extends_existing_ring(self, engine, make_transaction) -> None:
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW))
        ring = engine.add_transaction(make_transaction("B", Bank.ICICI, FP_RING, NOW))

        extended = engine.add_transaction(make_transaction("C", Bank.HDFC, FP_RING, NOW))

        assert extended is ring
        assert ring.size == 3
        assert ring.banks_involved == [Bank.ICICI, Bank.HDFC]

    def test_readding_member_is_idempotent(self, engine, make_transaction) -> None:
        """
        GIVEN: 거래 A, B로 만들어진 링
        WHEN: 거래 B를 다시 추가하면
        THEN: 같은 링이 반환되고 멤버 수는 그대로여야 함
        """
        a = make_transaction("A", Bank.HDFC, FP_RING, NOW)
        b = make_transaction("B", Bank.ICICI, FP_RING, NOW)
        engine.add_transaction(a)
        ring = engine.add_transaction(b)

        again = engine.add_transaction(b)

        assert again is ring
        assert ring.size == 2

    def test_ring_extends_after_members_leave_buffer(self, engine, clock, make_transaction) -> None:
        """
        GIVEN: 생성된 링의 멤버가 모두 버퍼에서 정리된 상태
        WHEN: 같은 지문의 거래가 다시 들어오면
        THEN: 새 링이 아니라 기존 링이 확장되어야 함
        """
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW))
        ring = engine.add_transaction(make_transaction("B", Bank.ICICI, FP_RING, NOW))

        clock.advance(10 * 60000)
        late = make_transaction("C", Bank.HDFC, FP_RING, clock.now)

        assert engine.add_transaction(late) is ring
        assert ring.size == 3


class TestWindowEviction:
    """버퍼 정리 테스트"""

    def test_expired_transaction_does_not_match(self, engine, clock, make_transaction) -> None:
        """
        GIVEN: 윈도우보다 오래된 거래 A
        WHEN: 다른 은행에서 같은 지문의 거래 B가 들어오면
        THEN: A는 이미 정리되었으므로 링이 생기지 않아야 함
        """
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW - 60000))

        result = engine.add_transaction(make_transaction("B", Bank.ICICI, FP_RING, NOW))

        assert result is None
        assert engine.recent_transaction_count == 1

    def test_transaction_just_inside_window_matches(self, engine, make_transaction) -> None:
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW - 59999))

        result = engine.add_transaction(make_transaction("B", Bank.ICICI, FP_RING, NOW))

        assert result is not None

    def test_eviction_uses_processing_time(self, engine, clock, make_transaction) -> None:
        """
        GIVEN: 현재 시각에 추가된 거래 A
        WHEN: 시계가 윈도우 이상 진행된 뒤 다른 거래가 처리되면
        THEN: A는 버퍼에서 제거되어야 함
        """
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW))
        clock.advance(60000)

        engine.add_transaction(make_transaction("B", Bank.SBI, FP_OTHER, clock.now))

        assert engine.recent_transaction_count == 1


class TestActiveRings:
    """활성 링 집계 테스트"""

    def test_active_count_ages_out_by_creation_time(self, engine, clock, make_transaction) -> None:
        """
        GIVEN: 현재 시각에 생성된 링
        WHEN: 윈도우 시간이 지나면
        THEN: 활성 링 수에서 빠져야 함 (확장 여부와 무관)
        """
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW))
        engine.add_transaction(make_transaction("B", Bank.ICICI, FP_RING, NOW))
        assert engine.get_active_ring_count() == 1

        clock.advance(30000)
        engine.add_transaction(make_transaction("C", Bank.SBI, FP_RING, clock.now))
        clock.advance(30000)

        assert engine.get_active_ring_count() == 0
        assert len(engine.get_all_rings()) == 1

    def test_recent_rings_returns_latest_in_creation_order(self, engine, make_transaction) -> None:
        fingerprints = [f"{i:X}" * 32 for i in range(1, 8)]
        for index, fingerprint in enumerate(fingerprints):
            engine.add_transaction(make_transaction(f"A{index}", Bank.HDFC, fingerprint, NOW))
            engine.add_transaction(make_transaction(f"B{index}", Bank.SBI, fingerprint, NOW))

        recent = engine.get_recent_rings()

        assert [ring.fingerprint for ring in recent] == fingerprints[-5:]
        assert len(engine.get_recent_rings(2)) == 2
        assert engine.get_recent_rings(0) == []

    def test_recent_rings_with_fewer_rings_than_limit(self, engine, make_transaction) -> None:
        engine.add_transaction(make_transaction("A", Bank.HDFC, FP_RING, NOW))
        engine.add_transaction(make_transaction("B", Bank.SBI, FP_RING, NOW))

        assert len(engine.get_recent_rings(5)) == 1


class TestValidationAndConcurrency:
    def test_non_transaction_input_is_rejected(self, engine) -> None:
        with pytest.raises(InvalidTransactionError):
            engine.add_transaction({"id": "A"})

    def test_non_positive_window_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            RingDetectionEngine(window_ms=0)

    def test_concurrent_adds_create_single_ring(self, clock, make_transaction) -> None:
        """
        GIVEN: 여러 스레드에서 같은 지문의 교차 은행 거래를 동시에 추가
        WHEN: 모든 스레드가 끝나면
        THEN: 링은 하나이고 모든 거래가 중복 없이 포함되어야 함
        """
        engine = RingDetectionEngine(window_ms=60000, clock=clock)
        banks = [Bank.HDFC, Bank.ICICI, Bank.SBI]
        transactions = [
            make_transaction(f"T{i}", banks[i % 3], FP_RING, NOW) for i in range(30)
        ]

        threads = [
            threading.Thread(target=engine.add_transaction, args=(tx,)) for tx in transactions
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        rings = engine.get_all_rings()
        assert len(rings) == 1
        assert rings[0].size == 30
        assert len({tx.id for tx in rings[0].transactions}) == 30
