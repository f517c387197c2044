"""
FraudRing 도메인 모델 테스트
"""

from securelink.domain.models.fraud_ring import FraudRing
from securelink.domain.models.transaction import Bank

FP = "0123456789ABCDEF0123456789ABCDEF"


def _ring() -> FraudRing:
    return FraudRing(id="RING1", fingerprint=FP, timestamp=1000)


class TestFraudRing:
    def test_new_ring_is_empty(self) -> None:
        ring = _ring()

        assert ring.size == 0
        assert ring.banks_involved == []
        assert ring.total_amount == 0

    def test_add_transaction_tracks_banks_in_discovery_order(self, make_transaction) -> None:
        """
        GIVEN: 빈 링
        WHEN: SBI, HDFC, SBI 순서로 거래를 추가하면
        THEN: banks_involved는 발견 순서대로 중복 없이 [SBI, HDFC]여야 함
        """
        ring = _ring()

        ring.add_transaction(make_transaction("A", Bank.SBI, FP))
        ring.add_transaction(make_transaction("B", Bank.HDFC, FP))
        ring.add_transaction(make_transaction("C", Bank.SBI, FP))

        assert ring.banks_involved == [Bank.SBI, Bank.HDFC]
        assert ring.size == 3

    def test_add_transaction_is_idempotent_by_id(self, make_transaction) -> None:
        ring = _ring()

        assert ring.add_transaction(make_transaction("A", Bank.SBI, FP)) is True
        assert ring.add_transaction(make_transaction("A", Bank.SBI, FP)) is False
        assert ring.size == 1
        assert ring.contains("A")
        assert not ring.contains("B")

    def test_total_amount(self, make_transaction) -> None:
        ring = _ring()
        ring.add_transaction(make_transaction("A", Bank.SBI, FP, amount=25000))
        ring.add_transaction(make_transaction("B", Bank.HDFC, FP, amount=24500))

        assert ring.total_amount == 49500

    def test_str_lists_banks(self, make_transaction) -> None:
        ring = _ring()
        ring.add_transaction(make_transaction("A", Bank.ICICI, FP))

        assert "RING1" in str(ring)
        assert "ICICI" in str(ring)
