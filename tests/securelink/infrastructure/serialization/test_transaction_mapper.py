"""
transaction_mapper 테스트

대시보드/피드 JSON 페이로드와 도메인 객체 간 변환을 검증합니다.
"""

import pytest

from securelink.domain.exceptions import InvalidMessageError
from securelink.domain.models.fraud_ring import FraudRing
from securelink.domain.models.transaction import Bank, Geolocation
from securelink.domain.services.fingerprint import generate_transaction_fingerprint
from securelink.infrastructure.serialization.json_utils import json_dumps, json_loads
from securelink.infrastructure.serialization.transaction_mapper import (
    ring_to_dict,
    transaction_from_dict,
    transaction_to_dict,
)


@pytest.fixture
def raw_payload() -> dict:
    return {
        "id": "TXN1",
        "bank": "hdfc",
        "amount": 25000,
        "timestamp": 1707561234000,
        "merchant": "Flipkart",
        "card": "4532123456789012",
        "device": "DEVA1B2C3D4",
    }


class TestTransactionToDict:
    def test_uses_camel_case_keys(self, make_transaction) -> None:
        tx = make_transaction(
            risk_score=80,
            is_fraud=True,
            ai_reasoning=("Location anomaly detected",),
            location=Geolocation("Mumbai", 19.076, 72.8777, "India"),
        )

        data = transaction_to_dict(tx)

        assert data["bank"] == "HDFC"
        assert data["riskScore"] == 80
        assert data["isFraud"] is True
        assert data["aiReasoning"] == ["Location anomaly detected"]
        assert data["location"]["city"] == "Mumbai"

    def test_location_is_optional(self, make_transaction) -> None:
        assert transaction_to_dict(make_transaction())["location"] is None


class TestTransactionFromDict:
    def test_fingerprint_is_computed_when_missing(self, raw_payload) -> None:
        """
        GIVEN: 지문이 없는 원시 거래 페이로드
        WHEN: Transaction으로 변환하면
        THEN: 거래 속성으로 지문이 계산되고 은행 코드는 대문자로 정규화되어야 함
        """
        tx = transaction_from_dict(raw_payload)

        expected = generate_transaction_fingerprint(
            25000, 1707561234000, "Flipkart", "4532123456789012"
        ).fingerprint
        assert tx.fingerprint == expected
        assert tx.bank is Bank.HDFC

    def test_supplied_fingerprint_is_kept(self, raw_payload) -> None:
        raw_payload["fingerprint"] = "0123456789abcdef0123456789abcdef"

        tx = transaction_from_dict(raw_payload)

        assert tx.fingerprint == "0123456789ABCDEF0123456789ABCDEF"

    def test_json_round_trip_preserves_transaction(self, make_transaction) -> None:
        tx = make_transaction(
            risk_score=12,
            ai_reasoning=("Merchant has good reputation score",),
            location=Geolocation("Pune", 18.5204, 73.8567, "India"),
        )

        restored = transaction_from_dict(json_loads(json_dumps(transaction_to_dict(tx))))

        assert restored == tx

    def test_missing_fields_rejected(self, raw_payload) -> None:
        del raw_payload["merchant"]
        del raw_payload["card"]

        with pytest.raises(InvalidMessageError, match="missing fields: merchant, card"):
            transaction_from_dict(raw_payload)

    def test_non_object_payload_rejected(self) -> None:
        with pytest.raises(InvalidMessageError, match="must be an object"):
            transaction_from_dict(["TXN1"])

    def test_unknown_bank_rejected(self, raw_payload) -> None:
        raw_payload["bank"] = "AXIS"

        with pytest.raises(InvalidMessageError, match="Invalid transaction payload"):
            transaction_from_dict(raw_payload)

    def test_contract_violation_rejected(self, raw_payload) -> None:
        """
        GIVEN: 금액이 0인 페이로드
        WHEN: Transaction으로 변환하면
        THEN: 검증 실패가 InvalidMessageError로 감싸져야 함
        """
        raw_payload["amount"] = 0

        with pytest.raises(InvalidMessageError, match="Rejected transaction payload") as exc_info:
            transaction_from_dict(raw_payload)

        assert "amount must be positive" in str(exc_info.value)


class TestRingToDict:
    def test_ring_snapshot_includes_members(self, make_transaction) -> None:
        ring = FraudRing(id="RING1", fingerprint="0123456789ABCDEF0123456789ABCDEF", timestamp=1000)
        ring.add_transaction(make_transaction("A", Bank.HDFC, amount=25000))
        ring.add_transaction(make_transaction("B", Bank.SBI, amount=24500))

        data = ring_to_dict(ring)

        assert data["id"] == "RING1"
        assert data["banksInvolved"] == ["HDFC", "SBI"]
        assert data["totalAmount"] == 49500
        assert [tx["id"] for tx in data["transactions"]] == ["A", "B"]
