"""
TransactionSimulator - 데모용 거래 생성기

정상 거래와 교차 은행 사기 조직 거래를 생성합니다.
사기 조직 거래는 가맹점/카드/기준 금액을 공유하고, 지문 계산 시 timestamp를 0으로
고정하여 서로 다른 은행에서도 같은 지문이 나오도록 만듭니다.
"""

import random
from dataclasses import dataclass, replace
from typing import Callable, Optional

from securelink.domain.models.transaction import Bank, Geolocation, Transaction
from securelink.domain.services.fingerprint import generate_transaction_fingerprint
from securelink.domain.services.ring_detection_engine import current_time_ms

BANKS: tuple[Bank, ...] = (Bank.HDFC, Bank.ICICI, Bank.SBI)

LOCATIONS: tuple[Geolocation, ...] = (
    Geolocation("Mumbai", 19.0760, 72.8777, "India"),
    Geolocation("Delhi", 28.7041, 77.1025, "India"),
    Geolocation("Bangalore", 12.9716, 77.5946, "India"),
    Geolocation("Hyderabad", 17.3850, 78.4867, "India"),
    Geolocation("Chennai", 13.0827, 80.2707, "India"),
    Geolocation("Kolkata", 22.5726, 88.3639, "India"),
    Geolocation("Pune", 18.5204, 73.8567, "India"),
    Geolocation("Ahmedabad", 23.0225, 72.5714, "India"),
)

MERCHANTS: tuple[str, ...] = (
    "Amazon India", "Flipkart", "Swiggy", "Zomato", "BookMyShow",
    "MakeMyTrip", "BigBasket", "PayTM Mall", "Myntra", "Ajio",
    "Nykaa", "FirstCry", "PVR Cinemas", "Dominos", "Pizza Hut",
    "Starbucks", "KFC", "McDonald's", "Uber India", "Ola Cabs",
)

AI_REASONING_SAFE = (
    "Transaction amount within normal range",
    "Merchant has good reputation score",
    "Device fingerprint matches historical pattern",
    "Location consistent with user profile",
    "Time of transaction aligns with user behavior",
)

AI_REASONING_SUSPICIOUS = (
    "Unusual spending pattern detected",
    "New merchant not in user history",
    "Device fingerprint partially matches known fraud",
    "Transaction velocity elevated",
    "Amount slightly above average threshold",
)

AI_REASONING_FRAUD = (
    "Device fingerprint matches known fraud ring",
    "Transaction pattern identical to flagged activity",
    "Multiple rapid transactions across merchants",
    "Location anomaly detected",
    "Card used in impossible travel scenario",
    "Fingerprint collision with flagged transaction",
)

SUSPICIOUS_AMOUNT = 50000

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True)
class FraudPattern:
    """
    사기 조직이 공유하는 거래 패턴

    Attributes:
        merchant: 공유 가맹점
        card: 공유 카드 번호
        device: 공유 디바이스
        amount: 기준 금액 (지문 계산에 사용)
        ring_id: 시뮬레이션 내부 조직 식별자
        location: 거래 위치 (없으면 무작위)
    """

    merchant: str
    card: str
    device: str
    amount: int
    ring_id: str
    location: Optional[Geolocation] = None


class TransactionSimulator:
    """
    데모용 거래 생성기

    Attributes:
        _rng: 난수 생성기 (테스트에서 seed 고정 가능)
        _clock: 현재 시각(ms) 공급 함수
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock or current_time_ms

    def random(self) -> float:
        """시뮬레이터 난수 생성기에서 [0, 1) 값을 뽑습니다 (재현 가능한 지터용)."""
        return self._rng.random()

    def generate_card_number(self) -> str:
        """4 또는 5로 시작하는 16자리 카드 번호"""
        prefix = "4" if self._rng.random() > 0.5 else "5"
        return prefix + "".join(str(self._rng.randrange(10)) for _ in range(15))

    def generate_device_id(self) -> str:
        return "DEV" + self._random_token(8).upper()

    def generate_transaction(
        self,
        is_fraud_scenario: bool = False,
        fraud_pattern: Optional[FraudPattern] = None,
    ) -> Transaction:
        """
        거래 하나를 생성합니다.

        Args:
            is_fraud_scenario: 사기 조직 거래 여부
            fraud_pattern: 사기 조직 거래일 때 공유할 패턴

        Returns:
            지문이 계산된 Transaction
        """
        bank = self._rng.choice(BANKS)
        timestamp = self._clock()
        use_pattern = is_fraud_scenario and fraud_pattern is not None

        if use_pattern:
            merchant = fraud_pattern.merchant
            card = fraud_pattern.card
            device = fraud_pattern.device
            amount = fraud_pattern.amount + (self._rng.random() * 1000 - 500)
            location = fraud_pattern.location or self._rng.choice(LOCATIONS)
            # timestamp 0 고정: 같은 조직 거래는 모두 같은 지문을 가짐
            fingerprint = generate_transaction_fingerprint(
                fraud_pattern.amount, 0, merchant, card
            ).fingerprint
        else:
            merchant = self._rng.choice(MERCHANTS)
            card = self.generate_card_number()
            device = self.generate_device_id()
            amount = self._rng.randrange(100000) + 100
            location = self._rng.choice(LOCATIONS)
            fingerprint = generate_transaction_fingerprint(
                amount, timestamp, merchant, card
            ).fingerprint

        score, reasoning = self._calculate_risk_score(amount, is_fraud_scenario)

        return Transaction(
            id=f"TXN{timestamp}{self._random_token(4)}".upper(),
            bank=bank,
            amount=round(amount),
            timestamp=timestamp,
            merchant=merchant,
            card=card,
            device=device,
            fingerprint=fingerprint,
            risk_score=score,
            is_fraud=is_fraud_scenario,
            ai_reasoning=reasoning,
            location=location,
        )

    def generate_fraud_ring(self) -> list[Transaction]:
        """
        2~3개 은행에 걸친 사기 조직 거래 묶음을 생성합니다.

        모든 거래는 서로 다른 은행에서 발생하며 같은 지문을 가집니다.
        """
        pattern = FraudPattern(
            merchant=self._rng.choice(MERCHANTS),
            card=self.generate_card_number(),
            device=self.generate_device_id(),
            amount=25000 + self._rng.randrange(50000),
            ring_id=self._random_token(6).upper(),
        )

        locations = self._rng.sample(LOCATIONS, 2 + self._rng.randrange(2))
        banks = self._rng.sample(BANKS, 2 + self._rng.randrange(2))

        transactions = []
        for index, bank in enumerate(banks):
            member_pattern = FraudPattern(
                merchant=pattern.merchant,
                card=pattern.card,
                device=pattern.device,
                amount=pattern.amount,
                ring_id=pattern.ring_id,
                location=locations[index % len(locations)],
            )
            generated = self.generate_transaction(True, member_pattern)
            transactions.append(_with_bank(generated, bank))

        return transactions

    # ========== Private Methods ==========

    def _calculate_risk_score(
        self, amount: float, is_fraud_scenario: bool
    ) -> tuple[int, tuple[str, ...]]:
        if is_fraud_scenario:
            return (
                71 + self._rng.randrange(29),
                AI_REASONING_FRAUD[: 3 + self._rng.randrange(3)],
            )

        if amount > SUSPICIOUS_AMOUNT or self._rng.random() > 0.85:
            return (
                31 + self._rng.randrange(40),
                AI_REASONING_SUSPICIOUS[: 2 + self._rng.randrange(3)],
            )

        return (
            self._rng.randrange(31),
            AI_REASONING_SAFE[: 2 + self._rng.randrange(3)],
        )

    def _random_token(self, length: int) -> str:
        return "".join(self._rng.choice(_ID_ALPHABET) for _ in range(length))


def _with_bank(transaction: Transaction, bank: Bank) -> Transaction:
    """은행만 바꾼 사본 (지문은 은행과 무관하므로 그대로 유지)"""
    return replace(transaction, bank=bank)
