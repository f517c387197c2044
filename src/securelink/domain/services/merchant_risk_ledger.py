"""
가맹점 위험 원장

가맹점별 신뢰 점수와 사고 횟수를 추적합니다. 링 탐지 결과는 사고로,
일반 거래량은 신뢰 점수의 완만한 회복으로 반영됩니다.
"""

import logging
import random
from typing import Mapping, Optional

from securelink.domain.models.merchant_profile import MerchantProfile

logger = logging.getLogger(__name__)

MERCHANT_CATEGORIES: dict[str, str] = {
    "Amazon India": "E-Commerce",
    "Flipkart": "E-Commerce",
    "Swiggy": "Food & Delivery",
    "Zomato": "Food & Delivery",
    "BookMyShow": "Entertainment",
    "MakeMyTrip": "Travel",
    "BigBasket": "Groceries",
    "PayTM Mall": "E-Commerce",
    "Myntra": "Fashion",
    "Ajio": "Fashion",
    "Nykaa": "Beauty",
    "FirstCry": "Baby Products",
    "PVR Cinemas": "Entertainment",
    "Dominos": "Food & Dining",
    "Pizza Hut": "Food & Dining",
    "Starbucks": "Food & Dining",
    "KFC": "Food & Dining",
    "McDonald's": "Food & Dining",
    "Uber India": "Transport",
    "Ola Cabs": "Transport",
}

UNKNOWN_CATEGORY = "Other"
UNKNOWN_MERCHANT_TRUST = 60.0
INCIDENT_PENALTY = 10.0
TRANSACTION_TRUST_BONUS = 0.1
HIGH_RISK_TRUST_THRESHOLD = 50.0
MAX_TRUST = 100.0


class MerchantRiskLedger:
    """
    가맹점 위험 원장

    카탈로그에 있는 가맹점은 무작위 기준값(신뢰 75~100, 사고 0~4건)으로 시작하고,
    처음 보는 가맹점은 "Other" 업종, 신뢰 60으로 생성됩니다.

    Examples:
        >>> ledger = MerchantRiskLedger(rng=random.Random(7))
        >>> ledger.record_fraud_incident("Flipkart", 1707561234000)
        >>> ledger.get_merchant("Flipkart").last_incident_time
        1707561234000
    """

    def __init__(
        self,
        catalog: Optional[Mapping[str, str]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Args:
            catalog: 가맹점 이름 -> 업종 (기본값: MERCHANT_CATEGORIES)
            rng: 기준값 생성용 난수 생성기 (테스트에서 고정 가능)
        """
        self._rng = rng or random.Random()
        self._merchants: dict[str, MerchantProfile] = {}

        for name, category in (MERCHANT_CATEGORIES if catalog is None else catalog).items():
            self._merchants[name] = MerchantProfile(
                name=name,
                category=category,
                trust_score=75 + self._rng.random() * 25,
                incident_count=self._rng.randrange(5),
                total_transaction_volume=self._rng.randrange(10000) + 1000,
                average_transaction_amount=float(self._rng.randrange(50000) + 5000),
            )

    def get_merchant(self, name: str) -> MerchantProfile:
        """가맹점 프로필을 반환합니다. 없으면 기본 프로필을 만들어 등록합니다."""
        profile = self._merchants.get(name)
        if profile is None:
            profile = MerchantProfile(
                name=name, category=UNKNOWN_CATEGORY, trust_score=UNKNOWN_MERCHANT_TRUST
            )
            self._merchants[name] = profile
            logger.debug(f"Registered unknown merchant: {name}")
        return profile

    def record_fraud_incident(self, merchant_name: str, timestamp: int) -> None:
        """사기 사고를 기록합니다. 신뢰 점수는 10 감소하며 0 아래로 내려가지 않습니다."""
        merchant = self.get_merchant(merchant_name)
        merchant.incident_count += 1
        merchant.trust_score = max(0.0, merchant.trust_score - INCIDENT_PENALTY)
        merchant.last_incident_time = timestamp

        if merchant.trust_score < HIGH_RISK_TRUST_THRESHOLD:
            logger.warning(
                f"Merchant {merchant_name} is high risk "
                f"(trust={merchant.trust_score:.1f}, incidents={merchant.incident_count})"
            )

    def record_transaction(self, merchant_name: str, amount: float) -> None:
        """일반 거래를 기록합니다. 신뢰 점수는 0.1 증가하며 100을 넘지 않습니다."""
        merchant = self.get_merchant(merchant_name)
        merchant.total_transaction_volume += 1
        merchant.average_transaction_amount = (merchant.average_transaction_amount + amount) / 2
        merchant.trust_score = min(MAX_TRUST, merchant.trust_score + TRANSACTION_TRUST_BONUS)

    def get_all_merchants(self) -> list[MerchantProfile]:
        return list(self._merchants.values())

    def get_merchants_by_trust_score(self) -> list[MerchantProfile]:
        """신뢰 점수 오름차순 (위험한 가맹점 먼저)"""
        return sorted(self._merchants.values(), key=lambda m: m.trust_score)

    def get_high_risk_merchants(self) -> list[MerchantProfile]:
        """신뢰 점수가 50 미만인 가맹점"""
        return [m for m in self._merchants.values() if m.trust_score < HIGH_RISK_TRUST_THRESHOLD]
