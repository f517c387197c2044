"""
SecureLink - 교차 은행 거래 지문 및 사기 조직 탐지

은행별 거래에서 결정적인 지문을 만들고, 서로 다른 은행에서 같은 지문이
짧은 시간 안에 나타나면 사기 조직(FraudRing)으로 묶습니다.
"""

from securelink.domain.models.fraud_ring import FraudRing
from securelink.domain.models.merchant_profile import MerchantProfile
from securelink.domain.models.transaction import Bank, Geolocation, RiskLevel, Transaction
from securelink.domain.services.fingerprint import (
    FingerprintResult,
    encrypt_pattern,
    fingerprint_similarity,
    fingerprints_match,
    generate_transaction_fingerprint,
)
from securelink.domain.services.merchant_risk_ledger import MerchantRiskLedger
from securelink.domain.services.ring_detection_engine import RingDetectionEngine

__all__ = [
    "Bank",
    "FingerprintResult",
    "FraudRing",
    "Geolocation",
    "MerchantProfile",
    "MerchantRiskLedger",
    "RingDetectionEngine",
    "RiskLevel",
    "Transaction",
    "encrypt_pattern",
    "fingerprint_similarity",
    "fingerprints_match",
    "generate_transaction_fingerprint",
]
