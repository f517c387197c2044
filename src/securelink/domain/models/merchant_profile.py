"""
가맹점 위험 프로필 모델
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class MerchantProfile:
    """
    가맹점별 신뢰도 및 사고 이력

    Attributes:
        name: 가맹점 이름
        category: 업종 (예: "E-Commerce")
        trust_score: 신뢰 점수 (0~100)
        incident_count: 누적 사기 사고 수
        total_transaction_volume: 누적 거래 건수
        average_transaction_amount: 평균 거래 금액
        last_incident_time: 마지막 사고 시각 (밀리초), 없으면 None
    """

    name: str
    category: str
    trust_score: float
    incident_count: int = 0
    total_transaction_volume: int = 0
    average_transaction_amount: float = 0.0
    last_incident_time: Optional[int] = None
