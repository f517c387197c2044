"""
탐지 집계 지표

대시보드가 표시하는 카운터를 프로세스 내에서 보관합니다.
"""

from dataclasses import dataclass


@dataclass
class DetectionMetrics:
    """
    탐지 파이프라인 누적 지표

    Attributes:
        transactions_analyzed: 처리한 거래 수
        fraud_blocked: 사기 링에 포함된 거래 수
        money_saved: 사기 링에 포함된 거래 금액 합계
        fingerprints_generated: 처리한 지문 수
        active_fraud_rings: 현재 윈도우 내 활성 링 수
        rejected_transactions: 검증 실패로 거부된 거래 수
    """

    transactions_analyzed: int = 0
    fraud_blocked: int = 0
    money_saved: float = 0
    fingerprints_generated: int = 0
    active_fraud_rings: int = 0
    rejected_transactions: int = 0
