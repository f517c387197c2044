"""
Flink 링 탐지 Job용 샘플 데이터와 행(row) 변환

PyFlink는 커스텀 객체 직렬화에 제한이 있어 Transaction을 튜플 행으로 바꿔
소스에 넣습니다. 이 모듈은 pyflink 없이도 import 할 수 있습니다.
"""

from typing import List, Optional, Tuple

from securelink.domain.models.transaction import Bank, Transaction
from securelink.domain.services.fingerprint import generate_transaction_fingerprint
from securelink.domain.services.ring_detection_engine import current_time_ms

# (id, bank, amount, timestamp, merchant, card, device, fingerprint)
TransactionRow = Tuple[str, str, float, int, str, str, str, str]


def transaction_to_row(transaction: Transaction) -> TransactionRow:
    return (
        transaction.id,
        transaction.bank.value,
        float(transaction.amount),
        transaction.timestamp,
        transaction.merchant,
        transaction.card,
        transaction.device,
        transaction.fingerprint,
    )


def row_to_transaction(row: TransactionRow) -> Transaction:
    return Transaction(
        id=row[0],
        bank=Bank(row[1]),
        amount=row[2],
        timestamp=row[3],
        merchant=row[4],
        card=row[5],
        device=row[6],
        fingerprint=row[7],
    )


def _transaction(
    tx_id: str,
    bank: Bank,
    amount: float,
    timestamp: int,
    merchant: str,
    card: str,
    device: str,
    fingerprint: Optional[str] = None,
) -> Transaction:
    if fingerprint is None:
        fingerprint = generate_transaction_fingerprint(amount, timestamp, merchant, card).fingerprint
    return Transaction(
        id=tx_id,
        bank=bank,
        amount=amount,
        timestamp=timestamp,
        merchant=merchant,
        card=card,
        device=device,
        fingerprint=fingerprint,
    )


def create_sample_transactions(base_time: Optional[int] = None) -> List[Transaction]:
    """
    테스트용 샘플 거래 데이터를 생성합니다.

    탐지 엔진은 처리 시각 기준으로 버퍼를 정리하므로 timestamp는 base_time
    (기본값: 현재 시각) 근처로 만듭니다.

    포함된 패턴:
    - 링 A: HDFC -> ICICI 같은 지문 (링 생성), 이어서 SBI (링 확장)
    - 링 B 후보: SBI 두 건 같은 지문 (같은 은행이라 링 아님)
    - 정상 거래 세 건 (지문이 모두 다름)

    Returns:
        샘플 거래 리스트 (처리 순서)
    """
    if base_time is None:
        base_time = current_time_ms()

    ring_fingerprint = generate_transaction_fingerprint(
        45000, 0, "Flipkart", "4532015112830366"
    ).fingerprint
    same_bank_fingerprint = generate_transaction_fingerprint(
        30000, 0, "Swiggy", "5105105105105100"
    ).fingerprint

    return [
        _transaction("TXN-N1", Bank.HDFC, 1250, base_time, "Amazon India", "4111111111111111", "DEVN0000001"),
        # 링 A: 공유 카드/가맹점, 은행만 다름
        _transaction("TXN-A1", Bank.HDFC, 45210, base_time + 500, "Flipkart", "4532015112830366", "DEVRINGA001", ring_fingerprint),
        _transaction("TXN-N2", Bank.ICICI, 899, base_time + 800, "Zomato", "5500005555555559", "DEVN0000002"),
        _transaction("TXN-A2", Bank.ICICI, 44870, base_time + 1000, "Flipkart", "4532015112830366", "DEVRINGA001", ring_fingerprint),
        # 같은 은행 내 지문 충돌 (교차 은행 아님)
        _transaction("TXN-B1", Bank.SBI, 30120, base_time + 1200, "Swiggy", "5105105105105100", "DEVRINGB001", same_bank_fingerprint),
        _transaction("TXN-B2", Bank.SBI, 29880, base_time + 1400, "Swiggy", "5105105105105100", "DEVRINGB001", same_bank_fingerprint),
        _transaction("TXN-A3", Bank.SBI, 45390, base_time + 1500, "Flipkart", "4532015112830366", "DEVRINGA001", ring_fingerprint),
        _transaction("TXN-N3", Bank.SBI, 15400, base_time + 1800, "MakeMyTrip", "4012888888881881", "DEVN0000003"),
    ]
