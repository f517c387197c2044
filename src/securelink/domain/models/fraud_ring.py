"""
사기 조직(FraudRing) 도메인 모델

서로 다른 은행에서 같은 지문을 가진 거래가 발견되면 생성됩니다.
생성 이후에는 거래가 추가되기만 하며(append-only), 삭제되지 않습니다.
"""

from dataclasses import dataclass, field

from securelink.domain.models.transaction import Bank, Transaction


@dataclass
class FraudRing:
    """
    교차 은행 사기 조직

    Attributes:
        id: 링 생성 시 발급되는 고유 식별자
        fingerprint: 링 멤버십을 정의하는 공유 지문
        transactions: 멤버 거래 목록 (탐지 순서, id 기준 중복 없음)
        timestamp: 링 생성 시각 (밀리초). 이후 확장 시에도 갱신하지 않음
        banks_involved: 멤버 거래의 은행 목록 (발견 순서, 중복 없음)
    """

    id: str
    fingerprint: str
    timestamp: int
    transactions: list[Transaction] = field(default_factory=list)
    banks_involved: list[Bank] = field(default_factory=list)

    def contains(self, transaction_id: str) -> bool:
        """해당 id의 거래가 이미 링에 포함되어 있는지 확인합니다."""
        return any(tx.id == transaction_id for tx in self.transactions)

    def add_transaction(self, transaction: Transaction) -> bool:
        """
        거래를 링에 추가합니다.

        같은 id의 거래가 이미 있으면 아무것도 하지 않습니다 (멱등).
        새 은행이면 banks_involved에도 추가합니다.

        Args:
            transaction: 추가할 거래

        Returns:
            실제로 추가되었으면 True, 이미 존재했으면 False
        """
        if self.contains(transaction.id):
            return False

        self.transactions.append(transaction)
        if transaction.bank not in self.banks_involved:
            self.banks_involved.append(transaction.bank)
        return True

    @property
    def size(self) -> int:
        return len(self.transactions)

    @property
    def total_amount(self) -> float:
        return sum(tx.amount for tx in self.transactions)

    def __str__(self) -> str:
        banks = ", ".join(bank.value for bank in self.banks_involved)
        return (
            f"FraudRing(id={self.id}, fingerprint={self.fingerprint}, "
            f"transactions={self.size}, banks=[{banks}])"
        )
