"""
거래(Transaction) 도메인 모델

외부 생성기(시뮬레이터, 은행 피드)가 만든 결제 거래를 표현하는 불변 모델입니다.
지문(fingerprint)은 거래 생성 시점에 한 번 계산되어 저장되며 다시 계산하지 않습니다.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from securelink.domain.exceptions import InvalidTransactionError

_FINGERPRINT_FORMAT = re.compile(r"^[0-9A-F]{32}$")


class Bank(Enum):
    """거래를 발행한 은행 식별자"""

    HDFC = "HDFC"
    ICICI = "ICICI"
    SBI = "SBI"


class RiskLevel(Enum):
    """
    risk_score 구간 분류

    Attributes:
        HIGH: 71 이상
        MEDIUM: 31 이상
        LOW: 그 외
    """

    HIGH = 71
    MEDIUM = 31
    LOW = 0

    @classmethod
    def from_score(cls, score: int) -> "RiskLevel":
        """점수에 해당하는 위험 등급을 반환합니다."""
        for level in (cls.HIGH, cls.MEDIUM):
            if score >= level.value:
                return level
        return cls.LOW


@dataclass(frozen=True)
class Geolocation:
    """거래 발생 위치"""

    city: str
    latitude: float
    longitude: float
    country: str


@dataclass(frozen=True)
class Transaction:
    """
    결제 거래

    Attributes:
        id: 고유 거래 식별자
        bank: 발행 은행
        amount: 거래 금액 (양수)
        timestamp: 거래 시각 (밀리초 단위 Unix timestamp)
        merchant: 가맹점 이름
        card: 전체 카드 번호 (지문 계산에만 사용, 표시는 마지막 4자리만)
        device: 디바이스 식별자
        fingerprint: 32자리 대문자 16진수 지문
        risk_score: 0~100 휴리스틱 점수 (링 탐지에는 사용하지 않음)
        is_fraud: 시뮬레이션 정답 레이블 (탐지 엔진은 절대 읽지 않음)
        ai_reasoning: 점수 산정 사유 목록
        location: 거래 위치 (선택)

    Examples:
        >>> tx = Transaction(
        ...     id="TXN1", bank=Bank.HDFC, amount=25000, timestamp=1707561234000,
        ...     merchant="Flipkart", card="4532123456789012", device="DEVA1B2C3D4",
        ...     fingerprint="0123456789ABCDEF0123456789ABCDEF",
        ... )
        >>> tx.masked_card
        '**** 9012'
    """

    id: str
    bank: Bank
    amount: Union[int, float]
    timestamp: int
    merchant: str
    card: str
    device: str
    fingerprint: str
    risk_score: int = 0
    is_fraud: bool = False
    ai_reasoning: tuple[str, ...] = field(default_factory=tuple)
    location: Optional[Geolocation] = None

    @property
    def card_last4(self) -> str:
        """카드 번호 마지막 4자리"""
        return self.card[-4:]

    @property
    def masked_card(self) -> str:
        """표시용 마스킹 카드 번호"""
        return f"**** {self.card_last4}"

    @property
    def risk_level(self) -> RiskLevel:
        """risk_score에 해당하는 위험 등급"""
        return RiskLevel.from_score(self.risk_score)

    def validate(self) -> None:
        """
        거래 레코드의 계약을 검증합니다.

        Raises:
            InvalidTransactionError: 하나 이상의 규칙을 위반한 경우 (위반 내용을 모두 포함)
        """
        errors = []

        if not self.id or not isinstance(self.id, str):
            errors.append("id must be a non-empty string")

        if not isinstance(self.bank, Bank):
            errors.append(f"bank must be one of {[b.value for b in Bank]}, got {self.bank!r}")

        if isinstance(self.amount, bool) or not isinstance(self.amount, (int, float)):
            errors.append(f"amount must be numeric, got {self.amount!r}")
        elif self.amount <= 0:
            errors.append(f"amount must be positive, got {self.amount}")

        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            errors.append(f"timestamp must be integer milliseconds, got {self.timestamp!r}")
        elif self.timestamp < 0:
            errors.append(f"timestamp cannot be negative, got {self.timestamp}")

        for name in ("merchant", "card", "device"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                errors.append(f"{name} must be a non-empty string")

        if not isinstance(self.fingerprint, str) or not _FINGERPRINT_FORMAT.match(self.fingerprint):
            errors.append(
                f"fingerprint must be 32 uppercase hex characters, got {self.fingerprint!r}"
            )

        if isinstance(self.risk_score, bool) or not isinstance(self.risk_score, int):
            errors.append(f"risk_score must be an integer, got {self.risk_score!r}")
        elif not 0 <= self.risk_score <= 100:
            errors.append(f"risk_score must be within 0..100, got {self.risk_score}")

        if errors:
            raise InvalidTransactionError(
                f"Transaction {self.id!r} validation failed: {'; '.join(errors)}"
            )

    def __str__(self) -> str:
        return (
            f"Transaction(id={self.id}, bank={self.bank.value if isinstance(self.bank, Bank) else self.bank}, "
            f"amount={self.amount}, merchant={self.merchant}, card={self.masked_card}, "
            f"fingerprint={self.fingerprint})"
        )
