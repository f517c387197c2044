"""공용 테스트 픽스처"""

from typing import Callable

import pytest

from securelink.domain.models.transaction import Bank, Transaction

FINGERPRINT_A = "0123456789ABCDEF0123456789ABCDEF"
FINGERPRINT_B = "FEDCBA9876543210FEDCBA9876543210"
BASE_TIME = 1_707_561_234_000


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """기본값이 채워진 Transaction 팩토리 픽스처"""

    def factory(
        tx_id: str = "TXN1",
        bank: Bank = Bank.HDFC,
        fingerprint: str = FINGERPRINT_A,
        timestamp: int = BASE_TIME,
        amount: float = 25000,
        merchant: str = "Flipkart",
        card: str = "4532123456789012",
        device: str = "DEVA1B2C3D4",
        **kwargs,
    ) -> Transaction:
        return Transaction(
            id=tx_id,
            bank=bank,
            amount=amount,
            timestamp=timestamp,
            merchant=merchant,
            card=card,
            device=device,
            fingerprint=fingerprint,
            **kwargs,
        )

    return factory
