"""
Mapper utilities between dashboard/feed JSON payloads and domain objects.

Payloads use the dashboard's camelCase keys (``riskScore``, ``isFraud``,
``banksInvolved``). Decoding computes the fingerprint when the payload does not
carry one, so feed producers may send raw transactions.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from securelink.domain.exceptions import InvalidMessageError, InvalidTransactionError
from securelink.domain.models.fraud_ring import FraudRing
from securelink.domain.models.transaction import Bank, Geolocation, Transaction
from securelink.domain.services.fingerprint import generate_transaction_fingerprint

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("id", "bank", "amount", "timestamp", "merchant", "card", "device")


def _location_to_dict(location: Optional[Geolocation]) -> Optional[Dict[str, Any]]:
    if location is None:
        return None
    return {
        "city": location.city,
        "latitude": location.latitude,
        "longitude": location.longitude,
        "country": location.country,
    }


def _location_from_dict(data: Optional[Mapping[str, Any]]) -> Optional[Geolocation]:
    if not data:
        return None
    return Geolocation(
        city=str(data["city"]),
        latitude=float(data["latitude"]),
        longitude=float(data["longitude"]),
        country=str(data["country"]),
    )


def transaction_to_dict(transaction: Transaction) -> Dict[str, Any]:
    """Render a transaction as a JSON-ready dict."""
    return {
        "id": transaction.id,
        "bank": transaction.bank.value,
        "amount": transaction.amount,
        "timestamp": transaction.timestamp,
        "merchant": transaction.merchant,
        "card": transaction.card,
        "device": transaction.device,
        "fingerprint": transaction.fingerprint,
        "riskScore": transaction.risk_score,
        "isFraud": transaction.is_fraud,
        "aiReasoning": list(transaction.ai_reasoning),
        "location": _location_to_dict(transaction.location),
    }


def transaction_from_dict(data: Mapping[str, Any]) -> Transaction:
    """Build a validated transaction from a decoded payload.

    Raises:
        InvalidMessageError: when required fields are missing or ill-typed,
            or when the resulting transaction violates its contract.
    """
    if not isinstance(data, Mapping):
        raise InvalidMessageError(f"Transaction payload must be an object, got {type(data).__name__}")

    missing = [name for name in _REQUIRED_FIELDS if name not in data]
    if missing:
        raise InvalidMessageError(f"Transaction payload missing fields: {', '.join(missing)}")

    try:
        bank = Bank(str(data["bank"]).upper())
        amount = data["amount"]
        timestamp = int(data["timestamp"])
        merchant = str(data["merchant"])
        card = str(data["card"])

        fingerprint = data.get("fingerprint")
        if not fingerprint:
            fingerprint = generate_transaction_fingerprint(amount, timestamp, merchant, card).fingerprint

        transaction = Transaction(
            id=str(data["id"]),
            bank=bank,
            amount=amount,
            timestamp=timestamp,
            merchant=merchant,
            card=card,
            device=str(data["device"]),
            fingerprint=str(fingerprint).upper(),
            risk_score=int(data.get("riskScore", 0)),
            is_fraud=bool(data.get("isFraud", False)),
            ai_reasoning=tuple(data.get("aiReasoning") or ()),
            location=_location_from_dict(data.get("location")),
        )
        transaction.validate()
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidMessageError(f"Invalid transaction payload id={data.get('id')!r}", cause=e)
    except InvalidTransactionError as e:
        raise InvalidMessageError(f"Rejected transaction payload id={data.get('id')!r}", cause=e)

    return transaction


def ring_to_dict(ring: FraudRing) -> Dict[str, Any]:
    """Render a ring snapshot (members included) as a JSON-ready dict."""
    return {
        "id": ring.id,
        "fingerprint": ring.fingerprint,
        "timestamp": ring.timestamp,
        "banksInvolved": [bank.value for bank in ring.banks_involved],
        "totalAmount": ring.total_amount,
        "transactions": [transaction_to_dict(tx) for tx in ring.transactions],
    }
