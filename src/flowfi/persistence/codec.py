"""Record codec — JSON-safe dicts for ledger records.

Monetary fields stay the decimal strings they were recorded with and are
never converted to float on the way in or out. Timestamps use ISO-8601 with
microseconds and UTC offset so they round-trip exactly. Key names follow
the stored layout of the browser front end (camelCase), so a data file
exported from there loads unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from flowfi.models.ledger import (
    PaymentRecord,
    SplitRecord,
    SplitStatus,
    VaultRecord,
    VaultTxType,
    parse_amount,
)


def encode_timestamp(ts: datetime) -> str:
    return ts.isoformat(timespec="microseconds")


def decode_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive or 'Z'-suffixed values are UTC."""
    if not isinstance(raw, str):
        raise TypeError(f"Timestamp must be an ISO-8601 string, got {raw!r}")
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    ts = datetime.fromisoformat(raw)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def decode_amount(raw) -> str:
    """Stored decimal string, checked. Raises InvalidAmountError if unreadable."""
    parse_amount(raw)
    return str(raw)


def payment_to_dict(record: PaymentRecord) -> Dict[str, Any]:
    return {
        "id": record.payment_id,
        "amount": record.amount,
        "timestamp": encode_timestamp(record.timestamp),
        "merchant": record.merchant,
        "description": record.description,
        "rewardEarned": record.reward_earned,
    }


def payment_from_dict(data: Dict[str, Any]) -> PaymentRecord:
    return PaymentRecord(
        payment_id=data["id"],
        amount=decode_amount(data["amount"]),
        timestamp=decode_timestamp(data["timestamp"]),
        merchant=data["merchant"],
        description=data.get("description", ""),
        reward_earned=decode_amount(data["rewardEarned"]),
    )


def split_to_dict(record: SplitRecord) -> Dict[str, Any]:
    return {
        "id": record.split_id,
        "totalAmount": record.total_amount,
        "userContribution": record.user_contribution,
        "timestamp": encode_timestamp(record.timestamp),
        "participants": list(record.participants),
        "description": record.description,
        "status": record.status.value,
    }


def split_from_dict(data: Dict[str, Any]) -> SplitRecord:
    return SplitRecord(
        split_id=data["id"],
        total_amount=decode_amount(data["totalAmount"]),
        user_contribution=decode_amount(data["userContribution"]),
        timestamp=decode_timestamp(data["timestamp"]),
        participants=tuple(data["participants"]),
        description=data.get("description", ""),
        status=SplitStatus(data["status"]),
    )


def vault_to_dict(record: VaultRecord) -> Dict[str, Any]:
    return {
        "amount": record.amount,
        "timestamp": encode_timestamp(record.timestamp),
        "type": record.tx_type.value,
    }


def vault_from_dict(data: Dict[str, Any]) -> VaultRecord:
    return VaultRecord(
        amount=decode_amount(data["amount"]),
        timestamp=decode_timestamp(data["timestamp"]),
        tx_type=VaultTxType(data["type"]),
    )
