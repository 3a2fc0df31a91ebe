"""Core data models for the FlowFi ledger."""

from flowfi.models.ledger import (
    InvalidAmountError,
    LedgerStats,
    PaymentRecord,
    SplitRecord,
    SplitStatus,
    Tier,
    TierProgress,
    TIER_ORDER,
    VaultRecord,
    VaultTxType,
    parse_amount,
)

__all__ = [
    "InvalidAmountError",
    "LedgerStats",
    "PaymentRecord",
    "SplitRecord",
    "SplitStatus",
    "Tier",
    "TierProgress",
    "TIER_ORDER",
    "VaultRecord",
    "VaultTxType",
    "parse_amount",
]
