"""FlowFi — local reward, tier and yield ledger for a wallet payment demo."""

from flowfi.models.ledger import PaymentRecord, SplitRecord, Tier, VaultRecord
from flowfi.policy.resolver import RewardPolicy
from flowfi.rewards.calculator import LedgerCalculator

__all__ = [
    "LedgerCalculator",
    "PaymentRecord",
    "RewardPolicy",
    "SplitRecord",
    "Tier",
    "VaultRecord",
]

__version__ = "0.1.0"
