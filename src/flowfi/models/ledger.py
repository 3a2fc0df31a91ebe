"""Ledger models — payments, splits, vault transactions and derived stats.

All monetary values are ETH-denominated decimal strings on the records and
Decimal in every computation. No floats in finance.

Record lifecycle:
- PaymentRecord is immutable once created.
- SplitRecord changes only through its status state machine.
- VaultRecord is immutable; the vault history is an append-only ledger.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Tuple


class InvalidAmountError(ValueError):
    """Raised when a monetary amount cannot be parsed as a non-negative decimal."""


def parse_amount(value: str) -> Decimal:
    """Parse an ETH amount string into an exact Decimal.

    Raises InvalidAmountError for non-numeric, NaN, infinite or
    negative input. Callers are expected to validate beforehand.
    """
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidAmountError(f"Malformed amount: {value!r}") from None
    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite: {value!r}")
    if amount < 0:
        raise InvalidAmountError(f"Amount must be non-negative: {value!r}")
    return amount


class Tier(str, enum.Enum):
    """Reward-rate bracket, determined by cumulative payment volume."""
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)


# Ascending order; thresholds in the policy follow the same order.
TIER_ORDER: Tuple[Tier, ...] = (Tier.BRONZE, Tier.SILVER, Tier.GOLD, Tier.PLATINUM)


class SplitStatus(str, enum.Enum):
    """Lifecycle state of a split bill.

    State machine:
        PENDING → COMPLETED   (user contributed their share)
        PENDING → EXPIRED     (deadline passed, observed lazily)
    """
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"


SPLIT_TRANSITIONS: Dict[SplitStatus, frozenset] = {
    SplitStatus.PENDING: frozenset({SplitStatus.COMPLETED, SplitStatus.EXPIRED}),
    SplitStatus.COMPLETED: frozenset(),
    SplitStatus.EXPIRED: frozenset(),
}


class VaultTxType(str, enum.Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass(frozen=True)
class PaymentRecord:
    """A locally tracked merchant payment.

    reward_earned is fixed at insertion time from the tier in effect
    before this payment was counted.
    """
    payment_id: str
    amount: str
    timestamp: datetime
    merchant: str
    description: str
    reward_earned: str


@dataclass
class SplitRecord:
    """One user's share of a shared bill.

    Mutable — only status changes, and only through transition_to().
    participants[0] is the creator; the creator is not stored separately.
    """
    split_id: str
    total_amount: str
    user_contribution: str
    timestamp: datetime
    participants: Tuple[str, ...]
    description: str
    status: SplitStatus = SplitStatus.PENDING

    @property
    def creator(self) -> Optional[str]:
        return self.participants[0] if self.participants else None

    def deadline(self, window: timedelta) -> datetime:
        return self.timestamp + window

    def transition_to(self, new_status: SplitStatus) -> None:
        """Transition to a new status, validating the transition is legal."""
        allowed = SPLIT_TRANSITIONS.get(self.status, frozenset())
        if new_status not in allowed:
            raise ValueError(
                f"Invalid split transition: {self.status.value} → {new_status.value}. "
                f"Allowed: {', '.join(s.value for s in allowed) or 'none'}"
            )
        self.status = new_status


@dataclass(frozen=True)
class VaultRecord:
    """A deposit into or withdrawal from the yield vault."""
    amount: str
    timestamp: datetime
    tx_type: VaultTxType

    def signed_amount(self) -> Decimal:
        amount = parse_amount(self.amount)
        return amount if self.tx_type == VaultTxType.DEPOSIT else -amount


@dataclass(frozen=True)
class TierProgress:
    """Progress from the current tier threshold towards the next one.

    At the top tier, next == current and progress == 100.
    """
    current: Decimal
    next: Decimal
    progress: Decimal


@dataclass(frozen=True)
class LedgerStats:
    """Dashboard snapshot, derived fresh from the current records."""
    total_payments: Decimal
    total_rewards: Decimal
    tier: Tier
    tier_progress: TierProgress
    vault_balance: Decimal
    vault_yield: Decimal
    active_splits_count: int
    recent_payments: Tuple[PaymentRecord, ...]
    active_splits: Tuple[SplitRecord, ...]
