"""Ledger calculator — payments, splits and vault activity for one user.

The calculator is the single owner of three record collections and the
source of every statistic derived from them: total paid, total rewards,
tier, tier progress, vault balance, time-weighted yield and active splits.

Bookkeeping is optimistic and local. A record is committed here before,
and independently of, whether the matching on-chain transaction is ever
confirmed. Nothing is reconciled against contract state.

Every mutation is persisted immediately through the injected storage.
With no storage the ledger is memory-only.

Split state machine:
    PENDING → COMPLETED   contribute_split() succeeded (at most once)
    PENDING → EXPIRED     deadline passed, applied by expire_overdue_splits()
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence
from uuid import uuid4

from flowfi.models.ledger import (
    LedgerStats,
    PaymentRecord,
    SplitRecord,
    SplitStatus,
    Tier,
    TierProgress,
    VaultRecord,
    VaultTxType,
    parse_amount,
)
from flowfi.persistence import codec
from flowfi.persistence.storage import (
    PAYMENTS_KEY,
    SPLITS_KEY,
    VAULT_KEY,
    Storage,
)
from flowfi.policy.resolver import RewardPolicy
from flowfi.rewards import tiers
from flowfi.rewards.vault_yield import vault_balance, vault_yield


logger = logging.getLogger(__name__)

SPLIT_PAYMENT_MERCHANT = "Split Payment"


def _resolve_now(now: Optional[datetime]) -> datetime:
    """The given clock, or the current time. Naive values are taken as UTC."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _record_id(prefix: str, ts: datetime) -> str:
    return f"{prefix}_{int(ts.timestamp() * 1000)}_{uuid4().hex[:8]}"


class LedgerCalculator:
    """Reward, tier and yield bookkeeping for a single wallet session.

    Usage:
        calculator = LedgerCalculator(policy, storage=JsonFileStorage(data_dir))
        payment = calculator.add_payment("0.05", merchant, "coffee")
        split = calculator.add_split("0.02", [me, friend], "lunch", me)
        calculator.contribute_split(split.split_id)
        stats = calculator.stats()
    """

    def __init__(
        self,
        policy: Optional[RewardPolicy] = None,
        storage: Optional[Storage] = None,
    ) -> None:
        self._policy = policy or RewardPolicy.defaults()
        self._storage = storage
        self._payments: List[PaymentRecord] = []
        self._splits: List[SplitRecord] = []
        self._vault: List[VaultRecord] = []

        if storage is not None:
            self._load()

    @property
    def policy(self) -> RewardPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def add_payment(
        self,
        amount: str,
        merchant: str,
        description: str,
        now: Optional[datetime] = None,
    ) -> PaymentRecord:
        """Record a payment and the reward it earns.

        The reward rate is taken from the tier of the running total
        before this payment. Raises InvalidAmountError if amount does
        not parse.
        """
        value = parse_amount(amount)
        now = _resolve_now(now)

        prior_total = self.total_payments()
        reward = tiers.reward_for(value, prior_total, self._policy)

        payment = PaymentRecord(
            payment_id=_record_id("payment", now),
            amount=amount,
            timestamp=now,
            merchant=merchant,
            description=description,
            reward_earned=f"{reward:f}",
        )
        self._payments.append(payment)
        logger.debug(
            f"Payment {payment.payment_id}: {amount} ETH to {merchant}, "
            f"reward {payment.reward_earned} ({self._policy.tier_for(prior_total).value})"
        )
        self._save()
        return payment

    def total_payments(self) -> Decimal:
        return sum((parse_amount(p.amount) for p in self._payments), Decimal("0"))

    def total_rewards(self) -> Decimal:
        return sum(
            (parse_amount(p.reward_earned) for p in self._payments), Decimal("0")
        )

    def user_tier(self, total: Optional[Decimal] = None) -> Tier:
        if total is None:
            total = self.total_payments()
        return self._policy.tier_for(total)

    def tier_progress(self) -> TierProgress:
        return tiers.tier_progress(self.total_payments(), self._policy)

    def recent_payments(self, limit: Optional[int] = None) -> List[PaymentRecord]:
        """Payments newest first, truncated to limit (policy default: 5)."""
        if limit is None:
            limit = self._policy.recent_payments_limit
        ordered = sorted(self._payments, key=lambda p: p.timestamp, reverse=True)
        return ordered[:max(limit, 0)]

    def payments(self) -> List[PaymentRecord]:
        return list(self._payments)

    # ------------------------------------------------------------------
    # Splits
    # ------------------------------------------------------------------

    def add_split(
        self,
        total_amount: str,
        participants: Sequence[str],
        description: str,
        creator_address: str,
        now: Optional[datetime] = None,
    ) -> SplitRecord:
        """Record a pending split with an equal share per participant.

        creator_address is accepted for the caller's convenience but not
        stored; participants[0] is treated as the creator.
        """
        total = parse_amount(total_amount)
        if not participants:
            raise ValueError("Split requires at least one participant")
        now = _resolve_now(now)

        share = (total / Decimal(len(participants))).quantize(
            self._policy.reward_quantum, rounding=ROUND_HALF_UP
        )
        split = SplitRecord(
            split_id=_record_id("split", now),
            total_amount=total_amount,
            user_contribution=f"{share:f}",
            timestamp=now,
            participants=tuple(participants),
            description=description,
            status=SplitStatus.PENDING,
        )
        self._splits.append(split)
        logger.debug(
            f"Split {split.split_id} created by {creator_address}: "
            f"{total_amount} ETH across {len(participants)} participants"
        )
        self._save()
        return split

    def contribute_split(self, split_id: str, now: Optional[datetime] = None) -> bool:
        """Pay this user's share of a pending split.

        The share is recorded as a payment to "Split Payment", so it
        earns rewards and counts towards the tier. Returns False, with
        no state change, if the split is unknown or no longer pending.
        """
        split = self.get_split(split_id)
        if split is None or split.status != SplitStatus.PENDING:
            return False

        self.add_payment(
            split.user_contribution, SPLIT_PAYMENT_MERCHANT, split.description, now=now
        )
        split.transition_to(SplitStatus.COMPLETED)
        logger.debug(f"Split {split_id} completed")
        self._save()
        return True

    def expire_overdue_splits(self, now: Optional[datetime] = None) -> List[SplitRecord]:
        """Mark every pending split past its deadline as expired.

        Returns the splits that changed; persists only if any did.
        """
        now = _resolve_now(now)
        window = self._policy.split_window

        expired = []
        for split in self._splits:
            if split.status == SplitStatus.PENDING and now > split.deadline(window):
                split.transition_to(SplitStatus.EXPIRED)
                expired.append(split)

        if expired:
            logger.info(
                f"Expired {len(expired)} overdue split(s): "
                f"{', '.join(s.split_id for s in expired)}"
            )
            self._save()
        return expired

    def active_splits(self, now: Optional[datetime] = None) -> List[SplitRecord]:
        """Pending splits still within their deadline.

        Overdue splits are expired (and persisted) before filtering.
        """
        self.expire_overdue_splits(now)
        return [s for s in self._splits if s.status == SplitStatus.PENDING]

    def get_split(self, split_id: str) -> Optional[SplitRecord]:
        for split in self._splits:
            if split.split_id == split_id:
                return split
        return None

    def splits(self) -> List[SplitRecord]:
        return list(self._splits)

    # ------------------------------------------------------------------
    # Vault
    # ------------------------------------------------------------------

    def add_vault_deposit(self, amount: str, now: Optional[datetime] = None) -> VaultRecord:
        return self._add_vault(amount, VaultTxType.DEPOSIT, now)

    def add_vault_withdrawal(self, amount: str, now: Optional[datetime] = None) -> VaultRecord:
        """Append a withdrawal. No sufficiency check; the balance may go negative."""
        return self._add_vault(amount, VaultTxType.WITHDRAWAL, now)

    def current_vault_balance(self) -> Decimal:
        return vault_balance(self._vault)

    def calculate_vault_yield(self, now: Optional[datetime] = None) -> Decimal:
        now = _resolve_now(now)
        return vault_yield(self._vault, self._policy.vault_apy, now)

    def vault_transactions(self) -> List[VaultRecord]:
        return list(self._vault)

    def _add_vault(
        self,
        amount: str,
        tx_type: VaultTxType,
        now: Optional[datetime],
    ) -> VaultRecord:
        parse_amount(amount)
        now = _resolve_now(now)
        record = VaultRecord(amount=amount, timestamp=now, tx_type=tx_type)
        self._vault.append(record)
        logger.debug(f"Vault {tx_type.value}: {amount} ETH")
        self._save()
        return record

    # ------------------------------------------------------------------
    # Snapshot and reset
    # ------------------------------------------------------------------

    def stats(self, now: Optional[datetime] = None) -> LedgerStats:
        """Dashboard snapshot. Recomputed on every call; may expire splits."""
        now = _resolve_now(now)
        total = self.total_payments()
        active = self.active_splits(now)
        return LedgerStats(
            total_payments=total,
            total_rewards=self.total_rewards(),
            tier=self.user_tier(total),
            tier_progress=tiers.tier_progress(total, self._policy),
            vault_balance=self.current_vault_balance(),
            vault_yield=self.calculate_vault_yield(now),
            active_splits_count=len(active),
            recent_payments=tuple(self.recent_payments()),
            active_splits=tuple(active),
        )

    def reset(self) -> None:
        """Clear all three collections and persist the empty state."""
        self._payments = []
        self._splits = []
        self._vault = []
        logger.info("Ledger reset")
        self._save()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _save(self) -> None:
        if self._storage is None:
            return
        self._storage.save(
            PAYMENTS_KEY, [codec.payment_to_dict(p) for p in self._payments]
        )
        self._storage.save(SPLITS_KEY, [codec.split_to_dict(s) for s in self._splits])
        self._storage.save(VAULT_KEY, [codec.vault_to_dict(v) for v in self._vault])

    def _load(self) -> None:
        """Load all collections. A collection that fails to decode stays empty."""
        self._payments = self._load_key(PAYMENTS_KEY, codec.payment_from_dict)
        self._splits = self._load_key(SPLITS_KEY, codec.split_from_dict)
        self._vault = self._load_key(VAULT_KEY, codec.vault_from_dict)
        logger.debug(
            f"Loaded {len(self._payments)} payments, {len(self._splits)} splits, "
            f"{len(self._vault)} vault transactions"
        )

    def _load_key(self, key, decode) -> list:
        raw = self._storage.load(key)
        if not raw:
            return []
        try:
            return [decode(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Error loading {key} from storage: {e}")
            return []
