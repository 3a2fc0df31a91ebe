"""Tier rewards — per-payment reward and progress towards the next tier.

Reward for a payment is computed against the tier of the running total
BEFORE the payment is counted:

    tier = policy.tier_for(prior_total)
    reward = round(amount × rate(tier), 6)

So a first payment of 0.6 ETH earns at the BRONZE rate, even though the
total it produces would qualify for GOLD.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from flowfi.models.ledger import TierProgress
from flowfi.policy.resolver import RewardPolicy


HUNDRED = Decimal("100")


def quantize_amount(value: Decimal, places: int = 6) -> str:
    """Round half-up to a fixed number of places, as a plain decimal string."""
    quantum = Decimal(1).scaleb(-places)
    return f"{value.quantize(quantum, rounding=ROUND_HALF_UP):f}"


def reward_for(amount: Decimal, prior_total: Decimal, policy: RewardPolicy) -> Decimal:
    tier = policy.tier_for(prior_total)
    return (amount * policy.rate_for(tier)).quantize(
        policy.reward_quantum, rounding=ROUND_HALF_UP
    )


def tier_progress(total: Decimal, policy: RewardPolicy) -> TierProgress:
    """Progress of total between the current and next tier thresholds.

    At the top tier progress is 100 and next equals current.
    """
    tier = policy.tier_for(total)
    upper = policy.next_tier(tier)
    if upper is None:
        return TierProgress(current=total, next=total, progress=HUNDRED)

    current_threshold = policy.threshold_for(tier)
    next_threshold = policy.threshold_for(upper)
    progress = (
        (total - current_threshold) / (next_threshold - current_threshold)
    ) * HUNDRED
    return TierProgress(
        current=total,
        next=next_threshold,
        progress=min(progress, HUNDRED),
    )
