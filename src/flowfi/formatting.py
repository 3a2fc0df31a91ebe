"""Display formatting for addresses, amounts and the dashboard snapshot."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Union

from flowfi.models.ledger import LedgerStats
from flowfi.persistence import codec
from flowfi.rewards.tiers import quantize_amount


def format_address(address: str) -> str:
    """Shorten an address to 0x1234...abcd."""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


def format_amount(amount: Union[str, int, Decimal], max_decimals: int = 6) -> str:
    """Group thousands, round to max_decimals and trim trailing zeros."""
    value = Decimal(str(amount)).quantize(
        Decimal(1).scaleb(-max_decimals), rounding=ROUND_HALF_UP
    )
    text = f"{value:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_currency(amount: Union[str, int, Decimal], currency: str = "ETH") -> str:
    return f"{format_amount(amount)} {currency}"


def stats_to_display(stats: LedgerStats) -> Dict[str, Any]:
    """JSON-safe dashboard snapshot at display precision.

    Totals and balances show 4 places; rewards and yield show 6.
    """
    progress = stats.tier_progress
    return {
        "totalPayments": quantize_amount(stats.total_payments, 4),
        "totalRewards": quantize_amount(stats.total_rewards, 6),
        "tier": stats.tier.value,
        "tierProgress": {
            "current": quantize_amount(progress.current, 4),
            "next": quantize_amount(progress.next, 4),
            "progress": quantize_amount(progress.progress, 2),
        },
        "vaultBalance": quantize_amount(stats.vault_balance, 4),
        "vaultYield": quantize_amount(stats.vault_yield, 6),
        "activeSplitsCount": stats.active_splits_count,
        "recentPayments": [codec.payment_to_dict(p) for p in stats.recent_payments],
        "activeSplits": [codec.split_to_dict(s) for s in stats.active_splits],
    }
