"""Vault yield — time-weighted simple interest over the vault ledger.

    daily_rate = APY / 365
    yield = Σ running_balance × daily_rate × days_between_transactions
          + final_balance × daily_rate × days_since_last_transaction

running_balance is the balance BEFORE the later transaction of each pair
is applied. Interest is simple: accrued yield is never added back to the
balance. Nothing here prevents a withdrawal from driving the running
balance negative; such intervals accrue negative yield.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Sequence

from flowfi.models.ledger import VaultRecord


DAYS_PER_YEAR = Decimal("365")
SECONDS_PER_DAY = Decimal("86400")
ZERO = Decimal("0")


def days_between(start: datetime, end: datetime) -> Decimal:
    """Fractional days from start to end (negative if end precedes start)."""
    delta = end - start
    seconds = Decimal(delta.days * 86400 + delta.seconds) + (
        Decimal(delta.microseconds) / Decimal(1_000_000)
    )
    return seconds / SECONDS_PER_DAY


def vault_balance(records: Iterable[VaultRecord]) -> Decimal:
    """Signed running sum in the order given (storage order)."""
    return sum((r.signed_amount() for r in records), ZERO)


def vault_yield(
    records: Sequence[VaultRecord],
    apy: Decimal,
    now: datetime,
) -> Decimal:
    """Accrued simple-interest yield up to now.

    Returns 0 when there are no transactions. The caller's sequence is
    not reordered.
    """
    if not records:
        return ZERO

    daily_rate = apy / DAYS_PER_YEAR
    ordered = sorted(records, key=lambda r: r.timestamp)

    total = ZERO
    running = ZERO
    previous = None
    for record in ordered:
        if previous is not None:
            elapsed = days_between(previous.timestamp, record.timestamp)
            total += running * daily_rate * elapsed
        running += record.signed_amount()
        previous = record

    # Trailing interval; a clock behind the last transaction accrues nothing
    trailing = max(days_between(ordered[-1].timestamp, now), ZERO)
    total += running * daily_rate * trailing
    return total
