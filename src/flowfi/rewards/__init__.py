"""Rewards subsystem — tier rewards, vault yield and the ledger calculator."""

from flowfi.rewards.calculator import LedgerCalculator

__all__ = [
    "LedgerCalculator",
]
