"""Tests for display formatting."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from flowfi.formatting import (
    format_address,
    format_amount,
    format_currency,
    stats_to_display,
)
from flowfi.rewards.calculator import LedgerCalculator


def _now() -> datetime:
    return datetime(2026, 2, 16, 12, 0, 0, tzinfo=timezone.utc)


class TestFormatAddress:
    def test_shortens(self) -> None:
        address = "0x742d35cc6438c0532925a3b8aad43e6ededa2db3"
        assert format_address(address) == "0x742d...2db3"

    def test_short_input_unchanged(self) -> None:
        assert format_address("0xabc") == "0xabc"


class TestFormatAmount:
    def test_trims_trailing_zeros(self) -> None:
        assert format_amount("0.010000") == "0.01"

    def test_integer(self) -> None:
        assert format_amount("5") == "5"
        assert format_amount("5.000") == "5"

    def test_groups_thousands(self) -> None:
        assert format_amount("1234567.5") == "1,234,567.5"

    def test_rounds_to_max_decimals(self) -> None:
        assert format_amount("0.1234567") == "0.123457"
        assert format_amount(Decimal("0.125"), max_decimals=2) == "0.13"

    def test_zero(self) -> None:
        assert format_amount("0") == "0"
        assert format_amount("-0.0000001") == "0"

    def test_currency(self) -> None:
        assert format_currency("0.0050") == "0.005 ETH"
        assert format_currency(2, "FFI") == "2 FFI"


class TestStatsToDisplay:
    def test_empty(self) -> None:
        display = stats_to_display(LedgerCalculator().stats(now=_now()))
        assert display == {
            "totalPayments": "0.0000",
            "totalRewards": "0.000000",
            "tier": "BRONZE",
            "tierProgress": {"current": "0.0000", "next": "0.1000", "progress": "0.00"},
            "vaultBalance": "0.0000",
            "vaultYield": "0.000000",
            "activeSplitsCount": 0,
            "recentPayments": [],
            "activeSplits": [],
        }

    def test_populated(self) -> None:
        calculator = LedgerCalculator()
        calculator.add_payment("0.05", "shop", "coffee", now=_now())
        calculator.add_payment("0.6", "shop2", "rent", now=_now())
        calculator.add_vault_deposit("1.0", now=_now())
        display = stats_to_display(calculator.stats(now=_now() + timedelta(days=365)))
        assert display["totalPayments"] == "0.6500"
        assert display["totalRewards"] == "0.006500"
        assert display["tier"] == "GOLD"
        assert display["tierProgress"]["progress"] == "10.00"
        assert display["vaultBalance"] == "1.0000"
        assert display["vaultYield"] == "0.050000"
        assert [p["description"] for p in display["recentPayments"]] == ["coffee", "rent"]
