"""Tests for ledger models — amount parsing, tier ordering, split state machine."""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from flowfi.models.ledger import (
    InvalidAmountError,
    SplitRecord,
    SplitStatus,
    Tier,
    TIER_ORDER,
    VaultRecord,
    VaultTxType,
    parse_amount,
)


def _now() -> datetime:
    return datetime(2026, 2, 16, 12, 0, 0, tzinfo=timezone.utc)


def _make_split(status: SplitStatus = SplitStatus.PENDING) -> SplitRecord:
    return SplitRecord(
        split_id="split_1",
        total_amount="0.02",
        user_contribution="0.010000",
        timestamp=_now(),
        participants=("0xaaa", "0xbbb"),
        description="lunch",
        status=status,
    )


class TestParseAmount:
    def test_exact_decimal(self) -> None:
        assert parse_amount("0.123456") == Decimal("0.123456")

    def test_preserves_many_fractional_digits(self) -> None:
        assert parse_amount("0.000000000000000001") == Decimal("1E-18")

    def test_zero_allowed(self) -> None:
        assert parse_amount("0") == Decimal("0")

    def test_surrounding_whitespace(self) -> None:
        assert parse_amount(" 1.5 ") == Decimal("1.5")

    @pytest.mark.parametrize("raw", ["abc", "", "1.2.3", "NaN", "Infinity", "-0.1"])
    def test_rejects_malformed(self, raw: str) -> None:
        with pytest.raises(InvalidAmountError):
            parse_amount(raw)

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_amount("not a number")


class TestTierOrdering:
    def test_rank_ascends(self) -> None:
        ranks = [t.rank for t in TIER_ORDER]
        assert ranks == sorted(ranks)
        assert Tier.BRONZE.rank < Tier.SILVER.rank < Tier.GOLD.rank < Tier.PLATINUM.rank

    def test_string_values(self) -> None:
        assert Tier("GOLD") is Tier.GOLD


class TestSplitStateMachine:
    def test_pending_to_completed(self) -> None:
        split = _make_split()
        split.transition_to(SplitStatus.COMPLETED)
        assert split.status == SplitStatus.COMPLETED

    def test_pending_to_expired(self) -> None:
        split = _make_split()
        split.transition_to(SplitStatus.EXPIRED)
        assert split.status == SplitStatus.EXPIRED

    def test_completed_is_terminal(self) -> None:
        split = _make_split(SplitStatus.COMPLETED)
        with pytest.raises(ValueError, match="Invalid split transition"):
            split.transition_to(SplitStatus.EXPIRED)

    def test_expired_is_terminal(self) -> None:
        split = _make_split(SplitStatus.EXPIRED)
        with pytest.raises(ValueError):
            split.transition_to(SplitStatus.COMPLETED)

    def test_no_self_transition(self) -> None:
        split = _make_split()
        with pytest.raises(ValueError):
            split.transition_to(SplitStatus.PENDING)

    def test_creator_is_first_participant(self) -> None:
        assert _make_split().creator == "0xaaa"

    def test_deadline(self) -> None:
        split = _make_split()
        assert split.deadline(timedelta(hours=24)) == _now() + timedelta(hours=24)


class TestVaultRecord:
    def test_signed_amounts(self) -> None:
        deposit = VaultRecord("1.5", _now(), VaultTxType.DEPOSIT)
        withdrawal = VaultRecord("0.5", _now(), VaultTxType.WITHDRAWAL)
        assert deposit.signed_amount() == Decimal("1.5")
        assert withdrawal.signed_amount() == Decimal("-0.5")
