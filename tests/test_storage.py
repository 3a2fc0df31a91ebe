"""Tests for ledger storage — codec round-trip and storage failure handling."""

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from flowfi.models.ledger import (
    InvalidAmountError,
    PaymentRecord,
    SplitRecord,
    SplitStatus,
    VaultRecord,
    VaultTxType,
)
from flowfi.persistence import codec
from flowfi.persistence.storage import (
    InMemoryStorage,
    JsonFileStorage,
    PAYMENTS_KEY,
    SPLITS_KEY,
)
from flowfi.rewards.calculator import LedgerCalculator


def _now() -> datetime:
    return datetime(2026, 2, 16, 12, 0, 0, 123456, tzinfo=timezone.utc)


def _payment() -> PaymentRecord:
    return PaymentRecord(
        payment_id="payment_1",
        amount="0.123456789012345678",
        timestamp=_now(),
        merchant="0xabc",
        description="coffee ☕",
        reward_earned="0.001235",
    )


class TestCodec:
    def test_payment_round_trip(self) -> None:
        record = _payment()
        data = json.loads(json.dumps(codec.payment_to_dict(record)))
        assert codec.payment_from_dict(data) == record

    def test_amount_strings_untouched(self) -> None:
        data = codec.payment_to_dict(_payment())
        assert data["amount"] == "0.123456789012345678"
        assert data["rewardEarned"] == "0.001235"

    def test_split_round_trip(self) -> None:
        record = SplitRecord(
            split_id="split_1",
            total_amount="0.02",
            user_contribution="0.010000",
            timestamp=_now(),
            participants=("0xaaa", "0xbbb"),
            description="lunch",
            status=SplitStatus.EXPIRED,
        )
        data = json.loads(json.dumps(codec.split_to_dict(record)))
        assert codec.split_from_dict(data) == record

    def test_vault_round_trip(self) -> None:
        record = VaultRecord("1.5", _now(), VaultTxType.WITHDRAWAL)
        assert codec.vault_from_dict(codec.vault_to_dict(record)) == record

    def test_timestamp_keeps_microseconds_and_offset(self) -> None:
        encoded = codec.encode_timestamp(_now())
        assert encoded == "2026-02-16T12:00:00.123456+00:00"
        assert codec.decode_timestamp(encoded) == _now()

    def test_decode_z_suffix(self) -> None:
        ts = codec.decode_timestamp("2026-02-16T12:00:00.000Z")
        assert ts == datetime(2026, 2, 16, 12, 0, 0, tzinfo=timezone.utc)

    def test_decode_naive_as_utc(self) -> None:
        ts = codec.decode_timestamp("2026-02-16T12:00:00")
        assert ts.tzinfo is not None
        assert ts.utcoffset() == timedelta(0)

    def test_decode_other_offset(self) -> None:
        ts = codec.decode_timestamp("2026-02-16T14:00:00+02:00")
        assert ts == datetime(2026, 2, 16, 12, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw", [1700000000000, None])
    def test_decode_rejects_non_string_timestamp(self, raw) -> None:
        with pytest.raises(TypeError):
            codec.decode_timestamp(raw)

    @pytest.mark.parametrize("field", ["amount", "rewardEarned"])
    @pytest.mark.parametrize("value", [None, "abc", "NaN"])
    def test_payment_with_unreadable_amount_rejected(self, field, value) -> None:
        data = codec.payment_to_dict(_payment())
        data[field] = value
        with pytest.raises(InvalidAmountError):
            codec.payment_from_dict(data)

    def test_split_with_unreadable_share_rejected(self) -> None:
        data = {
            "id": "split_1",
            "totalAmount": "0.02",
            "userContribution": None,
            "timestamp": codec.encode_timestamp(_now()),
            "participants": ["0xaaa", "0xbbb"],
            "status": "pending",
        }
        with pytest.raises(InvalidAmountError):
            codec.split_from_dict(data)

    def test_numeric_amount_kept_as_string(self) -> None:
        data = codec.vault_to_dict(VaultRecord("1.5", _now(), VaultTxType.DEPOSIT))
        data["amount"] = 2
        assert codec.vault_from_dict(data).amount == "2"


class TestInMemoryStorage:
    def test_absent_key(self) -> None:
        assert InMemoryStorage().load(PAYMENTS_KEY) is None

    def test_save_and_load(self) -> None:
        storage = InMemoryStorage()
        storage.save(PAYMENTS_KEY, [{"a": "1"}])
        assert storage.load(PAYMENTS_KEY) == [{"a": "1"}]
        assert storage.keys() == [PAYMENTS_KEY]

    def test_load_returns_copy(self) -> None:
        storage = InMemoryStorage()
        storage.save(SPLITS_KEY, [{"a": "1"}])
        storage.load(SPLITS_KEY).append({"b": "2"})
        assert storage.load(SPLITS_KEY) == [{"a": "1"}]


class TestJsonFileStorage:
    def test_absent_key(self, tmp_path: Path) -> None:
        assert JsonFileStorage(tmp_path).load(PAYMENTS_KEY) is None

    def test_save_and_load(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path / "data")
        storage.save(PAYMENTS_KEY, [codec.payment_to_dict(_payment())])
        assert storage.path_for(PAYMENTS_KEY).exists()
        loaded = storage.load(PAYMENTS_KEY)
        assert codec.payment_from_dict(loaded[0]) == _payment()

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path)
        storage.save(PAYMENTS_KEY, [])
        storage.save(PAYMENTS_KEY, [{"x": "y"}])
        assert sorted(p.name for p in tmp_path.iterdir()) == ["flowfi_payments.json"]

    def test_corrupt_file_treated_as_absent(self, tmp_path: Path, caplog) -> None:
        storage = JsonFileStorage(tmp_path)
        storage.path_for(PAYMENTS_KEY).write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.ERROR):
            assert storage.load(PAYMENTS_KEY) is None
        assert "Error loading flowfi_payments" in caplog.text

    def test_non_array_treated_as_absent(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path)
        storage.path_for(PAYMENTS_KEY).write_text('{"a": 1}', encoding="utf-8")
        assert storage.load(PAYMENTS_KEY) is None

    def test_unwritable_directory_drops_write(self, tmp_path: Path, caplog) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        storage = JsonFileStorage(blocker / "data")
        with caplog.at_level(logging.WARNING):
            storage.save(PAYMENTS_KEY, [{"a": "1"}])
        assert "dropped write" in caplog.text
        assert storage.load(PAYMENTS_KEY) is None

    def test_calculator_memory_only_when_storage_unavailable(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        calculator = LedgerCalculator(storage=JsonFileStorage(blocker / "data"))
        calculator.add_payment("0.05", "shop", "coffee")
        assert len(calculator.payments()) == 1

    def test_calculator_reload_from_files(self, tmp_path: Path) -> None:
        first = LedgerCalculator(storage=JsonFileStorage(tmp_path))
        first.add_payment("0.05", "shop", "coffee", now=_now())
        first.add_vault_deposit("1.0", now=_now())
        second = LedgerCalculator(storage=JsonFileStorage(tmp_path))
        assert second.payments() == first.payments()
        assert second.vault_transactions() == first.vault_transactions()
