"""Key-value storage for ledger records.

Three logical keys, each holding a JSON array of encoded records:

    flowfi_payments   — payment records
    flowfi_splits     — split records
    flowfi_vault      — vault transactions

Writes are fire-and-forget. If the storage medium is not accessible the
write is logged and dropped, and the ledger carries on memory-only for
the session. Stored data that cannot be read is logged and treated as
absent.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol


logger = logging.getLogger(__name__)

PAYMENTS_KEY = "flowfi_payments"
SPLITS_KEY = "flowfi_splits"
VAULT_KEY = "flowfi_vault"

LEDGER_KEYS = (PAYMENTS_KEY, SPLITS_KEY, VAULT_KEY)


class Storage(Protocol):
    """Persistence contract used by the ledger calculator."""

    def save(self, key: str, records: List[Dict[str, Any]]) -> None:
        ...

    def load(self, key: str) -> Optional[List[Dict[str, Any]]]:
        ...


class InMemoryStorage:
    """Dict-backed storage. Records are copied through JSON on save so
    callers observe the same round-trip as file storage."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def save(self, key: str, records: List[Dict[str, Any]]) -> None:
        self._data[key] = json.dumps(records, ensure_ascii=False)

    def load(self, key: str) -> Optional[List[Dict[str, Any]]]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def keys(self) -> List[str]:
        return sorted(self._data)


class JsonFileStorage:
    """One JSON file per key under a data directory.

    Usage:
        storage = JsonFileStorage(Path("data"))
        calculator = LedgerCalculator(policy, storage=storage)
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def save(self, key: str, records: List[Dict[str, Any]]) -> None:
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.warning(f"Storage unavailable, dropped write of {key}: {e}")

    def load(self, key: str) -> Optional[List[Dict[str, Any]]]:
        path = self.path_for(key)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.error(f"Error loading {key} from {path}: {e}")
            return None
        if not isinstance(data, list):
            logger.error(f"Error loading {key} from {path}: expected a JSON array")
            return None
        return data
