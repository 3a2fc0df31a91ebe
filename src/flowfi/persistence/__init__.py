"""Persistence — record codec and key-value storage backends."""

from flowfi.persistence.storage import (
    InMemoryStorage,
    JsonFileStorage,
    LEDGER_KEYS,
    PAYMENTS_KEY,
    SPLITS_KEY,
    Storage,
    VAULT_KEY,
)

__all__ = [
    "InMemoryStorage",
    "JsonFileStorage",
    "LEDGER_KEYS",
    "PAYMENTS_KEY",
    "SPLITS_KEY",
    "Storage",
    "VAULT_KEY",
]
