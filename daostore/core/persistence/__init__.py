"""Durable key/value storage used by the DAO and proposal record stores."""

from __future__ import annotations

from .backend import (
    MemoryPersistenceBackend,
    PersistenceBackend,
    SQLitePersistenceBackend,
)
from .config import PersistenceConfig, PersistenceMode
from .kv_store import KeyValueStore, MemoryKeyValueStore, SQLiteKeyValueStore
from .registry import PersistenceRegistry

__all__ = [
    "PersistenceConfig",
    "PersistenceMode",
    "PersistenceBackend",
    "MemoryPersistenceBackend",
    "SQLitePersistenceBackend",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "PersistenceRegistry",
]
