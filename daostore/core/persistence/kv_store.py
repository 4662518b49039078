from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover - typing only
    from daostore.core.persistence.backend import SQLitePersistenceBackend


class KeyValueStore(Protocol):
    """Durable key/value interface with key-ordered iteration."""

    async def get(self, key: str) -> bytes | None: ...

    async def put(self, key: str, value: bytes) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def delete_many(self, keys: Sequence[str]) -> None: ...

    async def list_prefix(self, prefix: str) -> list[tuple[str, bytes]]: ...


@dataclass(slots=True)
class MemoryKeyValueStore:
    """In-memory key/value store for development and tests."""

    _entries: dict[str, bytes] = field(default_factory=dict)

    async def get(self, key: str) -> bytes | None:
        return self._entries.get(key)

    async def put(self, key: str, value: bytes) -> None:
        self._entries[key] = value

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def delete_many(self, keys: Sequence[str]) -> None:
        for key in keys:
            self._entries.pop(key, None)

    async def list_prefix(self, prefix: str) -> list[tuple[str, bytes]]:
        return sorted(
            (key, value)
            for key, value in self._entries.items()
            if key.startswith(prefix)
        )


@dataclass(slots=True)
class SQLiteKeyValueStore:
    """SQLite-backed key/value store."""

    backend: SQLitePersistenceBackend
    namespace: str

    async def get(self, key: str) -> bytes | None:
        row = await self.backend.fetch_one(
            "SELECT value FROM kv_store WHERE namespace=? AND key=?",
            (self.namespace, key),
        )
        if row is None:
            return None
        return row[0]

    async def put(self, key: str, value: bytes) -> None:
        await self.backend.execute(
            "INSERT OR REPLACE INTO kv_store (namespace, key, value) VALUES (?, ?, ?)",
            (self.namespace, key, value),
        )

    async def delete(self, key: str) -> None:
        await self.backend.execute(
            "DELETE FROM kv_store WHERE namespace=? AND key=?",
            (self.namespace, key),
        )

    async def delete_many(self, keys: Sequence[str]) -> None:
        # One commit for the whole batch.
        await self.backend.execute_many(
            "DELETE FROM kv_store WHERE namespace=? AND key=?",
            [(self.namespace, key) for key in keys],
        )

    async def list_prefix(self, prefix: str) -> list[tuple[str, bytes]]:
        rows = await self.backend.fetch_all(
            "SELECT key, value FROM kv_store"
            " WHERE namespace=? AND substr(key, 1, ?)=? ORDER BY key",
            (self.namespace, len(prefix), prefix),
        )
        return [(key, value) for key, value in rows]
