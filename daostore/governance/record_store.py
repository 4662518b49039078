"""Typed record collections layered over a ``KeyValueStore``."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from loguru import logger

from daostore.core.persistence.kv_store import KeyValueStore
from daostore.core.serialization import JsonSerializer, Serializer
from daostore.datastructures.dao_types import Dao, Proposal
from daostore.datastructures.type_aliases import JsonDict, StoreKey


class StoredRecord(Protocol):
    @property
    def id(self) -> str: ...

    def to_dict(self) -> JsonDict: ...


@dataclass(slots=True)
class RecordStore[R: StoredRecord]:
    """Durable id -> record mapping with point lookup, upsert, delete and scan."""

    kv_store: KeyValueStore
    decoder: Callable[[JsonDict], R]
    name: str = "records"
    serializer: Serializer = field(default_factory=JsonSerializer)

    async def get(self, record_id: StoreKey) -> R | None:
        raw = await self.kv_store.get(record_id)
        if raw is None:
            return None
        return self.decoder(self.serializer.deserialize(raw))

    async def put(self, record: R) -> None:
        await self.kv_store.put(record.id, self.serializer.serialize(record.to_dict()))

    async def remove(self, record_id: StoreKey) -> None:
        await self.kv_store.delete(record_id)

    async def remove_many(self, record_ids: Sequence[StoreKey]) -> None:
        if not record_ids:
            return
        logger.debug("Removing {} {} records", len(record_ids), self.name)
        await self.kv_store.delete_many(record_ids)

    async def values(self) -> list[R]:
        """Every stored record in key order."""
        entries = await self.kv_store.list_prefix("")
        return [self.decoder(self.serializer.deserialize(raw)) for _, raw in entries]


def dao_record_store(kv_store: KeyValueStore) -> RecordStore[Dao]:
    return RecordStore(kv_store=kv_store, decoder=Dao.from_dict, name="dao")


def proposal_record_store(kv_store: KeyValueStore) -> RecordStore[Proposal]:
    return RecordStore(kv_store=kv_store, decoder=Proposal.from_dict, name="proposal")
