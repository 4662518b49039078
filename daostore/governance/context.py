"""Service context shared by the DAO and proposal operations."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from daostore.core.persistence.registry import PersistenceRegistry
from daostore.datastructures.dao_types import (
    Clock,
    Dao,
    IdGenerator,
    MonotonicClock,
    Proposal,
    generate_record_id,
)

from .record_store import RecordStore, dao_record_store, proposal_record_store

DAO_STORE_NAME = "daos"
PROPOSAL_STORE_NAME = "proposals"


@dataclass(slots=True)
class GovernanceContext:
    """
    Everything an operation needs besides the caller: both record stores, the
    clock and the id generator.

    Operations take the context's lock for their whole fetch, check, write
    sequence, so two calls against the same stores never interleave at an
    ``await``.
    """

    daos: RecordStore[Dao]
    proposals: RecordStore[Proposal]
    clock: Clock = field(default_factory=MonotonicClock)
    id_generator: IdGenerator = generate_record_id
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    @classmethod
    def from_registry(
        cls,
        registry: PersistenceRegistry,
        *,
        clock: Clock | None = None,
        id_generator: IdGenerator | None = None,
    ) -> GovernanceContext:
        return cls(
            daos=dao_record_store(registry.key_value_store(DAO_STORE_NAME)),
            proposals=proposal_record_store(
                registry.key_value_store(PROPOSAL_STORE_NAME)
            ),
            clock=clock or MonotonicClock(),
            id_generator=id_generator or generate_record_id,
        )

    @asynccontextmanager
    async def serialized(self) -> AsyncIterator[None]:
        async with self._lock:
            yield
