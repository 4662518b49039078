"""Single entry point bundling the DAO and proposal operations."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from loguru import logger

from daostore.config import DaoStoreSettings
from daostore.core.persistence.registry import PersistenceRegistry
from daostore.datastructures.dao_types import Clock, IdGenerator

from .context import GovernanceContext
from .daos import DaoOperations
from .proposals import ProposalOperations


@dataclass(slots=True)
class GovernanceService:
    """
    The full governance surface over one context.

    ``daos`` and ``proposals`` share the context, and therefore its lock and
    stores; a DAO delete observes every proposal the proposal side wrote.
    """

    context: GovernanceContext
    daos: DaoOperations = field(init=False)
    proposals: ProposalOperations = field(init=False)

    def __post_init__(self) -> None:
        self.daos = DaoOperations(self.context)
        self.proposals = ProposalOperations(self.context)

    @classmethod
    def from_registry(
        cls,
        registry: PersistenceRegistry,
        *,
        clock: Clock | None = None,
        id_generator: IdGenerator | None = None,
    ) -> GovernanceService:
        return cls(
            GovernanceContext.from_registry(
                registry, clock=clock, id_generator=id_generator
            )
        )


@asynccontextmanager
async def open_governance(
    settings: DaoStoreSettings,
) -> AsyncIterator[GovernanceService]:
    """Open persistence per ``settings`` and yield a ready service."""
    registry = PersistenceRegistry(
        config=settings.persistence_config, namespace=settings.namespace
    )
    await registry.open()
    logger.debug(
        "Governance stores open: namespace={} mode={}",
        settings.namespace,
        settings.persistence_config.mode,
    )
    try:
        yield GovernanceService.from_registry(registry)
    finally:
        await registry.close()
