"""Pytest configuration and fixtures for daostore testing.

Every service fixture is parametrized over the in-memory and SQLite
persistence backends so each governance test runs against both, and each
fixture closes its registry so no SQLite handle outlives its test.
"""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from itertools import count

import pytest
import pytest_asyncio

from daostore.core.persistence.config import PersistenceConfig, PersistenceMode
from daostore.core.persistence.registry import PersistenceRegistry
from daostore.datastructures.dao_types import DaoPayload, ProposalPayload
from daostore.governance.service import GovernanceService

ALICE = "alice-principal"
BOB = "bob-principal"
CAROL = "carol-principal"

BASE_TIME_NS = 1_700_000_000_000_000_000


@dataclass
class StepClock:
    """Deterministic clock advancing one microsecond per reading."""

    start: int = BASE_TIME_NS
    step: int = 1_000

    def __post_init__(self) -> None:
        self._ticks = count()

    def __call__(self) -> int:
        return self.start + next(self._ticks) * self.step


@pytest.fixture
def step_clock() -> StepClock:
    return StepClock()


@pytest_asyncio.fixture(params=[PersistenceMode.MEMORY, PersistenceMode.SQLITE])
async def registry(request, tmp_path) -> AsyncGenerator[PersistenceRegistry, None]:
    """An opened persistence registry for each backend."""
    registry = PersistenceRegistry(
        PersistenceConfig(mode=request.param, data_dir=tmp_path)
    )
    await registry.open()
    try:
        yield registry
    finally:
        await registry.close()


@pytest_asyncio.fixture
async def service(
    registry: PersistenceRegistry, step_clock: StepClock
) -> GovernanceService:
    return GovernanceService.from_registry(registry, clock=step_clock)


async def create_dao(
    service: GovernanceService, owner: str = ALICE, name: str = "Guild"
):
    result = await service.daos.create_dao(
        owner, DaoPayload(name=name, short_desc="Makers guild", avatar="a.png")
    )
    return result.unwrap()


async def create_proposal(
    service: GovernanceService, caller: str, dao_id: str, title: str = "T"
):
    result = await service.proposals.create_proposal(
        caller, ProposalPayload(title=title, details="d", dao_id=dao_id)
    )
    return result.unwrap()
