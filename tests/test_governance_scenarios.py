"""
End-to-end governance scenarios and stateful property tests.

The state machine drives the service through random sequences of DAO and
proposal operations, tracking a plain-dict model alongside it, and checks
that outcomes and stored records always agree with the model.
"""

import asyncio

import pytest
from hypothesis import settings
from hypothesis import strategies as st
from hypothesis.stateful import (
    Bundle,
    RuleBasedStateMachine,
    invariant,
    multiple,
    rule,
)

from daostore.core.persistence.config import PersistenceConfig
from daostore.core.persistence.registry import PersistenceRegistry
from daostore.datastructures.dao_types import DaoPayload, ProposalPayload
from daostore.governance.results import GovernanceErrorKind
from daostore.governance.service import GovernanceService
from tests.conftest import ALICE, BOB, CAROL, create_dao


class TestGovernanceScenarios:
    @pytest.mark.asyncio
    async def test_member_proposal_vote_lifecycle(self, service: GovernanceService):
        dao = await create_dao(service, ALICE)
        await service.daos.add_member_to_dao(ALICE, dao.id, BOB)

        created = await service.proposals.create_proposal(
            BOB, ProposalPayload(title="T", details="d", dao_id=dao.id)
        )
        proposal = created.unwrap()
        assert proposal.votes == ()

        voted = await service.proposals.vote_on_proposal(BOB, dao.id, proposal.id)
        assert voted.unwrap().votes == (BOB,)

        outsider = await service.proposals.vote_on_proposal(CAROL, dao.id, proposal.id)
        assert outsider.error_kind is GovernanceErrorKind.FORBIDDEN

        repeat = await service.proposals.vote_on_proposal(BOB, dao.id, proposal.id)
        assert repeat.error_kind is GovernanceErrorKind.ALREADY_VOTED

        count = await service.proposals.get_votes_for_proposal(ALICE, dao.id, proposal.id)
        assert count.unwrap() == 1

    @pytest.mark.asyncio
    async def test_deleted_dao_takes_its_proposals(self, service: GovernanceService):
        dao = await create_dao(service, ALICE)
        proposal = (
            await service.proposals.create_proposal(
                ALICE, ProposalPayload(title="T", details="d", dao_id=dao.id)
            )
        ).unwrap()

        assert (await service.daos.delete_dao(ALICE, dao.id)).success

        assert (await service.daos.get_dao(ALICE, dao.id)).error_kind is (
            GovernanceErrorKind.NOT_FOUND
        )
        assert await service.context.proposals.get(proposal.id) is None
        lookup = await service.proposals.get_proposal(ALICE, dao.id, proposal.id)
        assert lookup.error_kind is GovernanceErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_concurrent_votes_are_serialized(self, service: GovernanceService):
        dao = await create_dao(service, ALICE)
        proposal = (
            await service.proposals.create_proposal(
                ALICE, ProposalPayload(title="T", details="d", dao_id=dao.id)
            )
        ).unwrap()

        results = await asyncio.gather(
            *(
                service.proposals.vote_on_proposal(ALICE, dao.id, proposal.id)
                for _ in range(5)
            )
        )

        assert sum(result.success for result in results) == 1
        assert all(
            result.error_kind is GovernanceErrorKind.ALREADY_VOTED
            for result in results
            if not result.success
        )
        stored = await service.context.proposals.get(proposal.id)
        assert stored.votes == (ALICE,)


PRINCIPALS = ["p-alice", "p-bob", "p-carol", "p-dave"]


class GovernanceStateMachine(RuleBasedStateMachine):
    """Stateful testing for governance operations."""

    __test__ = False

    daos = Bundle("daos")
    proposals = Bundle("proposals")

    def __init__(self):
        super().__init__()
        self.loop = asyncio.new_event_loop()
        self.registry = PersistenceRegistry(PersistenceConfig())
        self._run(self.registry.open())
        self.service = GovernanceService.from_registry(self.registry)
        self.owners: dict[str, str] = {}
        self.members: dict[str, list[str]] = {}
        self.proposal_dao: dict[str, str] = {}
        self.live_votes: dict[str, list[str]] = {}

    def _run(self, coro):
        return self.loop.run_until_complete(coro)

    @rule(target=daos, owner=st.sampled_from(PRINCIPALS))
    def create_dao(self, owner):
        dao = self._run(
            self.service.daos.create_dao(owner, DaoPayload(name="n", short_desc="d"))
        ).unwrap()
        self.owners[dao.id] = owner
        self.members[dao.id] = [owner]
        return dao.id

    @rule(
        dao_id=daos,
        caller=st.sampled_from(PRINCIPALS),
        member=st.sampled_from(PRINCIPALS),
    )
    def add_member(self, dao_id, caller, member):
        result = self._run(self.service.daos.add_member_to_dao(caller, dao_id, member))
        if dao_id not in self.owners:
            assert result.error_kind is GovernanceErrorKind.NOT_FOUND
        elif caller != self.owners[dao_id]:
            assert result.error_kind is GovernanceErrorKind.UNAUTHORIZED
        else:
            self.members[dao_id].append(member)
            assert list(result.unwrap().members) == self.members[dao_id]

    @rule(target=proposals, dao_id=daos, caller=st.sampled_from(PRINCIPALS))
    def create_proposal(self, dao_id, caller):
        result = self._run(
            self.service.proposals.create_proposal(
                caller, ProposalPayload(title="t", details="d", dao_id=dao_id)
            )
        )
        if dao_id not in self.owners:
            assert result.error_kind is GovernanceErrorKind.NOT_FOUND
            return multiple()
        if caller not in self.members[dao_id]:
            assert result.error_kind is GovernanceErrorKind.FORBIDDEN
            return multiple()
        proposal = result.unwrap()
        self.proposal_dao[proposal.id] = dao_id
        self.live_votes[proposal.id] = []
        return proposal.id

    @rule(proposal_id=proposals, caller=st.sampled_from(PRINCIPALS))
    def vote(self, proposal_id, caller):
        dao_id = self.proposal_dao[proposal_id]
        result = self._run(
            self.service.proposals.vote_on_proposal(caller, dao_id, proposal_id)
        )
        if dao_id not in self.owners:
            assert result.error_kind is GovernanceErrorKind.NOT_FOUND
        elif caller not in self.members[dao_id]:
            assert result.error_kind is GovernanceErrorKind.FORBIDDEN
        elif caller in self.live_votes[proposal_id]:
            assert result.error_kind is GovernanceErrorKind.ALREADY_VOTED
        else:
            self.live_votes[proposal_id].append(caller)
            assert list(result.unwrap().votes) == self.live_votes[proposal_id]

    @rule(dao_id=daos, caller=st.sampled_from(PRINCIPALS))
    def delete_dao(self, dao_id, caller):
        result = self._run(self.service.daos.delete_dao(caller, dao_id))
        if dao_id not in self.owners:
            assert result.error_kind is GovernanceErrorKind.NOT_FOUND
        elif caller != self.owners[dao_id]:
            assert result.error_kind is GovernanceErrorKind.UNAUTHORIZED
        else:
            assert result.unwrap().id == dao_id
            del self.owners[dao_id]
            del self.members[dao_id]
            for proposal_id, owning_dao in self.proposal_dao.items():
                if owning_dao == dao_id:
                    self.live_votes.pop(proposal_id, None)

    @invariant()
    def stored_proposals_match_model(self):
        stored = self._run(self.service.context.proposals.values())
        assert {proposal.id for proposal in stored} == set(self.live_votes)
        for proposal in stored:
            assert len(set(proposal.votes)) == len(proposal.votes)
            assert list(proposal.votes) == self.live_votes[proposal.id]
            assert proposal.dao_id in self.owners

    @invariant()
    def stored_daos_match_model(self):
        stored = self._run(self.service.context.daos.values())
        assert {dao.id: list(dao.members) for dao in stored} == self.members

    def teardown(self):
        self._run(self.registry.close())
        self.loop.close()


GovernanceStateMachine.TestCase.settings = settings(
    max_examples=30, stateful_step_count=25, deadline=None
)
TestGovernanceStateMachine = GovernanceStateMachine.TestCase
