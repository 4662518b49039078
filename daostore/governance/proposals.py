"""
Proposal operations.

Reads, creation and voting are gated on membership of the DAO named in the
call. Editing and deleting are gated on owning the proposal itself; DAO
membership plays no part there.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from daostore.datastructures.dao_types import (
    Dao,
    EditProposalPayload,
    Proposal,
    ProposalPayload,
)
from daostore.datastructures.type_aliases import (
    DaoId,
    PrincipalId,
    ProposalId,
    VoteCount,
)

from .authorization import is_member, is_owner
from .context import GovernanceContext
from .queries import proposals_for_dao
from .results import GovernanceError, GovernanceResult, RecordKind


def _dao_not_found(dao_id: DaoId) -> GovernanceError:
    return GovernanceError.not_found(
        RecordKind.DAO, dao_id, f"A dao with id={dao_id} was not found."
    )


def _proposal_not_found(proposal_id: ProposalId) -> GovernanceError:
    return GovernanceError.not_found(
        RecordKind.PROPOSAL,
        proposal_id,
        f"A proposal with id={proposal_id} was not found.",
    )


@dataclass(slots=True)
class ProposalOperations:
    context: GovernanceContext

    async def _member_dao(
        self, caller: PrincipalId, dao_id: DaoId
    ) -> GovernanceResult[Dao]:
        dao = await self.context.daos.get(dao_id)
        if dao is None:
            return GovernanceResult.fail(_dao_not_found(dao_id))
        if not is_member(dao, caller):
            logger.warning("{} is not a member of dao {}", caller, dao_id)
            return GovernanceResult.fail(GovernanceError.forbidden(dao_id))
        return GovernanceResult.ok(dao)

    async def _proposal_in_dao(
        self, caller: PrincipalId, dao_id: DaoId, proposal_id: ProposalId
    ) -> GovernanceResult[Proposal]:
        membership = await self._member_dao(caller, dao_id)
        if membership.error is not None:
            return GovernanceResult.fail(membership.error)
        proposal = await self.context.proposals.get(proposal_id)
        # A proposal filed under another DAO is invisible through this one.
        if proposal is None or proposal.dao_id != dao_id:
            return GovernanceResult.fail(_proposal_not_found(proposal_id))
        return GovernanceResult.ok(proposal)

    async def create_proposal(
        self, caller: PrincipalId, payload: ProposalPayload
    ) -> GovernanceResult[Proposal]:
        async with self.context.serialized():
            membership = await self._member_dao(caller, payload.dao_id)
            if membership.error is not None:
                return GovernanceResult.fail(membership.error)
            proposal = Proposal.create(
                proposal_id=self.context.id_generator(),
                owner=caller,
                payload=payload,
                created_at=self.context.clock(),
            )
            await self.context.proposals.put(proposal)
        logger.info(
            "Created proposal {} in dao {} by {}", proposal.id, payload.dao_id, caller
        )
        return GovernanceResult.ok(proposal)

    async def vote_on_proposal(
        self, caller: PrincipalId, dao_id: DaoId, proposal_id: ProposalId
    ) -> GovernanceResult[Proposal]:
        async with self.context.serialized():
            found = await self._proposal_in_dao(caller, dao_id, proposal_id)
            if found.error is not None:
                return found
            proposal = found.unwrap()
            if proposal.has_voted(caller):
                logger.debug("{} already voted on proposal {}", caller, proposal_id)
                return GovernanceResult.fail(
                    GovernanceError.already_voted(proposal_id)
                )
            voted = proposal.with_vote(caller)
            await self.context.proposals.put(voted)
        logger.info("{} voted on proposal {}", caller, proposal_id)
        return GovernanceResult.ok(voted)

    async def edit_proposal(
        self, caller: PrincipalId, payload: EditProposalPayload
    ) -> GovernanceResult[Proposal]:
        async with self.context.serialized():
            proposal = await self.context.proposals.get(payload.id)
            if proposal is None:
                return GovernanceResult.fail(
                    GovernanceError.not_found(
                        RecordKind.PROPOSAL,
                        payload.id,
                        f"Couldn't update a proposal with id={payload.id}. "
                        "Proposal not found.",
                    )
                )
            if not is_owner(proposal, caller):
                logger.warning("{} refused edit of proposal {}", caller, payload.id)
                return GovernanceResult.fail(
                    GovernanceError.unauthorized(
                        RecordKind.PROPOSAL,
                        payload.id,
                        "You are not authorized to update the proposal.",
                    )
                )
            edited = proposal.with_edit(payload, updated_at=self.context.clock())
            await self.context.proposals.put(edited)
        logger.info("Edited proposal {}", payload.id)
        return GovernanceResult.ok(edited)

    async def get_proposal(
        self, caller: PrincipalId, dao_id: DaoId, proposal_id: ProposalId
    ) -> GovernanceResult[Proposal]:
        async with self.context.serialized():
            return await self._proposal_in_dao(caller, dao_id, proposal_id)

    async def get_proposals_for_dao(
        self, caller: PrincipalId, dao_id: DaoId
    ) -> GovernanceResult[list[Proposal]]:
        async with self.context.serialized():
            membership = await self._member_dao(caller, dao_id)
            if membership.error is not None:
                return GovernanceResult.fail(membership.error)
            proposals = proposals_for_dao(
                await self.context.proposals.values(), dao_id
            )
        return GovernanceResult.ok(proposals)

    async def get_votes_for_proposal(
        self, caller: PrincipalId, dao_id: DaoId, proposal_id: ProposalId
    ) -> GovernanceResult[VoteCount]:
        async with self.context.serialized():
            found = await self._proposal_in_dao(caller, dao_id, proposal_id)
        if found.error is not None:
            return GovernanceResult.fail(found.error)
        return GovernanceResult.ok(found.unwrap().vote_count)

    async def delete_proposal(
        self, caller: PrincipalId, proposal_id: ProposalId
    ) -> GovernanceResult[Proposal]:
        async with self.context.serialized():
            proposal = await self.context.proposals.get(proposal_id)
            if proposal is None:
                return GovernanceResult.fail(
                    GovernanceError.not_found(
                        RecordKind.PROPOSAL,
                        proposal_id,
                        f"Couldn't delete a proposal with id={proposal_id}. "
                        "Proposal not found.",
                    )
                )
            if not is_owner(proposal, caller):
                logger.warning(
                    "{} refused delete of proposal {}", caller, proposal_id
                )
                return GovernanceResult.fail(
                    GovernanceError.unauthorized(
                        RecordKind.PROPOSAL,
                        proposal_id,
                        "You are not authorized to delete the proposal.",
                    )
                )
            await self.context.proposals.remove(proposal_id)
        logger.info("Deleted proposal {}", proposal_id)
        return GovernanceResult.ok(proposal)
