"""Read-only projections computed by scanning the record stores."""

from __future__ import annotations

from collections.abc import Iterable

from daostore.datastructures.dao_types import Dao, Proposal
from daostore.datastructures.type_aliases import DaoId, PrincipalId, ProposalId

from .authorization import is_member


def daos_for_member(daos: Iterable[Dao], caller: PrincipalId) -> list[Dao]:
    return [dao for dao in daos if is_member(dao, caller)]


def proposals_for_dao(proposals: Iterable[Proposal], dao_id: DaoId) -> list[Proposal]:
    return [proposal for proposal in proposals if proposal.dao_id == dao_id]


def proposal_ids_for_dao(
    proposals: Iterable[Proposal], dao_id: DaoId
) -> list[ProposalId]:
    """Ids of every proposal that a cascading DAO delete must remove."""
    return [proposal.id for proposal in proposals_for_dao(proposals, dao_id)]
