"""
DAO operations.

Every operation follows the same shape: fetch the DAO by id, check the caller
against it, then write back. Only the owner may update a DAO, add members to
it or delete it; any principal may read a DAO by id.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from daostore.datastructures.dao_types import Dao, DaoPayload
from daostore.datastructures.type_aliases import DaoId, PrincipalId

from .authorization import is_member, is_owner
from .context import GovernanceContext
from .queries import daos_for_member, proposal_ids_for_dao
from .results import GovernanceError, GovernanceResult, RecordKind


@dataclass(slots=True)
class DaoOperations:
    context: GovernanceContext

    async def list_daos_for_caller(
        self, caller: PrincipalId
    ) -> GovernanceResult[list[Dao]]:
        async with self.context.serialized():
            daos = daos_for_member(await self.context.daos.values(), caller)
        logger.debug("Caller {} belongs to {} daos", caller, len(daos))
        return GovernanceResult.ok(daos)

    async def get_dao(self, caller: PrincipalId, dao_id: DaoId) -> GovernanceResult[Dao]:
        async with self.context.serialized():
            dao = await self.context.daos.get(dao_id)
        if dao is None:
            return GovernanceResult.fail(
                GovernanceError.not_found(
                    RecordKind.DAO, dao_id, f"A dao with id={dao_id} was not found."
                )
            )
        return GovernanceResult.ok(dao)

    async def create_dao(
        self, caller: PrincipalId, payload: DaoPayload
    ) -> GovernanceResult[Dao]:
        async with self.context.serialized():
            dao = Dao.create(
                dao_id=self.context.id_generator(),
                owner=caller,
                payload=payload,
                created_at=self.context.clock(),
            )
            await self.context.daos.put(dao)
        logger.info("Created dao {} owned by {}", dao.id, caller)
        return GovernanceResult.ok(dao)

    async def update_dao(
        self, caller: PrincipalId, dao_id: DaoId, payload: DaoPayload
    ) -> GovernanceResult[Dao]:
        async with self.context.serialized():
            dao = await self.context.daos.get(dao_id)
            if dao is None:
                return GovernanceResult.fail(
                    GovernanceError.not_found(
                        RecordKind.DAO,
                        dao_id,
                        f"Couldn't update a dao with id={dao_id}. Dao not found.",
                    )
                )
            if not is_owner(dao, caller):
                logger.warning("{} refused update of dao {}", caller, dao_id)
                return GovernanceResult.fail(
                    GovernanceError.unauthorized(
                        RecordKind.DAO,
                        dao_id,
                        "You are not authorized to update the dao.",
                    )
                )
            updated = dao.with_payload(payload, updated_at=self.context.clock())
            await self.context.daos.put(updated)
        logger.info("Updated dao {}", dao_id)
        return GovernanceResult.ok(updated)

    async def add_member_to_dao(
        self, caller: PrincipalId, dao_id: DaoId, member: PrincipalId
    ) -> GovernanceResult[Dao]:
        async with self.context.serialized():
            dao = await self.context.daos.get(dao_id)
            if dao is None:
                return GovernanceResult.fail(
                    GovernanceError.not_found(
                        RecordKind.DAO,
                        dao_id,
                        f"Couldn't update a dao with id={dao_id}. Dao not found.",
                    )
                )
            if not is_owner(dao, caller):
                logger.warning("{} refused member add on dao {}", caller, dao_id)
                return GovernanceResult.fail(
                    GovernanceError.unauthorized(
                        RecordKind.DAO, dao_id, "You are not the owner of the dao."
                    )
                )
            if is_member(dao, member):
                # Membership is a list, not a set: repeated adds are kept.
                logger.warning("{} is already a member of dao {}", member, dao_id)
            updated = dao.with_member(member)
            await self.context.daos.put(updated)
        logger.info("Added member {} to dao {}", member, dao_id)
        return GovernanceResult.ok(updated)

    async def delete_dao(
        self, caller: PrincipalId, dao_id: DaoId
    ) -> GovernanceResult[Dao]:
        """
        Delete a DAO together with all of its proposals.

        Proposals go first, in one batch, then the DAO record. If the process
        dies between the two steps the DAO survives without proposals and the
        delete can simply be repeated.
        """
        async with self.context.serialized():
            dao = await self.context.daos.get(dao_id)
            if dao is None:
                return GovernanceResult.fail(
                    GovernanceError.not_found(
                        RecordKind.DAO,
                        dao_id,
                        f"Couldn't delete a dao with id={dao_id}. Dao not found.",
                    )
                )
            if not is_owner(dao, caller):
                logger.warning("{} refused delete of dao {}", caller, dao_id)
                return GovernanceResult.fail(
                    GovernanceError.unauthorized(
                        RecordKind.DAO,
                        dao_id,
                        "You are not authorized to delete the dao.",
                    )
                )
            orphaned = proposal_ids_for_dao(
                await self.context.proposals.values(), dao_id
            )
            await self.context.proposals.remove_many(orphaned)
            await self.context.daos.remove(dao_id)
        logger.info("Deleted dao {} and {} proposals", dao_id, len(orphaned))
        return GovernanceResult.ok(dao)
