"""Authorization-gated DAO and proposal record stores."""

from .authorization import is_member, is_owner
from .context import GovernanceContext
from .daos import DaoOperations
from .proposals import ProposalOperations
from .record_store import RecordStore, dao_record_store, proposal_record_store
from .results import (
    GovernanceError,
    GovernanceErrorKind,
    GovernanceResult,
    GovernanceResultError,
    RecordKind,
)
from .service import GovernanceService, open_governance

__all__ = [
    "DaoOperations",
    "GovernanceContext",
    "GovernanceError",
    "GovernanceErrorKind",
    "GovernanceResult",
    "GovernanceResultError",
    "GovernanceService",
    "ProposalOperations",
    "RecordKind",
    "RecordStore",
    "dao_record_store",
    "is_member",
    "is_owner",
    "open_governance",
    "proposal_record_store",
]
