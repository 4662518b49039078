"""
Record datastructures for daostore.

Key datastructures:
- Dao: organization record with an owner and ordered member list
- Proposal: DAO-scoped proposal with de-duplicated votes
- Payloads: owner-editable field sets for create, update and edit calls
"""

from __future__ import annotations

from .dao_types import (
    Dao,
    DaoPayload,
    EditProposalPayload,
    MonotonicClock,
    Proposal,
    ProposalPayload,
    generate_record_id,
)

__all__ = [
    "Dao",
    "DaoPayload",
    "EditProposalPayload",
    "MonotonicClock",
    "Proposal",
    "ProposalPayload",
    "generate_record_id",
]
