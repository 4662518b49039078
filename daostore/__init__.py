"""
daostore - authorization-gated DAO and proposal record store.

DAOs have an owner and an ordered member list; proposals live under a DAO and
collect at most one vote per member. Every operation takes the caller's
principal explicitly and returns a ``GovernanceResult`` instead of raising.

## Quick Start

```python
from daostore import DaoPayload, DaoStoreSettings, open_governance

async with open_governance(DaoStoreSettings()) as service:
    created = await service.daos.create_dao("alice", DaoPayload("Guild", "Makers"))
    dao = created.unwrap()
```
"""

from .config import DaoStoreSettings
from .datastructures import (
    Dao,
    DaoPayload,
    EditProposalPayload,
    Proposal,
    ProposalPayload,
)
from .governance import (
    GovernanceError,
    GovernanceErrorKind,
    GovernanceResult,
    GovernanceService,
    open_governance,
)

__version__ = "0.1.0"

__all__ = [
    "Dao",
    "DaoPayload",
    "DaoStoreSettings",
    "EditProposalPayload",
    "GovernanceError",
    "GovernanceErrorKind",
    "GovernanceResult",
    "GovernanceService",
    "Proposal",
    "ProposalPayload",
    "open_governance",
]
