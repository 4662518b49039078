"""Ownership and membership predicates shared by the DAO and proposal operations."""

from __future__ import annotations

from typing import Protocol

from daostore.datastructures.dao_types import Dao
from daostore.datastructures.type_aliases import PrincipalId


class OwnedRecord(Protocol):
    @property
    def owner(self) -> PrincipalId: ...


def is_owner(record: OwnedRecord, caller: PrincipalId) -> bool:
    return record.owner == caller


def is_member(dao: Dao, caller: PrincipalId) -> bool:
    return caller in dao.members
