"""
DAO record type definitions.

This module provides the two persisted record types (``Dao`` and
``Proposal``), the payloads accepted by the governance operations, and the
host collaborators the records are stamped with: id generation and a
non-decreasing nanosecond clock.

Records are immutable; every mutation produces a new record through one of
the ``with_*`` helpers so a failed check can never leave a half-updated value
behind.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace

import ulid
from hypothesis import strategies as st

from .type_aliases import (
    AvatarUrl,
    DaoId,
    DaoName,
    DaoShortDescription,
    JsonDict,
    PrincipalId,
    ProposalDetails,
    ProposalId,
    ProposalTitle,
    TimestampNanoseconds,
)

type IdGenerator = Callable[[], str]
type Clock = Callable[[], TimestampNanoseconds]


def generate_record_id() -> str:
    """Generate a unique, lexicographically time-ordered record identifier."""
    return str(ulid.new())


@dataclass(slots=True)
class MonotonicClock:
    """Wall clock in nanoseconds that never goes backwards."""

    source: Clock = time.time_ns
    _last: TimestampNanoseconds = field(init=False, default=0)

    def __call__(self) -> TimestampNanoseconds:
        now = self.source()
        if now < self._last:
            return self._last
        self._last = now
        return now


def _optional_timestamp(value: object) -> TimestampNanoseconds | None:
    if value is None:
        return None
    return int(value)  # type: ignore[call-overload]


@dataclass(frozen=True, slots=True)
class DaoPayload:
    """Fields a DAO owner may set on create and update."""

    name: DaoName
    short_desc: DaoShortDescription
    avatar: AvatarUrl = ""


@dataclass(frozen=True, slots=True)
class ProposalPayload:
    """Fields supplied when creating a proposal."""

    title: ProposalTitle
    details: ProposalDetails
    dao_id: DaoId


@dataclass(frozen=True, slots=True)
class EditProposalPayload:
    """Fields a proposal owner may change."""

    id: ProposalId
    title: ProposalTitle
    details: ProposalDetails


@dataclass(frozen=True, slots=True)
class Dao:
    """Organization record: an owner plus an ordered member list."""

    id: DaoId
    name: DaoName
    short_desc: DaoShortDescription
    owner: PrincipalId
    members: tuple[PrincipalId, ...]
    created_at: TimestampNanoseconds
    avatar: AvatarUrl = ""
    updated_at: TimestampNanoseconds | None = None

    def __post_init__(self) -> None:
        """Validate DAO record."""
        if not self.id:
            raise ValueError("DAO ID cannot be empty")
        if not self.owner:
            raise ValueError("DAO owner cannot be empty")
        if self.created_at < 0:
            raise ValueError("Created timestamp cannot be negative")

    @classmethod
    def create(
        cls,
        *,
        dao_id: DaoId,
        owner: PrincipalId,
        payload: DaoPayload,
        created_at: TimestampNanoseconds,
    ) -> Dao:
        """Build a fresh DAO whose only member is its owner."""
        return cls(
            id=dao_id,
            name=payload.name,
            short_desc=payload.short_desc,
            avatar=payload.avatar,
            owner=owner,
            members=(owner,),
            created_at=created_at,
            updated_at=None,
        )

    def with_payload(
        self, payload: DaoPayload, updated_at: TimestampNanoseconds
    ) -> Dao:
        """Create new DAO with the owner-editable fields replaced."""
        return replace(
            self,
            name=payload.name,
            short_desc=payload.short_desc,
            avatar=payload.avatar,
            updated_at=updated_at,
        )

    def with_member(self, member: PrincipalId) -> Dao:
        """Create new DAO with ``member`` appended to the member list."""
        return replace(self, members=(*self.members, member))

    def to_dict(self) -> JsonDict:
        return {
            "id": self.id,
            "name": self.name,
            "short_desc": self.short_desc,
            "avatar": self.avatar,
            "owner": self.owner,
            "members": list(self.members),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, payload: JsonDict) -> Dao:
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name", "")),
            short_desc=str(payload.get("short_desc", "")),
            avatar=str(payload.get("avatar", "")),
            owner=str(payload["owner"]),
            members=tuple(str(member) for member in payload.get("members", ())),
            created_at=int(payload.get("created_at", 0)),
            updated_at=_optional_timestamp(payload.get("updated_at")),
        )


@dataclass(frozen=True, slots=True)
class Proposal:
    """Proposal record scoped to one DAO, with the principals that voted."""

    id: ProposalId
    title: ProposalTitle
    details: ProposalDetails
    owner: PrincipalId
    dao_id: DaoId
    created_at: TimestampNanoseconds
    votes: tuple[PrincipalId, ...] = ()
    updated_at: TimestampNanoseconds | None = None

    def __post_init__(self) -> None:
        """Validate proposal record."""
        if not self.id:
            raise ValueError("Proposal ID cannot be empty")
        if not self.owner:
            raise ValueError("Proposal owner cannot be empty")
        if not self.dao_id:
            raise ValueError("Proposal DAO ID cannot be empty")
        if self.created_at < 0:
            raise ValueError("Created timestamp cannot be negative")
        if len(set(self.votes)) != len(self.votes):
            raise ValueError("Proposal votes cannot contain duplicates")

    @classmethod
    def create(
        cls,
        *,
        proposal_id: ProposalId,
        owner: PrincipalId,
        payload: ProposalPayload,
        created_at: TimestampNanoseconds,
    ) -> Proposal:
        return cls(
            id=proposal_id,
            title=payload.title,
            details=payload.details,
            owner=owner,
            dao_id=payload.dao_id,
            created_at=created_at,
            votes=(),
            updated_at=None,
        )

    def has_voted(self, voter: PrincipalId) -> bool:
        return voter in self.votes

    def with_vote(self, voter: PrincipalId) -> Proposal:
        """Create new proposal with ``voter`` recorded."""
        if self.has_voted(voter):
            raise ValueError(f"{voter} has already voted on {self.id}")
        return replace(self, votes=(*self.votes, voter))

    def with_edit(
        self, payload: EditProposalPayload, updated_at: TimestampNanoseconds
    ) -> Proposal:
        return replace(
            self,
            title=payload.title,
            details=payload.details,
            updated_at=updated_at,
        )

    @property
    def vote_count(self) -> int:
        return len(self.votes)

    def to_dict(self) -> JsonDict:
        return {
            "id": self.id,
            "title": self.title,
            "details": self.details,
            "owner": self.owner,
            "dao_id": self.dao_id,
            "votes": list(self.votes),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, payload: JsonDict) -> Proposal:
        return cls(
            id=str(payload["id"]),
            title=str(payload.get("title", "")),
            details=str(payload.get("details", "")),
            owner=str(payload["owner"]),
            dao_id=str(payload["dao_id"]),
            votes=tuple(str(voter) for voter in payload.get("votes", ())),
            created_at=int(payload.get("created_at", 0)),
            updated_at=_optional_timestamp(payload.get("updated_at")),
        )


# Hypothesis strategies for property-based testing


def principal_strategy() -> st.SearchStrategy[PrincipalId]:
    """Generate principal identifiers shaped like host principal text."""
    return st.text(
        alphabet="abcdefghijklmnopqrstuvwxyz234567-", min_size=5, max_size=63
    ).filter(lambda text: text.strip("-") != "")


def dao_payload_strategy() -> st.SearchStrategy[DaoPayload]:
    """Generate valid DaoPayload instances for testing."""
    return st.builds(
        DaoPayload,
        name=st.text(min_size=1, max_size=100),
        short_desc=st.text(max_size=280),
        avatar=st.one_of(
            st.just(""),
            st.text(min_size=1, max_size=40).map(
                lambda slug: f"https://example.org/{slug}.png"
            ),
        ),
    )


def dao_strategy() -> st.SearchStrategy[Dao]:
    """Generate valid Dao records for testing."""

    @st.composite
    def generate_valid_dao(draw):
        owner = draw(principal_strategy())
        extra_members = draw(st.lists(principal_strategy(), max_size=8))
        created_at = draw(st.integers(min_value=0, max_value=2**63 - 1))
        updated_at = draw(
            st.one_of(st.none(), st.integers(min_value=created_at, max_value=2**63 - 1))
        )
        payload = draw(dao_payload_strategy())
        return Dao(
            id=generate_record_id(),
            name=payload.name,
            short_desc=payload.short_desc,
            avatar=payload.avatar,
            owner=owner,
            members=(owner, *extra_members),
            created_at=created_at,
            updated_at=updated_at,
        )

    return generate_valid_dao()


def proposal_strategy(dao_id: DaoId | None = None) -> st.SearchStrategy[Proposal]:
    """Generate valid Proposal records, optionally pinned to ``dao_id``."""

    @st.composite
    def generate_valid_proposal(draw):
        created_at = draw(st.integers(min_value=0, max_value=2**63 - 1))
        return Proposal(
            id=generate_record_id(),
            title=draw(st.text(min_size=1, max_size=200)),
            details=draw(st.text(max_size=1000)),
            owner=draw(principal_strategy()),
            dao_id=dao_id or generate_record_id(),
            created_at=created_at,
            votes=tuple(draw(st.lists(principal_strategy(), unique=True, max_size=8))),
            updated_at=draw(
                st.one_of(
                    st.none(), st.integers(min_value=created_at, max_value=2**63 - 1)
                )
            ),
        )

    return generate_valid_proposal()
