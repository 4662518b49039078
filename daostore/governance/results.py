"""Tagged success/failure values returned by every governance operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from daostore.datastructures.type_aliases import ErrorMessage


class GovernanceErrorKind(StrEnum):
    """Why a governance operation was refused."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    ALREADY_VOTED = "already_voted"


class RecordKind(StrEnum):
    DAO = "dao"
    PROPOSAL = "proposal"


@dataclass(frozen=True, slots=True)
class GovernanceError:
    """A refused operation: the kind of failure plus a caller-facing message."""

    kind: GovernanceErrorKind
    message: ErrorMessage
    record_kind: RecordKind | None = None
    record_id: str | None = None

    @classmethod
    def not_found(
        cls, record_kind: RecordKind, record_id: str, message: ErrorMessage
    ) -> GovernanceError:
        return cls(
            kind=GovernanceErrorKind.NOT_FOUND,
            message=message,
            record_kind=record_kind,
            record_id=record_id,
        )

    @classmethod
    def unauthorized(
        cls, record_kind: RecordKind, record_id: str, message: ErrorMessage
    ) -> GovernanceError:
        return cls(
            kind=GovernanceErrorKind.UNAUTHORIZED,
            message=message,
            record_kind=record_kind,
            record_id=record_id,
        )

    @classmethod
    def forbidden(cls, dao_id: str) -> GovernanceError:
        return cls(
            kind=GovernanceErrorKind.FORBIDDEN,
            message="You don't belong to this dao.",
            record_kind=RecordKind.DAO,
            record_id=dao_id,
        )

    @classmethod
    def already_voted(cls, proposal_id: str) -> GovernanceError:
        return cls(
            kind=GovernanceErrorKind.ALREADY_VOTED,
            message="You have already voted",
            record_kind=RecordKind.PROPOSAL,
            record_id=proposal_id,
        )


class GovernanceResultError(Exception):
    """Raised by ``GovernanceResult.unwrap`` on a failed result."""

    def __init__(self, error: GovernanceError) -> None:
        super().__init__(error.message)
        self.error = error


@dataclass(frozen=True, slots=True)
class GovernanceResult[T]:
    """Result of a governance operation."""

    success: bool
    value: T | None = None
    error: GovernanceError | None = None

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("Successful result cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("Failed result must carry an error")

    @classmethod
    def ok(cls, value: T) -> GovernanceResult[T]:
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: GovernanceError) -> GovernanceResult[T]:
        return cls(success=False, error=error)

    @property
    def error_kind(self) -> GovernanceErrorKind | None:
        return self.error.kind if self.error is not None else None

    @property
    def error_message(self) -> ErrorMessage | None:
        return self.error.message if self.error is not None else None

    def unwrap(self) -> T:
        if self.error is not None:
            raise GovernanceResultError(self.error)
        return self.value  # type: ignore[return-value]
