"""Revalidation result and event types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rolegate.credentials.store import Credential
from rolegate.exceptions import ErrorKind


class ReconciliationStatus(Enum):
    """Outcome of revalidating one credential."""

    ROLE_ASSIGNED = "role_assigned"  # authority confirmed or changed the role
    REVOKED = "revoked"  # credential no longer valid; role stripped, row kept
    SKIPPED = "skipped"  # transient failure; stored state untouched


@dataclass(frozen=True)
class ReconciliationResult:
    """Per-credential outcome of a revalidation sweep.

    Attributes:
        credential: Credential as it was in the sweep's snapshot
        status: What happened
        new_role: Role now stored (ROLE_ASSIGNED only)
        reason: Why the credential was skipped (SKIPPED only)
        error_kind: Authority error kind (REVOKED and SKIPPED)
    """

    credential: Credential
    status: ReconciliationStatus
    new_role: str | None = None
    reason: str | None = None
    error_kind: ErrorKind | None = None

    @property
    def previous_role(self) -> str | None:
        """Role stored before this reconciliation."""
        return self.credential.assigned_role

    @property
    def changed(self) -> bool:
        """Whether the stored role changed."""
        if self.status is ReconciliationStatus.SKIPPED:
            return False
        return self.new_role != self.previous_role

    @classmethod
    def assigned(cls, credential: Credential, role: str) -> ReconciliationResult:
        return cls(credential, ReconciliationStatus.ROLE_ASSIGNED, new_role=role)

    @classmethod
    def revoked(cls, credential: Credential) -> ReconciliationResult:
        return cls(
            credential,
            ReconciliationStatus.REVOKED,
            error_kind=ErrorKind.INVALID_CREDENTIAL,
        )

    @classmethod
    def skipped(
        cls,
        credential: Credential,
        reason: str,
        error_kind: ErrorKind = ErrorKind.UNEXPECTED,
    ) -> ReconciliationResult:
        return cls(
            credential,
            ReconciliationStatus.SKIPPED,
            reason=reason,
            error_kind=error_kind,
        )


@dataclass(frozen=True)
class RoleChangeEvent:
    """Emitted when a reconciliation changes a stored role.

    The host system listens for these to add or strip roles on the
    user; rolegate itself only updates its own rows.
    """

    identity: str
    scope: str
    credential: str
    previous_role: str | None
    new_role: str | None

    @property
    def revoked(self) -> bool:
        return self.new_role is None

    @classmethod
    def from_result(cls, result: ReconciliationResult) -> RoleChangeEvent:
        cred = result.credential
        return cls(
            identity=cred.identity,
            scope=cred.scope,
            credential=cred.credential,
            previous_role=result.previous_role,
            new_role=result.new_role,
        )


@dataclass(frozen=True)
class SweepSummary:
    """Counts per status for one sweep, for logging and operators."""

    total: int
    assigned: int
    changed: int
    revoked: int
    skipped: int

    @classmethod
    def of(cls, results: list[ReconciliationResult]) -> SweepSummary:
        def count(status: ReconciliationStatus) -> int:
            return sum(1 for r in results if r.status is status)

        return cls(
            total=len(results),
            assigned=count(ReconciliationStatus.ROLE_ASSIGNED),
            changed=sum(1 for r in results if r.changed),
            revoked=count(ReconciliationStatus.REVOKED),
            skipped=count(ReconciliationStatus.SKIPPED),
        )
