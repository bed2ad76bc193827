"""Abstract credential storage interface.

CredentialStore holds one externally-issued credential per (identity,
scope) pair together with the linked external account and the role the
external authority last assigned. Applications pick an implementation
(in-memory for tests, SQLite for production).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass
class Credential:
    """A stored credential.

    Attributes:
        identity: Opaque user id
        scope: Opaque group/guild id the registration belongs to
        credential: The secret API key
        linked_account: External account the key belongs to
        assigned_role: Role last assigned by the authority (None = none)
        created_at: When the row was stored
    """

    identity: str
    scope: str
    credential: str
    linked_account: str
    assigned_role: str | None = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def has_role(self) -> bool:
        """Check if an externally-assigned role is recorded."""
        return self.assigned_role is not None


class UpsertResult(Enum):
    """Outcome of storing a credential."""

    STORED = "stored"
    DUPLICATE = "duplicate"  # another identity in the scope holds the key

    def __bool__(self) -> bool:
        return self is UpsertResult.STORED


@dataclass
class DuplicateAccount:
    """Identities sharing one linked external account."""

    linked_account: str
    identities: list[str] = field(default_factory=list)


class CredentialStore(ABC):
    """Abstract interface for credential storage.

    Invariants every implementation enforces:
    - at most one credential per (identity, scope); storing a new one
      replaces the old row atomically
    - no two identities in the same scope hold the same credential
      value; the second store reports UpsertResult.DUPLICATE and leaves
      the store unchanged

    Example:
        store = SQLiteCredentialStore(Database("rolegate.db"))
        result = await store.upsert_credential(
            "230947151931375617", "guild_1", key, "ACCOUNT-GUID", "BlueWorld"
        )
        if result is UpsertResult.DUPLICATE:
            ...
    """

    @abstractmethod
    async def upsert_credential(
        self,
        identity: str,
        scope: str,
        credential: str,
        linked_account: str,
        role: str | None,
    ) -> UpsertResult:
        """Store a credential, replacing any row for (identity, scope).

        Returns:
            UpsertResult.STORED, or UpsertResult.DUPLICATE if another
            identity in the scope already holds the credential.
        """
        ...

    @abstractmethod
    async def list_all(self) -> list[Credential]:
        """Snapshot of all credentials, ordered by scope."""
        ...

    @abstractmethod
    async def update_role(
        self,
        identity: str,
        scope: str,
        role: str | None,
    ) -> None:
        """Set the assigned role. Idempotent; None means no role."""
        ...

    @abstractmethod
    async def update_role_for_credential(
        self,
        credential: str,
        identity: str,
        scope: str,
        role: str | None,
    ) -> int:
        """Set the assigned role only if (identity, scope) still holds ``credential``.

        Returns:
            Number of rows updated; 0 if the row was replaced or removed.
        """
        ...

    @abstractmethod
    async def delete_by_credential(self, credential: str) -> int:
        """Delete every row holding the credential.

        Returns:
            Number of rows removed (0 if already gone).
        """
        ...

    @abstractmethod
    async def find_duplicate_linked_accounts(self) -> list[DuplicateAccount]:
        """Linked accounts registered by more than one distinct identity.

        Diagnostic only, for anti-abuse audits; nothing is enforced.
        """
        ...

    @abstractmethod
    async def get_credential(self, identity: str, scope: str) -> Credential | None:
        """Get the credential stored for (identity, scope)."""
        ...

    @abstractmethod
    async def find_by_linked_account(self, linked_account: str) -> list[Credential]:
        """All credentials for a linked account, newest first."""
        ...
