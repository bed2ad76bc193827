"""Reference implementations of CredentialStore.

- InMemoryCredentialStore: Store credentials in memory (for testing)
- SQLiteCredentialStore: Durable storage in the shared SQLite database
"""

import logging
import sqlite3
from collections import defaultdict
from dataclasses import replace
from datetime import datetime

from rolegate.credentials.store import (
    Credential,
    CredentialStore,
    DuplicateAccount,
    UpsertResult,
)
from rolegate.identifiers import ensure_opaque_id, ensure_optional_id, mask_credential
from rolegate.storage import Database

logger = logging.getLogger(__name__)


class InMemoryCredentialStore(CredentialStore):
    """In-memory credential store for testing.

    All credentials are stored in memory and lost when the process exits.
    Enforces the same uniqueness rules as the SQLite store.
    """

    def __init__(self) -> None:
        """Initialize empty credential store."""
        self._rows: dict[tuple[str, str], Credential] = {}
        self._sequence: dict[tuple[str, str], int] = {}
        self._counter = 0

    async def upsert_credential(
        self,
        identity: str,
        scope: str,
        credential: str,
        linked_account: str,
        role: str | None,
    ) -> UpsertResult:
        """Store credential in memory."""
        ensure_opaque_id(identity, "identity")
        ensure_opaque_id(scope, "scope")
        ensure_opaque_id(credential, "credential")
        ensure_opaque_id(linked_account, "linked_account")
        ensure_optional_id(role, "role")

        for (other_identity, other_scope), row in self._rows.items():
            if (
                other_scope == scope
                and other_identity != identity
                and row.credential == credential
            ):
                logger.info(
                    f"Duplicate credential {mask_credential(credential)} in scope {scope}"
                )
                return UpsertResult.DUPLICATE

        key = (identity, scope)
        self._counter += 1
        self._rows[key] = Credential(
            identity=identity,
            scope=scope,
            credential=credential,
            linked_account=linked_account,
            assigned_role=role,
        )
        self._sequence[key] = self._counter
        return UpsertResult.STORED

    async def list_all(self) -> list[Credential]:
        """List all credentials ordered by scope."""
        keys = sorted(self._rows, key=lambda k: (k[1], self._sequence[k]))
        return [replace(self._rows[k]) for k in keys]

    async def update_role(
        self,
        identity: str,
        scope: str,
        role: str | None,
    ) -> None:
        """Update role in memory."""
        ensure_opaque_id(identity, "identity")
        ensure_opaque_id(scope, "scope")
        ensure_optional_id(role, "role")
        row = self._rows.get((identity, scope))
        if row is not None:
            row.assigned_role = role

    async def update_role_for_credential(
        self,
        credential: str,
        identity: str,
        scope: str,
        role: str | None,
    ) -> int:
        """Update role in memory if the row still holds the credential."""
        ensure_opaque_id(credential, "credential")
        ensure_opaque_id(identity, "identity")
        ensure_opaque_id(scope, "scope")
        ensure_optional_id(role, "role")
        row = self._rows.get((identity, scope))
        if row is None or row.credential != credential:
            return 0
        row.assigned_role = role
        return 1

    async def delete_by_credential(self, credential: str) -> int:
        """Delete matching credentials from memory."""
        ensure_opaque_id(credential, "credential")
        keys = [k for k, row in self._rows.items() if row.credential == credential]
        for key in keys:
            del self._rows[key]
            del self._sequence[key]
        return len(keys)

    async def find_duplicate_linked_accounts(self) -> list[DuplicateAccount]:
        """Group identities by linked account."""
        by_account: dict[str, set[str]] = defaultdict(set)
        for row in self._rows.values():
            by_account[row.linked_account].add(row.identity)
        return [
            DuplicateAccount(linked_account=account, identities=sorted(identities))
            for account, identities in sorted(by_account.items())
            if len(identities) > 1
        ]

    async def get_credential(self, identity: str, scope: str) -> Credential | None:
        """Get credential from memory."""
        ensure_opaque_id(identity, "identity")
        ensure_opaque_id(scope, "scope")
        row = self._rows.get((identity, scope))
        return replace(row) if row else None

    async def find_by_linked_account(self, linked_account: str) -> list[Credential]:
        """Find credentials by linked account, newest first."""
        keys = [k for k, row in self._rows.items() if row.linked_account == linked_account]
        keys.sort(key=lambda k: self._sequence[k], reverse=True)
        return [replace(self._rows[k]) for k in keys]

    def clear(self) -> None:
        """Clear all stored credentials."""
        self._rows.clear()
        self._sequence.clear()


class SQLiteCredentialStore(CredentialStore):
    """Credential store backed by the ``credentials`` table.

    Each operation is a single transaction. The store never holds the
    database lock between calls, so nothing is locked while the
    revalidation engine waits on the network.
    """

    def __init__(self, database: Database):
        """Initialize store.

        Args:
            database: Shared database; its schema is created if missing
        """
        self._db = database
        self._db.init_schema()

    async def upsert_credential(
        self,
        identity: str,
        scope: str,
        credential: str,
        linked_account: str,
        role: str | None,
    ) -> UpsertResult:
        """Store a credential in one transaction."""
        ensure_opaque_id(identity, "identity")
        ensure_opaque_id(scope, "scope")
        ensure_opaque_id(credential, "credential")
        ensure_opaque_id(linked_account, "linked_account")
        ensure_optional_id(role, "role")

        try:
            with self._db.transaction() as conn:
                holder = conn.execute(
                    """
                    SELECT identity FROM credentials
                    WHERE scope = ? AND credential = ? AND identity != ?
                    """,
                    (scope, credential, identity),
                ).fetchone()
                if holder is not None:
                    logger.info(
                        f"Duplicate credential {mask_credential(credential)} in scope {scope}"
                    )
                    return UpsertResult.DUPLICATE

                conn.execute(
                    "DELETE FROM credentials WHERE identity = ? AND scope = ?",
                    (identity, scope),
                )
                conn.execute(
                    """
                    INSERT INTO credentials
                    (identity, scope, credential, linked_account, assigned_role, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        identity,
                        scope,
                        credential,
                        linked_account,
                        role,
                        datetime.now().isoformat(),
                    ),
                )
        except sqlite3.IntegrityError as e:
            logger.info(f"Credential rejected by unique constraint: {e}")
            return UpsertResult.DUPLICATE

        return UpsertResult.STORED

    async def list_all(self) -> list[Credential]:
        """List all credentials ordered by scope."""
        rows = self._db.query("SELECT * FROM credentials ORDER BY scope, id")
        return [_row_to_credential(r) for r in rows]

    async def update_role(
        self,
        identity: str,
        scope: str,
        role: str | None,
    ) -> None:
        """Update the assigned role."""
        ensure_opaque_id(identity, "identity")
        ensure_opaque_id(scope, "scope")
        ensure_optional_id(role, "role")
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE credentials SET assigned_role = ?
                WHERE identity = ? AND scope = ?
                """,
                (role, identity, scope),
            )

    async def update_role_for_credential(
        self,
        credential: str,
        identity: str,
        scope: str,
        role: str | None,
    ) -> int:
        """Update the assigned role if the row still holds the credential."""
        ensure_opaque_id(credential, "credential")
        ensure_opaque_id(identity, "identity")
        ensure_opaque_id(scope, "scope")
        ensure_optional_id(role, "role")
        with self._db.transaction() as conn:
            cur = conn.execute(
                """
                UPDATE credentials SET assigned_role = ?
                WHERE identity = ? AND scope = ? AND credential = ?
                """,
                (role, identity, scope, credential),
            )
            return cur.rowcount

    async def delete_by_credential(self, credential: str) -> int:
        """Delete rows holding the credential."""
        ensure_opaque_id(credential, "credential")
        with self._db.transaction() as conn:
            cur = conn.execute(
                "DELETE FROM credentials WHERE credential = ?", (credential,)
            )
            changes = cur.rowcount
        if changes:
            logger.info(f"Deleted {changes} row(s) for credential {mask_credential(credential)}")
        return changes

    async def find_duplicate_linked_accounts(self) -> list[DuplicateAccount]:
        """Group identities sharing a linked account."""
        rows = self._db.query(
            """
            SELECT DISTINCT linked_account, identity FROM credentials
            WHERE linked_account IN (
                SELECT linked_account FROM credentials
                GROUP BY linked_account
                HAVING COUNT(DISTINCT identity) > 1
            )
            ORDER BY linked_account, identity
            """
        )
        groups: dict[str, list[str]] = {}
        for r in rows:
            groups.setdefault(r["linked_account"], []).append(r["identity"])
        return [
            DuplicateAccount(linked_account=account, identities=identities)
            for account, identities in groups.items()
        ]

    async def get_credential(self, identity: str, scope: str) -> Credential | None:
        """Get the credential for (identity, scope)."""
        ensure_opaque_id(identity, "identity")
        ensure_opaque_id(scope, "scope")
        rows = self._db.query(
            "SELECT * FROM credentials WHERE identity = ? AND scope = ?",
            (identity, scope),
        )
        return _row_to_credential(rows[0]) if rows else None

    async def find_by_linked_account(self, linked_account: str) -> list[Credential]:
        """Find credentials by linked account, newest first."""
        rows = self._db.query(
            "SELECT * FROM credentials WHERE linked_account = ? ORDER BY id DESC",
            (linked_account,),
        )
        return [_row_to_credential(r) for r in rows]


def _row_to_credential(row: sqlite3.Row) -> Credential:
    """Convert SQLite row to Credential."""
    return Credential(
        identity=row["identity"],
        scope=row["scope"],
        credential=row["credential"],
        linked_account=row["linked_account"],
        assigned_role=row["assigned_role"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )
