"""Reference implementations of PermissionStore.

- InMemoryPermissionStore: Grants in a dict (for testing)
- SQLitePermissionStore: Grants in the ``command_permissions`` table
"""

import logging
import sqlite3
from datetime import datetime
from typing import Iterable

from rolegate.identifiers import ensure_opaque_id, ensure_opaque_ids, ensure_optional_id
from rolegate.permissions.store import (
    PermissionGrant,
    PermissionStore,
    ReceiverKind,
    coerce_receiver_kind,
    ensure_weight,
)
from rolegate.storage import Database

logger = logging.getLogger(__name__)


class InMemoryPermissionStore(PermissionStore):
    """In-memory permission store for testing."""

    def __init__(self) -> None:
        self._grants: dict[tuple[str, str | None, str], PermissionGrant] = {}

    async def set_grant(
        self,
        command: str,
        receiver: str,
        receiver_kind: ReceiverKind | str,
        value: int,
        scope: str | None = None,
    ) -> int:
        """Upsert grant in memory."""
        ensure_opaque_id(command, "command")
        ensure_opaque_id(receiver, "receiver")
        ensure_optional_id(scope, "scope")
        kind = coerce_receiver_kind(receiver_kind)
        ensure_weight(value)

        self._grants[(command, scope, receiver)] = PermissionGrant(
            command=command,
            scope=scope,
            receiver_kind=kind,
            receiver=receiver,
            value=value,
        )
        logger.debug(f"Grant {command}/{scope}/{kind}:{receiver} = {value}")
        return self._grants[(command, scope, receiver)].value

    async def aggregate(
        self,
        command: str,
        scope: str | None,
        receivers: Iterable[str],
    ) -> int:
        """Sum matching grants."""
        ensure_optional_id(scope, "scope")
        wanted = set(ensure_opaque_ids(receivers, "receiver"))
        return sum(
            grant.value
            for (cmd, grant_scope, receiver), grant in self._grants.items()
            if cmd == command and grant_scope == scope and receiver in wanted
        )

    async def list_grants(self, command: str | None = None) -> list[PermissionGrant]:
        """List grants in memory."""
        grants = [
            g for g in self._grants.values() if command is None or g.command == command
        ]
        return sorted(grants, key=lambda g: (g.command, g.scope or "", g.receiver))

    def clear(self) -> None:
        """Clear all grants."""
        self._grants.clear()


class SQLitePermissionStore(PermissionStore):
    """Permission store backed by the ``command_permissions`` table."""

    def __init__(self, database: Database):
        self._db = database
        self._db.init_schema()

    async def set_grant(
        self,
        command: str,
        receiver: str,
        receiver_kind: ReceiverKind | str,
        value: int,
        scope: str | None = None,
    ) -> int:
        """Upsert the grant and read back its aggregate in one transaction."""
        ensure_opaque_id(command, "command")
        ensure_opaque_id(receiver, "receiver")
        ensure_optional_id(scope, "scope")
        kind = coerce_receiver_kind(receiver_kind)
        ensure_weight(value)

        with self._db.transaction() as conn:
            # "scope IS ?" lets a NULL parameter match global grants
            cur = conn.execute(
                """
                UPDATE command_permissions SET value = ?, receiver_kind = ?
                WHERE command = ? AND scope IS ? AND receiver = ?
                """,
                (value, kind.value, command, scope, receiver),
            )
            if cur.rowcount == 0:
                conn.execute(
                    """
                    INSERT INTO command_permissions
                    (command, scope, receiver, receiver_kind, value, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (command, scope, receiver, kind.value, value, datetime.now().isoformat()),
                )
            row = conn.execute(
                """
                SELECT COALESCE(SUM(value), 0) AS total FROM command_permissions
                WHERE command = ? AND scope IS ? AND receiver = ?
                """,
                (command, scope, receiver),
            ).fetchone()

        logger.debug(f"Grant {command}/{scope}/{kind}:{receiver} = {value}")
        return int(row["total"])

    async def aggregate(
        self,
        command: str,
        scope: str | None,
        receivers: Iterable[str],
    ) -> int:
        """Sum matching grants with a single SELECT."""
        ensure_optional_id(scope, "scope")
        candidates = sorted(set(ensure_opaque_ids(receivers, "receiver")))
        if not candidates:
            return 0

        placeholders = ",".join("?" * len(candidates))
        rows = self._db.query(
            f"""
            SELECT COALESCE(SUM(value), 0) AS total FROM command_permissions
            WHERE command = ?
              AND scope IS ?
              AND receiver IN ({placeholders})
              AND receiver_kind IN ('user', 'role')
            """,
            (command, scope, *candidates),
        )
        return int(rows[0]["total"])

    async def list_grants(self, command: str | None = None) -> list[PermissionGrant]:
        """List grants from the table."""
        if command is None:
            rows = self._db.query(
                "SELECT * FROM command_permissions "
                "ORDER BY command, IFNULL(scope, ''), receiver"
            )
        else:
            rows = self._db.query(
                "SELECT * FROM command_permissions WHERE command = ? "
                "ORDER BY IFNULL(scope, ''), receiver",
                (command,),
            )
        return [_row_to_grant(r) for r in rows]


def _row_to_grant(row: sqlite3.Row) -> PermissionGrant:
    """Convert SQLite row to PermissionGrant."""
    return PermissionGrant(
        command=row["command"],
        scope=row["scope"],
        receiver_kind=ReceiverKind(row["receiver_kind"]),
        receiver=row["receiver"],
        value=int(row["value"]),
    )
