"""SQLite database shared by the credential and permission stores.

Identifiers are stored as TEXT. Large numeric ids from external systems
do not survive a round trip through INTEGER columns in every client, so
they are never compared numerically.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from rolegate.exceptions import StoreError

logger = logging.getLogger(__name__)


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS credentials (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        identity TEXT NOT NULL,
        scope TEXT NOT NULL,
        credential TEXT NOT NULL,
        linked_account TEXT NOT NULL,
        assigned_role TEXT,
        created_at TEXT NOT NULL,
        UNIQUE(identity, scope) ON CONFLICT REPLACE,
        UNIQUE(scope, credential)
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_credentials_linked_account
    ON credentials (linked_account)
    """,
    """
    CREATE TABLE IF NOT EXISTS command_permissions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        command TEXT NOT NULL,
        scope TEXT,
        receiver TEXT NOT NULL,
        receiver_kind TEXT NOT NULL CHECK (receiver_kind IN ('user', 'role')),
        value INTEGER NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    # NULL scopes (global grants) must collide too, which a plain UNIQUE
    # constraint does not do.
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_command_permissions_grant
    ON command_permissions (command, IFNULL(scope, ''), receiver)
    """,
]


class Database:
    """A single SQLite connection with explicit transactions.

    The connection runs in autocommit mode; multi-statement operations
    use ``transaction()``, which issues ``BEGIN IMMEDIATE`` so the write
    lock is taken up front and each logical operation is one atomic unit.

    Example:
        db = Database("rolegate.db")
        db.init_schema()
        with db.transaction() as conn:
            conn.execute("UPDATE credentials SET assigned_role = ? ...", (...))
    """

    def __init__(self, path: str | Path = ":memory:"):
        """Initialize database.

        Args:
            path: SQLite file path, or ":memory:" for a private in-memory DB
        """
        self.path = str(path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def connect(self) -> sqlite3.Connection:
        """Open the connection on first use and return it."""
        if self._conn is None:
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(
                    self.path,
                    timeout=30.0,
                    isolation_level=None,
                    check_same_thread=False,
                )
            except sqlite3.Error as e:
                raise StoreError(f"Cannot open database {self.path}", cause=e)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            if self.path != ":memory:":
                conn.execute("PRAGMA journal_mode = WAL")
            self._conn = conn
            logger.debug(f"Opened database {self.path}")
        return self._conn

    def init_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        with self.transaction() as conn:
            for sql in SCHEMA:
                conn.execute(sql)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block inside BEGIN IMMEDIATE ... COMMIT.

        Rolls back on any exception. sqlite3.IntegrityError propagates
        unchanged so stores can turn it into a typed outcome; other
        sqlite errors are wrapped in StoreError.
        """
        with self._lock:
            conn = self.connect()
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StoreError("Cannot begin transaction", cause=e)
            try:
                yield conn
            except BaseException as e:
                conn.execute("ROLLBACK")
                if isinstance(e, sqlite3.Error) and not isinstance(
                    e, sqlite3.IntegrityError
                ):
                    raise StoreError("Database operation failed", cause=e) from e
                raise
            else:
                conn.execute("COMMIT")

    def query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Run a single read statement and return all rows."""
        with self._lock:
            try:
                return self.connect().execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StoreError("Database query failed", cause=e) from e

    def close(self) -> None:
        """Close the connection (reopened lazily on next use)."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.debug(f"Closed database {self.path}")
