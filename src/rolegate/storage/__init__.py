"""SQLite storage shared by the credential and permission stores."""

from rolegate.storage.database import Database, SCHEMA

__all__ = [
    "Database",
    "SCHEMA",
]
