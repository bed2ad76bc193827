"""Pytest configuration for rolegate tests."""

import pytest

from rolegate.credentials import InMemoryCredentialStore, SQLiteCredentialStore
from rolegate.permissions import InMemoryPermissionStore, SQLitePermissionStore
from rolegate.storage import Database

# Group lengths of a well-formed API key:
# 11111111-1111-1111-1111-11111111111111111111-1111-1111-1111-111111111111
KEY_LAYOUT = (8, 4, 4, 4, 20, 4, 4, 4, 12)


@pytest.fixture
def make_key():
    """Factory for well-formed keys, e.g. make_key("A")."""

    def _make(tag: str) -> str:
        return "-".join(tag * n for n in KEY_LAYOUT)

    return _make


@pytest.fixture
def database(tmp_path):
    """A fresh SQLite database file."""
    db = Database(tmp_path / "rolegate.db")
    yield db
    db.close()


@pytest.fixture(params=["memory", "sqlite"])
def credential_store(request, database):
    """Each credential store implementation."""
    if request.param == "memory":
        return InMemoryCredentialStore()
    return SQLiteCredentialStore(database)


@pytest.fixture(params=["memory", "sqlite"])
def permission_store(request, database):
    """Each permission store implementation."""
    if request.param == "memory":
        return InMemoryPermissionStore()
    return SQLitePermissionStore(database)
