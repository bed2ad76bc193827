"""Additive permission grants and command authorization."""

from rolegate.permissions.store import (
    PermissionGrant,
    PermissionStore,
    ReceiverKind,
)
from rolegate.permissions.adapters import (
    InMemoryPermissionStore,
    SQLitePermissionStore,
)
from rolegate.permissions.resolver import Authorization, PermissionResolver

__all__ = [
    # Core types
    "PermissionGrant",
    "PermissionStore",
    "ReceiverKind",
    # Implementations
    "InMemoryPermissionStore",
    "SQLitePermissionStore",
    # Resolution
    "Authorization",
    "PermissionResolver",
]
