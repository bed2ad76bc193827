"""Credential storage and registration.

Stores one externally-issued credential per (identity, scope) with the
role the external authority assigned to it.
"""

from rolegate.credentials.store import (
    Credential,
    CredentialStore,
    DuplicateAccount,
    UpsertResult,
)
from rolegate.credentials.adapters import (
    InMemoryCredentialStore,
    SQLiteCredentialStore,
)
from rolegate.credentials.registration import (
    CredentialRegistrar,
    RegistrationResult,
    RegistrationStatus,
)

__all__ = [
    # Core types
    "Credential",
    "CredentialStore",
    "DuplicateAccount",
    "UpsertResult",
    # Implementations
    "InMemoryCredentialStore",
    "SQLiteCredentialStore",
    # Registration
    "CredentialRegistrar",
    "RegistrationResult",
    "RegistrationStatus",
]
