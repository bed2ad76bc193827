"""rolegate - credential revalidation and command permissions.

rolegate keeps externally-issued API credentials that map users to
roles, periodically re-checks them against the issuing authority, and
authorizes commands from additive, signed permission grants.

Example:
    from rolegate import (
        Database,
        PermissionResolver,
        RevalidationEngine,
        SQLiteCredentialStore,
        SQLitePermissionStore,
    )

    db = Database("rolegate.db")
    credentials = SQLiteCredentialStore(db)
    permissions = SQLitePermissionStore(db)

    allowed, weight = await PermissionResolver(permissions).authorize(
        "poll", user_id, role_ids, guild_id
    )
    results = await RevalidationEngine(credentials, authority).revalidate_all()
"""

__version__ = "0.1.0"

from rolegate.authority import (
    AuthorityResult,
    ErrorKind,
    ExternalAuthority,
    InMemoryAuthority,
)
from rolegate.config import RolegateConfig
from rolegate.credentials import (
    Credential,
    CredentialRegistrar,
    CredentialStore,
    InMemoryCredentialStore,
    SQLiteCredentialStore,
    UpsertResult,
)
from rolegate.exceptions import (
    AuthorityError,
    ConfigurationError,
    RolegateError,
    StoreError,
)
from rolegate.permissions import (
    Authorization,
    InMemoryPermissionStore,
    PermissionResolver,
    PermissionStore,
    ReceiverKind,
    SQLitePermissionStore,
)
from rolegate.revalidation import (
    ReconciliationResult,
    ReconciliationStatus,
    RevalidationEngine,
    RoleChangeEvent,
)
from rolegate.storage import Database

__all__ = [
    "__version__",
    # Authority
    "AuthorityResult",
    "ErrorKind",
    "ExternalAuthority",
    "InMemoryAuthority",
    # Config
    "RolegateConfig",
    # Credentials
    "Credential",
    "CredentialRegistrar",
    "CredentialStore",
    "InMemoryCredentialStore",
    "SQLiteCredentialStore",
    "UpsertResult",
    # Errors
    "AuthorityError",
    "ConfigurationError",
    "RolegateError",
    "StoreError",
    # Permissions
    "Authorization",
    "InMemoryPermissionStore",
    "PermissionResolver",
    "PermissionStore",
    "ReceiverKind",
    "SQLitePermissionStore",
    # Revalidation
    "ReconciliationResult",
    "ReconciliationStatus",
    "RevalidationEngine",
    "RoleChangeEvent",
    # Storage
    "Database",
]
