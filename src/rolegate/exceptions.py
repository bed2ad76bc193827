"""Standard exception hierarchy for rolegate.

All rolegate exceptions inherit from RolegateError, making it easy
to catch all library-specific errors.

Exception Hierarchy:
    RolegateError (base)
    ├── ConfigurationError - Invalid configuration or cron expression
    ├── StoreError - Unexpected storage failure
    └── AuthorityError - External authority rejected or failed a lookup
        ├── InvalidCredentialError - Credential unknown or no longer valid
        ├── AuthorityConfigurationError - Ambiguous authority configuration
        └── TransientAuthorityError - Network or unexpected failure

Constraint violations (duplicate credentials) are not exceptions: the
stores report them as typed outcomes.
"""

from enum import Enum


class ErrorKind(Enum):
    """Typed failure kinds reported by an external authority."""

    INVALID_CREDENTIAL = "invalid_credential"
    DUPLICATE_CONFIGURATION = "duplicate_configuration"
    NETWORK_ERROR = "network_error"
    UNEXPECTED = "unexpected"

    def __str__(self) -> str:
        return self.value


class RolegateError(Exception):
    """Base exception for all rolegate errors.

    Catch this to handle any library-specific exception:
        try:
            await store.update_role(identity, scope, role)
        except RolegateError as e:
            logger.error(f"rolegate error: {e}")
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{super().__str__()} (caused by: {self.cause})"
        return super().__str__()


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RolegateError):
    """Invalid configuration.

    Raised when RolegateConfig has invalid settings, a gate is sized
    below one slot, or a cron expression cannot be parsed.
    """

    pass


# =============================================================================
# Storage Errors
# =============================================================================


class StoreError(RolegateError):
    """Unexpected storage failure.

    Raised for database errors that are not uniqueness violations,
    e.g. a locked or corrupt database file.
    """

    pass


# =============================================================================
# Authority Errors
# =============================================================================


class AuthorityError(RolegateError):
    """Base exception for external authority failures.

    Authority implementations may raise these instead of returning a
    failed AuthorityResult. ``kind`` carries the typed error kind the
    revalidation engine classifies on.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNEXPECTED,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.kind = kind


class InvalidCredentialError(AuthorityError):
    """The authority does not (or no longer) accept the credential."""

    def __init__(self, message: str = "Invalid credential", cause: Exception | None = None):
        super().__init__(message, ErrorKind.INVALID_CREDENTIAL, cause)


class AuthorityConfigurationError(AuthorityError):
    """The authority's configuration is ambiguous.

    Raised when:
    - The same external realm maps to more than one role
    - A role mapping is missing
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, ErrorKind.DUPLICATE_CONFIGURATION, cause)


class TransientAuthorityError(AuthorityError):
    """Network or unexpected failure talking to the authority.

    Never changes stored state; the next sweep retries naturally.
    """

    def __init__(
        self,
        message: str,
        network: bool = True,
        cause: Exception | None = None,
    ):
        kind = ErrorKind.NETWORK_ERROR if network else ErrorKind.UNEXPECTED
        super().__init__(message, kind, cause)
