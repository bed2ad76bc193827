"""External authority capability.

The authority is the remote service that issued the credentials. The
core never sees its transport; it consumes typed results only:

    result = await authority.validate(key)
    if result.ok:
        role = result.value
    elif result.error is ErrorKind.INVALID_CREDENTIAL:
        ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from rolegate.exceptions import AuthorityError, ErrorKind


@dataclass(frozen=True)
class AuthorityResult:
    """Result of an authority lookup: a value or a typed error.

    Attributes:
        value: Role name (validate) or linked account (resolve_account)
        error: Error kind when the lookup failed
        message: Human-readable detail for operators
    """

    value: str | None = None
    error: ErrorKind | None = None
    message: str = ""

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            raise ValueError("AuthorityResult needs exactly one of value or error")

    @property
    def ok(self) -> bool:
        """Whether the lookup succeeded."""
        return self.error is None

    @classmethod
    def success(cls, value: str) -> AuthorityResult:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str = "") -> AuthorityResult:
        return cls(error=error, message=message or str(error))

    @classmethod
    def from_exception(cls, exc: BaseException) -> AuthorityResult:
        """Map an exception raised by an authority to a failed result.

        AuthorityError subclasses keep their kind; anything else is
        UNEXPECTED.
        """
        if isinstance(exc, AuthorityError):
            return cls.failure(exc.kind, str(exc))
        return cls.failure(ErrorKind.UNEXPECTED, f"{type(exc).__name__}: {exc}")


class ExternalAuthority(ABC):
    """Abstract interface for the credential-issuing authority.

    Implementations are expected to be rate limited by the remote side;
    callers throttle through a ThrottledGate rather than the authority
    throttling itself.

    Implementations may either return ``AuthorityResult.failure(...)``
    or raise an AuthorityError subclass; callers accept both.
    """

    @abstractmethod
    async def validate(self, credential: str) -> AuthorityResult:
        """Check a credential and return the role it entitles to.

        Returns:
            AuthorityResult with the role name, or an ErrorKind of
            INVALID_CREDENTIAL, DUPLICATE_CONFIGURATION, NETWORK_ERROR
            or UNEXPECTED.
        """
        ...

    @abstractmethod
    async def resolve_account(self, credential: str) -> AuthorityResult:
        """Resolve the external account identifier behind a credential."""
        ...

    async def lookup(self, credential: str) -> AuthorityResult:
        """validate() with raised exceptions turned into failed results."""
        try:
            return await self.validate(credential)
        except Exception as e:
            return AuthorityResult.from_exception(e)
