"""Reference implementation of ExternalAuthority.

InMemoryAuthority answers from fixed tables. It is meant for tests and
local development; production deployments provide their own client for
the real remote service.
"""

import asyncio
import logging

from rolegate.authority.base import AuthorityResult, ExternalAuthority
from rolegate.exceptions import ErrorKind
from rolegate.identifiers import mask_credential

logger = logging.getLogger(__name__)


class InMemoryAuthority(ExternalAuthority):
    """Authority backed by in-memory tables.

    Unknown credentials are reported as INVALID_CREDENTIAL. An entry may
    be a role name, an ErrorKind, or an exception instance to raise.

    Example:
        authority = InMemoryAuthority(
            roles={"AAAA-...": "BlueWorld", "BBBB-...": ErrorKind.NETWORK_ERROR},
            accounts={"AAAA-...": "ACCOUNT-GUID"},
            latency=0.05,
        )
    """

    def __init__(
        self,
        roles: dict[str, str | ErrorKind | Exception] | None = None,
        accounts: dict[str, str] | None = None,
        latency: float = 0.0,
    ):
        """Initialize authority.

        Args:
            roles: credential -> role name, ErrorKind or exception
            accounts: credential -> linked account identifier
            latency: Seconds each call takes
        """
        self.roles: dict[str, str | ErrorKind | Exception] = dict(roles or {})
        self.accounts: dict[str, str] = dict(accounts or {})
        self.latency = latency
        self.calls: list[str] = []

    def set_role(self, credential: str, entry: str | ErrorKind | Exception) -> None:
        """Set the answer for a credential."""
        self.roles[credential] = entry

    def revoke(self, credential: str) -> None:
        """Forget a credential, as if its owner deleted it remotely."""
        self.roles.pop(credential, None)
        self.accounts.pop(credential, None)

    async def validate(self, credential: str) -> AuthorityResult:
        """Answer from the roles table."""
        self.calls.append(credential)
        if self.latency:
            await asyncio.sleep(self.latency)

        entry = self.roles.get(credential)
        logger.debug(f"validate {mask_credential(credential)} -> {entry!r}")
        if entry is None:
            return AuthorityResult.failure(ErrorKind.INVALID_CREDENTIAL)
        if isinstance(entry, ErrorKind):
            return AuthorityResult.failure(entry)
        if isinstance(entry, Exception):
            raise entry
        return AuthorityResult.success(entry)

    async def resolve_account(self, credential: str) -> AuthorityResult:
        """Answer from the accounts table."""
        if self.latency:
            await asyncio.sleep(self.latency)

        account = self.accounts.get(credential)
        if account is None:
            return AuthorityResult.failure(ErrorKind.INVALID_CREDENTIAL)
        return AuthorityResult.success(account)
