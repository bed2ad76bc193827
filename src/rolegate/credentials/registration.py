"""Credential registration.

A user presents an API key once; the registrar checks its format, asks
the authority which role it grants, resolves the external account and
stores the key in every scope the user belongs to. User-facing messages
and role assignment in the host system stay with the caller.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from rolegate.authority.base import AuthorityResult, ExternalAuthority
from rolegate.config import DEFAULT_CREDENTIAL_PATTERN
from rolegate.credentials.store import CredentialStore, UpsertResult
from rolegate.exceptions import ErrorKind
from rolegate.identifiers import ensure_opaque_id, ensure_opaque_ids, mask_credential

logger = logging.getLogger(__name__)


class RegistrationStatus(Enum):
    """Overall outcome of a registration attempt."""

    ACCEPTED = "accepted"  # stored in at least one scope
    DUPLICATE = "duplicate"  # another identity holds the key in every scope
    INVALID_FORMAT = "invalid_format"
    DECLINED = "declined"  # authority rejected the key
    ERROR = "error"  # authority failed (network, configuration, ...)
    NO_SCOPES = "no_scopes"


@dataclass
class RegistrationResult:
    """Result of CredentialRegistrar.register."""

    status: RegistrationStatus
    role: str | None = None
    linked_account: str | None = None
    error_kind: ErrorKind | None = None
    scopes: dict[str, UpsertResult] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return self.status is RegistrationStatus.ACCEPTED


class CredentialRegistrar:
    """Validates and stores newly presented credentials."""

    def __init__(
        self,
        store: CredentialStore,
        authority: ExternalAuthority,
        pattern: str = DEFAULT_CREDENTIAL_PATTERN,
    ):
        self._store = store
        self._authority = authority
        # ASCII: \w must not accept non-Latin letters
        self._pattern = re.compile(pattern, re.ASCII)

    def is_valid_format(self, credential: str) -> bool:
        """Syntactic check only; says nothing about validity."""
        return self._pattern.fullmatch(credential) is not None

    async def register(
        self,
        identity: str,
        scopes: Iterable[str],
        credential: str,
    ) -> RegistrationResult:
        """Register ``credential`` for ``identity`` in each scope.

        The linked account is resolved before anything is written, so a
        row is only ever stored complete.
        """
        ensure_opaque_id(identity, "identity")
        ensure_opaque_id(credential, "credential")
        if isinstance(scopes, str):
            scopes = [scopes]
        scopes = ensure_opaque_ids(scopes, "scope")
        masked = mask_credential(credential)

        if not self.is_valid_format(credential):
            logger.info(f"Rejected malformed credential {masked} from {identity}")
            return RegistrationResult(status=RegistrationStatus.INVALID_FORMAT)

        if not scopes:
            return RegistrationResult(status=RegistrationStatus.NO_SCOPES)

        role_result = await self._authority.lookup(credential)
        if not role_result.ok:
            return self._failed(role_result, masked)

        try:
            account_result = await self._authority.resolve_account(credential)
        except Exception as e:
            account_result = AuthorityResult.from_exception(e)
        if not account_result.ok:
            return self._failed(account_result, masked)

        result = RegistrationResult(
            status=RegistrationStatus.DUPLICATE,
            role=role_result.value,
            linked_account=account_result.value,
        )
        for scope in scopes:
            outcome = await self._store.upsert_credential(
                identity, scope, credential, account_result.value, role_result.value
            )
            result.scopes[scope] = outcome
            if outcome is UpsertResult.STORED:
                result.status = RegistrationStatus.ACCEPTED
                logger.info(
                    f"Accepted {masked} for {identity} in scope {scope} "
                    f"(role={role_result.value})"
                )
            else:
                logger.info(f"Duplicate credential {masked} in scope {scope}")

        return result

    def _failed(self, lookup: AuthorityResult, masked: str) -> RegistrationResult:
        if lookup.error is ErrorKind.INVALID_CREDENTIAL:
            logger.info(f"Declined credential {masked}")
            return RegistrationResult(
                status=RegistrationStatus.DECLINED,
                error_kind=lookup.error,
            )

        if lookup.error is ErrorKind.DUPLICATE_CONFIGURATION:
            logger.error(
                f"Authority configuration is ambiguous while registering {masked}: "
                f"{lookup.message}"
            )
        else:
            logger.error(f"Authority lookup failed for {masked}: {lookup.message}")
        return RegistrationResult(
            status=RegistrationStatus.ERROR,
            error_kind=lookup.error,
        )
