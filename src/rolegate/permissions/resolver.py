"""Command authorization from additive grants.

Permissions are signed weights, not flags. The effective weight for a
user is the sum of every grant on the command in the scope whose
receiver is the user or one of the user's roles:

    role:admins  +5
    user:42     -10
    ------------------
    weight       -5   -> denied

A negative role grant can override a positive default and a positive
personal grant can override a role-level denial. Only the sign of the
total matters; a total of exactly 0 is denied.
"""

import logging
from typing import Iterable, NamedTuple

from rolegate.identifiers import ensure_opaque_id, ensure_opaque_ids, ensure_optional_id
from rolegate.permissions.store import PermissionStore

logger = logging.getLogger(__name__)


class Authorization(NamedTuple):
    """Result of an authorization check."""

    allowed: bool
    weight: int


class PermissionResolver:
    """Stateless authorization over a PermissionStore."""

    def __init__(self, store: PermissionStore):
        self._store = store

    async def authorize(
        self,
        command: str,
        identity: str,
        roles: Iterable[str],
        scope: str | None,
    ) -> Authorization:
        """Compute whether ``identity`` may run ``command`` in ``scope``.

        Args:
            command: Command key
            identity: Opaque user id
            roles: Role ids the user holds in the scope (not modified)
            scope: Scope id, or None for global grants

        Returns:
            Authorization(allowed, weight) with allowed = weight > 0.
        """
        ensure_opaque_id(command, "command")
        ensure_opaque_id(identity, "identity")
        ensure_optional_id(scope, "scope")
        candidates = set(ensure_opaque_ids(roles, "role"))
        candidates.add(identity)

        weight = await self._store.aggregate(command, scope, candidates)
        allowed = weight > 0
        logger.debug(
            f"authorize {command} for {identity} in {scope}: "
            f"weight={weight} allowed={allowed}"
        )
        return Authorization(allowed=allowed, weight=weight)
