"""Credential revalidation engine.

Re-checks every stored credential against the external authority and
reconciles the stored roles. Because the authority is rate limited, a
sweep is deliberately slow: at most ``max_parallel_requests`` lookups
are in flight, and every slot is held for ``politeness_delay`` seconds
after its lookup finishes.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from rolegate.authority.base import AuthorityResult, ExternalAuthority
from rolegate.config import RevalidationConfig
from rolegate.credentials.store import Credential, CredentialStore
from rolegate.exceptions import ErrorKind
from rolegate.identifiers import mask_credential
from rolegate.revalidation.models import (
    ReconciliationResult,
    RoleChangeEvent,
    SweepSummary,
)
from rolegate.revalidation.throttle import ThrottledGate

logger = logging.getLogger(__name__)

RoleChangeListener = Callable[[RoleChangeEvent], Awaitable[None]]


class RevalidationEngine:
    """Throttled batch revalidation of stored credentials.

    Outcomes per credential:
    - authority returns a role: store it (ROLE_ASSIGNED)
    - authority reports INVALID_CREDENTIAL: clear the stored role but
      keep the row (REVOKED); deleting it is an explicit, separate call
    - anything else: leave the row alone and report it (SKIPPED)

    One failing credential never aborts the sweep, and nothing is
    retried within a sweep. The engine keeps no state between sweeps;
    not starting a sweep while another runs is the scheduler's job.

    Example:
        engine = RevalidationEngine(store, authority, max_parallel_requests=3)
        engine.add_listener(on_role_change)
        results = await engine.revalidate_all()
    """

    def __init__(
        self,
        store: CredentialStore,
        authority: ExternalAuthority,
        max_parallel_requests: int = 3,
        politeness_delay: float = 5.0,
    ):
        """Initialize engine.

        Args:
            store: Credential store to sweep and update
            authority: External authority to consult
            max_parallel_requests: Concurrent authority lookups
            politeness_delay: Seconds a slot is held after each lookup
        """
        self._store = store
        self._authority = authority
        self._gate = ThrottledGate(max_parallel_requests, politeness_delay)
        self._listeners: list[RoleChangeListener] = []

    @classmethod
    def from_config(
        cls,
        store: CredentialStore,
        authority: ExternalAuthority,
        config: RevalidationConfig,
    ) -> "RevalidationEngine":
        """Create an engine from RevalidationConfig."""
        return cls(
            store,
            authority,
            max_parallel_requests=config.max_parallel_requests,
            politeness_delay=config.politeness_delay,
        )

    def add_listener(self, listener: RoleChangeListener) -> None:
        """Register an async callback for role changes."""
        self._listeners.append(listener)

    def remove_listener(self, listener: RoleChangeListener) -> bool:
        """Unregister a callback. Returns True if it was registered."""
        try:
            self._listeners.remove(listener)
            return True
        except ValueError:
            return False

    @property
    def gate(self) -> ThrottledGate:
        """The gate guarding authority lookups."""
        return self._gate

    async def revalidate_all(self) -> list[ReconciliationResult]:
        """Revalidate every stored credential.

        Returns once every lookup, including its hold time, has
        finished. Result order is not part of the contract.
        """
        snapshot = await self._store.list_all()
        if not snapshot:
            logger.info("Revalidation sweep: no credentials stored")
            return []

        logger.info(
            f"Revalidation sweep started: {len(snapshot)} credentials, "
            f"{self._gate.max_concurrent} parallel, "
            f"{self._gate.hold_seconds}s politeness delay"
        )
        started = time.monotonic()

        results = await asyncio.gather(
            *[self._revalidate_one(cred) for cred in snapshot]
        )

        summary = SweepSummary.of(results)
        logger.info(
            f"Revalidation sweep finished in {time.monotonic() - started:.1f}s: "
            f"{summary.assigned} assigned ({summary.changed} changed), "
            f"{summary.revoked} revoked, {summary.skipped} skipped"
        )
        return list(results)

    async def _revalidate_one(self, cred: Credential) -> ReconciliationResult:
        """Look up one credential under the gate and reconcile it."""
        async with self._gate.slot():
            lookup = await self._authority.lookup(cred.credential)
            try:
                result = await self._reconcile(cred, lookup)
            except Exception as e:
                result = ReconciliationResult.skipped(
                    cred, f"store update failed: {e}", ErrorKind.UNEXPECTED
                )

            if result.reason:
                logger.error(
                    f"Error while revalidating {mask_credential(cred.credential)} "
                    f"({cred.identity} in {cred.scope}): {result.reason}. "
                    f"Credential is exempt from this sweep."
                )
            elif result.changed:
                await self._emit(RoleChangeEvent.from_result(result))

        return result

    async def _reconcile(
        self,
        cred: Credential,
        lookup: AuthorityResult,
    ) -> ReconciliationResult:
        """Classify a lookup and write the role delta."""
        if lookup.ok:
            result = ReconciliationResult.assigned(cred, lookup.value)
        elif lookup.error is ErrorKind.INVALID_CREDENTIAL:
            # Valid at registration, so the owner has since deleted it.
            result = ReconciliationResult.revoked(cred)
        else:
            return ReconciliationResult.skipped(
                cred, lookup.message or str(lookup.error), lookup.error
            )

        updated = await self._store.update_role_for_credential(
            cred.credential, cred.identity, cred.scope, result.new_role
        )
        if not updated:
            # The pair was re-registered or deleted after the snapshot.
            return ReconciliationResult.skipped(
                cred, "credential replaced during sweep", ErrorKind.UNEXPECTED
            )
        if result.changed:
            logger.debug(
                f"{cred.identity} in {cred.scope}: "
                f"{result.previous_role} -> {result.new_role}"
            )
        return result

    async def _emit(self, event: RoleChangeEvent) -> None:
        """Notify listeners; their failures never affect the sweep."""
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception as e:
                logger.warning(f"Role change listener failed: {e}")
