"""Abstract permission grant storage.

Grants are additive signed weights keyed by (command, scope, receiver).
A receiver is either a user or a role; a scope of None marks a global
grant. Whether an action is allowed is decided by the sign of the sum
of all matching grants, see PermissionResolver.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class ReceiverKind(Enum):
    """Kind of receiver a grant applies to."""

    USER = "user"
    ROLE = "role"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PermissionGrant:
    """A single permission grant.

    Attributes:
        command: Command key the grant applies to (e.g., "poll")
        scope: Scope id, or None for a global grant
        receiver_kind: Whether receiver is a user or a role
        receiver: Opaque user or role id
        value: Signed weight; negative values deny
    """

    command: str
    scope: str | None
    receiver_kind: ReceiverKind
    receiver: str
    value: int


class PermissionStore(ABC):
    """Abstract interface for permission grant storage.

    At most one grant exists per (command, scope, receiver); setting it
    again replaces the value.
    """

    @abstractmethod
    async def set_grant(
        self,
        command: str,
        receiver: str,
        receiver_kind: ReceiverKind | str,
        value: int,
        scope: str | None = None,
    ) -> int:
        """Upsert a grant and return the new aggregate for it.

        The upsert and the aggregate read happen in one atomic unit.

        Returns:
            Sum of values for (command, scope, receiver) after the write.
        """
        ...

    @abstractmethod
    async def aggregate(
        self,
        command: str,
        scope: str | None,
        receivers: Iterable[str],
    ) -> int:
        """Sum grant values for command and scope over the receivers.

        Only exact scope matches count (None matches global grants).
        Receiver order and repetition do not matter. Returns 0 when
        nothing matches.
        """
        ...

    @abstractmethod
    async def list_grants(self, command: str | None = None) -> list[PermissionGrant]:
        """List grants, optionally for one command."""
        ...


def coerce_receiver_kind(kind: ReceiverKind | str) -> ReceiverKind:
    """Accept a ReceiverKind or its string value."""
    if isinstance(kind, ReceiverKind):
        return kind
    try:
        return ReceiverKind(kind)
    except ValueError:
        raise ValueError(f"Unknown receiver kind: {kind!r}") from None


def ensure_weight(value: object) -> int:
    """Grant values are plain ints; bools and floats are rejected."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Grant value must be an int, got {type(value).__name__}")
    return value
