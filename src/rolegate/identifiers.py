"""Helpers for opaque identifiers.

User, scope, receiver and credential identifiers come from external
systems as large numbers or free-form strings. They are handled as
strings end to end and never converted to numbers, which would lose
precision for 64-bit snowflake ids.
"""

from typing import Iterable


def ensure_opaque_id(value: object, field_name: str) -> str:
    """Return ``value`` unchanged if it is a string, raise TypeError otherwise."""
    if not isinstance(value, str):
        raise TypeError(
            f"{field_name} must be a str, got {type(value).__name__}"
        )
    return value


def ensure_opaque_ids(values: Iterable[object], field_name: str) -> list[str]:
    """Validate every element of ``values`` with ensure_opaque_id."""
    return [ensure_opaque_id(v, field_name) for v in values]


def ensure_optional_id(value: object, field_name: str) -> str | None:
    """Like ensure_opaque_id, but allows None (e.g. the global scope)."""
    if value is None:
        return None
    return ensure_opaque_id(value, field_name)


def mask_credential(credential: str, visible: int = 8) -> str:
    """Mask a credential for log output, keeping a short prefix."""
    if len(credential) <= visible:
        return "*" * len(credential)
    return f"{credential[:visible]}…"
