"""External authority capability consumed by the core."""

from rolegate.authority.base import AuthorityResult, ExternalAuthority
from rolegate.authority.adapters import InMemoryAuthority
from rolegate.exceptions import ErrorKind

__all__ = [
    "AuthorityResult",
    "ErrorKind",
    "ExternalAuthority",
    "InMemoryAuthority",
]
