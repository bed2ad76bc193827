"""Throttled revalidation of stored credentials."""

from rolegate.revalidation.models import (
    ReconciliationResult,
    ReconciliationStatus,
    RoleChangeEvent,
    SweepSummary,
)
from rolegate.revalidation.throttle import ThrottledGate
from rolegate.revalidation.engine import RevalidationEngine

__all__ = [
    # Results
    "ReconciliationResult",
    "ReconciliationStatus",
    "RoleChangeEvent",
    "SweepSummary",
    # Engine
    "ThrottledGate",
    "RevalidationEngine",
]
