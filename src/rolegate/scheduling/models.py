"""Scheduling models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable
import uuid


JobCallback = Callable[[], Awaitable[Any]]


@dataclass
class ScheduledJob:
    """A recurring job driven by a cron expression.

    Jobs live in a JobRegistry for the lifetime of the process. The
    registry's owner (the scheduling collaborator) decides what to
    persist; the job itself only carries runtime state.
    """

    # Identity
    job_id: str = field(default_factory=lambda: f"job_{uuid.uuid4().hex[:12]}")
    name: str = ""

    # Ownership
    scope: str | None = None  # scope the job was created for, None = global
    created_by: str = "system"

    # Trigger
    expression: str = "0 */6 * * *"
    callback: JobCallback | None = field(default=None, repr=False)

    # Timing
    created_at: datetime = field(default_factory=datetime.now)
    next_run: datetime | None = None
    last_run: datetime | None = None

    # Execution tracking
    running: bool = False
    run_count: int = 0
    last_result: Any = field(default=None, repr=False)
    last_error: str | None = None

    def compute_next_run(self, base: datetime | None = None) -> datetime:
        """Next fire time after ``base`` (default: now)."""
        from croniter import croniter

        cron = croniter(self.expression, base or datetime.now())
        return cron.get_next(datetime)

    def is_due(self, as_of: datetime | None = None) -> bool:
        """Check if the job should run now."""
        if self.next_run is None:
            return False
        return self.next_run <= (as_of or datetime.now())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for listings."""
        return {
            "job_id": self.job_id,
            "name": self.name,
            "scope": self.scope,
            "created_by": self.created_by,
            "expression": self.expression,
            "created_at": self.created_at.isoformat(),
            "next_run": self.next_run.isoformat() if self.next_run else None,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "running": self.running,
            "run_count": self.run_count,
            "last_error": self.last_error,
        }
