"""Explicit registry of scheduled jobs.

Replaces a global, mutable id -> job map: the registry is an object with
a clear owner (whoever schedules jobs), lives as long as the process,
and is passed to the scheduler rather than reached through module state.
"""

import logging
from datetime import datetime

from .models import JobCallback, ScheduledJob
from rolegate.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class JobRegistry:
    """In-process registry of cron jobs."""

    def __init__(self) -> None:
        self._jobs: dict[str, ScheduledJob] = {}

    def register(
        self,
        name: str,
        expression: str,
        callback: JobCallback,
        scope: str | None = None,
        created_by: str = "system",
        start: datetime | None = None,
    ) -> ScheduledJob:
        """Register a recurring job.

        Args:
            name: Human-readable job name
            expression: 5-field cron expression (e.g., "0 */6 * * *")
            callback: Coroutine function run on each fire
            scope: Scope the job belongs to (None = global)
            created_by: Who created the job
            start: Base time for the first run (default: now)

        Returns:
            The registered job

        Raises:
            ConfigurationError: If the cron expression is invalid
        """
        from croniter import croniter

        if not croniter.is_valid(expression):
            raise ConfigurationError(f"Invalid cron expression: '{expression}'")

        job = ScheduledJob(
            name=name,
            expression=expression,
            callback=callback,
            scope=scope,
            created_by=created_by,
        )
        job.next_run = job.compute_next_run(start)
        self._jobs[job.job_id] = job

        logger.info(
            f"Job registered: {name} ({job.job_id}) "
            f"expression='{expression}' next_run={job.next_run.isoformat()}"
        )
        return job

    def unregister(self, job_id: str) -> bool:
        """Remove a job. A run already in progress is not interrupted.

        Returns:
            True if removed, False if not found
        """
        job = self._jobs.pop(job_id, None)
        if job is None:
            return False
        logger.info(f"Job unregistered: {job.name} ({job_id})")
        return True

    def get(self, job_id: str) -> ScheduledJob | None:
        """Get a job by ID."""
        return self._jobs.get(job_id)

    def list_jobs(self, scope: str | None = None) -> list[ScheduledJob]:
        """List jobs, optionally only those of one scope."""
        jobs = [j for j in self._jobs.values() if scope is None or j.scope == scope]
        return sorted(jobs, key=lambda j: j.created_at)

    def due_jobs(self, as_of: datetime | None = None) -> list[ScheduledJob]:
        """Jobs due at ``as_of``, earliest first."""
        now = as_of or datetime.now()
        due = [j for j in self._jobs.values() if j.is_due(now)]
        due.sort(key=lambda j: j.next_run or now)
        return due

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs
