"""Background loop that fires due cron jobs."""

import asyncio
import logging
from datetime import datetime

from .models import ScheduledJob
from .registry import JobRegistry

logger = logging.getLogger(__name__)


class CronScheduler:
    """Fires registered jobs when their cron expression comes due.

    Runs a background loop that checks the registry for due jobs at
    regular intervals. A job never overlaps itself: while a run is in
    progress, further fires of the same job are skipped.
    """

    def __init__(
        self,
        registry: JobRegistry,
        check_interval: float = 60,
    ):
        """Initialize scheduler.

        Args:
            registry: Jobs to run
            check_interval: Seconds between checking for due jobs (default: 60)
        """
        self._registry = registry
        self._check_interval = check_interval
        self._running = False
        self._task: asyncio.Task | None = None
        self._runs: set[asyncio.Task] = set()

    async def start(self) -> None:
        """Start polling the registry for due jobs."""
        if self._running:
            logger.warning("Job scheduler already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            f"Job scheduler started, polling every {self._check_interval}s"
        )

    async def stop(self) -> None:
        """Stop the scheduler loop.

        Job runs already started are left to finish; see wait_idle().
        """
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Job scheduler stopped")

    async def wait_idle(self) -> None:
        """Wait until every job run started by the loop has finished."""
        if self._runs:
            await asyncio.gather(*list(self._runs), return_exceptions=True)

    async def _loop(self) -> None:
        """Poll for due jobs until stopped."""
        while self._running:
            try:
                self._dispatch_due()
                await asyncio.sleep(self._check_interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Job dispatch failed: {e}")
                await asyncio.sleep(self._check_interval)

    def _dispatch_due(self, as_of: datetime | None = None) -> list[asyncio.Task]:
        """Start a run for every due job that is not already running."""
        started = []
        for job in self._registry.due_jobs(as_of):
            if job.running:
                logger.debug(f"Job {job.name} still running, skipping this fire")
                continue
            task = asyncio.create_task(self.run_job(job.job_id))
            self._runs.add(task)
            task.add_done_callback(self._runs.discard)
            started.append(task)
        return started

    async def run_job(self, job_id: str) -> bool:
        """Run a job once, now.

        Returns:
            True if the job ran (even if it failed), False if it is
            unknown or already running.
        """
        job = self._registry.get(job_id)
        if job is None:
            return False
        if job.running:
            logger.warning(f"Job {job.name} ({job_id}) is already running")
            return False
        if job.callback is None:
            logger.warning(f"Job {job.name} ({job_id}) has no callback")
            return False

        await self._execute(job)
        return True

    async def _execute(self, job: ScheduledJob) -> None:
        """Run the callback and update the job's tracking fields."""
        job.running = True
        started = datetime.now()
        logger.debug(f"Running job {job.name} ({job.job_id})")
        try:
            job.last_result = await job.callback()
            job.last_error = None
        except Exception as e:
            job.last_error = str(e)
            logger.error(f"Job {job.name} ({job.job_id}) failed: {e}")
        finally:
            job.running = False
            job.last_run = started
            job.run_count += 1
            job.next_run = job.compute_next_run(max(started, datetime.now()))

    @property
    def is_running(self) -> bool:
        """Whether the polling loop is active."""
        return self._running
