"""rolegate scheduling.

Cron-driven recurring jobs, chiefly the credential revalidation sweep.

Usage:
    from rolegate.scheduling import CronScheduler, JobRegistry, schedule_revalidation

    registry = JobRegistry()
    schedule_revalidation(registry, engine, "0 */6 * * *", on_results=apply)
    scheduler = CronScheduler(registry)
    await scheduler.start()
"""

from .models import ScheduledJob
from .registry import JobRegistry
from .scheduler import CronScheduler
from .jobs import schedule_revalidation

__all__ = [
    "ScheduledJob",
    "JobRegistry",
    "CronScheduler",
    "schedule_revalidation",
]
