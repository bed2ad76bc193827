"""Ready-made jobs."""

import logging
from typing import Awaitable, Callable

from .models import ScheduledJob
from .registry import JobRegistry
from rolegate.revalidation import ReconciliationResult, RevalidationEngine, SweepSummary

logger = logging.getLogger(__name__)

ResultsHandler = Callable[[list[ReconciliationResult]], Awaitable[None]]


def schedule_revalidation(
    registry: JobRegistry,
    engine: RevalidationEngine,
    expression: str = "0 */6 * * *",
    on_results: ResultsHandler | None = None,
    name: str = "Credential revalidation",
) -> ScheduledJob:
    """Register a recurring revalidation sweep.

    Each run performs ``engine.revalidate_all()`` and passes the results
    to ``on_results`` (e.g. to delete revoked credentials or notify
    operators about skipped ones). The run's result is a SweepSummary.

    Args:
        registry: Registry to add the job to
        engine: Engine to run
        expression: Cron expression
        on_results: Optional async handler for the full result list
        name: Job name

    Returns:
        The registered job
    """

    async def run() -> SweepSummary:
        results = await engine.revalidate_all()
        if on_results is not None:
            await on_results(results)
        return SweepSummary.of(results)

    return registry.register(name=name, expression=expression, callback=run)
