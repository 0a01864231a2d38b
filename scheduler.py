"""
scheduler.py

Responsibility: Sets up the APScheduler AsyncIOScheduler, registers the
reconcile job, and runs it until the shutdown event is set.
Does NOT: contain DNS business logic, config reading, or HTTP calls directly
— those are delegated entirely to ReconcileService and its collaborators.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from services.reconcile_service import ReconcileService

logger = logging.getLogger(__name__)

# Job ID used to identify the reconcile job in APScheduler
_JOB_ID = "ddns_reconcile"


# ---------------------------------------------------------------------------
# Scheduler job
# ---------------------------------------------------------------------------


async def _reconcile_job(reconciler: ReconcileService, cancel: asyncio.Event) -> None:
    """
    APScheduler job: runs one reconcile pass unless shutdown was requested.

    Args:
        reconciler: The process-wide ReconcileService.
        cancel: The shared shutdown event.

    Returns:
        None
    """
    if cancel.is_set():
        logger.debug("Shutdown requested — skipping reconcile tick.")
        return

    logger.debug("Reconcile job triggered.")
    await reconciler.reconcile(cancel)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def create_scheduler(
    reconciler: ReconcileService,
    cancel: asyncio.Event,
    interval_seconds: int = 30,
) -> AsyncIOScheduler:
    """
    Creates and returns a configured AsyncIOScheduler with the reconcile job.

    The job runs immediately on startup (next_run_time=now) and then at the
    configured interval.

    Args:
        reconciler: The ReconcileService to drive.
        cancel: The shared shutdown event passed into every pass.
        interval_seconds: Seconds between reconcile passes (default 30).

    Returns:
        A configured but not yet started AsyncIOScheduler.
    """
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        _reconcile_job,
        trigger="interval",
        seconds=interval_seconds,
        id=_JOB_ID,
        kwargs={"reconciler": reconciler, "cancel": cancel},
        # NOTE: next_run_time=now triggers the first pass immediately on startup
        # rather than waiting a full interval before the first run.
        next_run_time=datetime.now(timezone.utc),
        max_instances=1,  # A new pass never starts before the previous one returns
        coalesce=True,
    )
    logger.info("Reconcile job scheduled — interval: %ds.", interval_seconds)
    return scheduler


async def run_until_cancelled(
    reconciler: ReconcileService,
    cancel: asyncio.Event,
    interval_seconds: int = 30,
) -> None:
    """
    Runs the reconcile job on its interval until the shutdown event is set.

    The wait is on the event itself, so shutdown is observed immediately
    rather than after the current interval elapses. Shutting the scheduler
    down cancels a pass that is still waiting on an outbound call and leaves
    no timers behind.

    Args:
        reconciler: The ReconcileService to drive.
        cancel: The shared shutdown event.
        interval_seconds: Seconds between reconcile passes.

    Returns:
        None
    """
    scheduler = create_scheduler(reconciler, cancel, interval_seconds)
    scheduler.start()
    try:
        # start() queues the first wakeup on the loop; let it run before a
        # shutdown can happen so it cannot re-arm a timer afterwards
        await asyncio.sleep(0)
        await cancel.wait()
    finally:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped.")
