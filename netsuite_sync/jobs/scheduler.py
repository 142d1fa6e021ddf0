"""Recurring sync schedule backed by an APScheduler blocking scheduler."""

from __future__ import annotations

import signal
from datetime import datetime, timezone
from typing import Callable

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from .interfaces import JobOrchestratorPort

SCHEDULED_JOB_ID = "sync_run"


def job_run_logged(orchestrator: JobOrchestratorPort, job_name: str = SCHEDULED_JOB_ID) -> str:
    """Execute one run and log its stats summary.

    Args:
        orchestrator: Sync orchestrator.
        job_name: Job name passed to the orchestrator.

    Returns:
        str: Final run status.

    Raises:
        ValueError: Raised when the job name is unsupported.
    """

    execution_result = orchestrator.job_execute(job_name=job_name)
    stats = execution_result.stats
    logger.info(
        f"Sync run {execution_result.status}: total={stats.total_mappings} "
        f"succeeded={stats.successful_syncs} failed={stats.failed_syncs} aborted={stats.aborted}"
    )
    return execution_result.status


def job_build_scheduler(run_callable: Callable[[], object], interval_seconds: int) -> BlockingScheduler:
    """Build a scheduler that runs immediately and then every interval.

    A run still in progress when the next tick fires makes the scheduler skip that tick.

    Args:
        run_callable: Zero-argument callable executing one sync run.
        interval_seconds: Seconds between run starts.

    Returns:
        BlockingScheduler: Configured, not yet started scheduler.

    Raises:
        ValueError: Raised when the interval is not positive.
    """

    if interval_seconds <= 0:
        raise ValueError("interval_seconds must be > 0")

    scheduler = BlockingScheduler(timezone=timezone.utc)
    scheduler.add_job(
        run_callable,
        trigger=IntervalTrigger(seconds=interval_seconds, timezone=timezone.utc),
        id=SCHEDULED_JOB_ID,
        name="NetSuite saved-search sync",
        next_run_time=datetime.now(timezone.utc),
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def job_run_scheduler(orchestrator: JobOrchestratorPort, interval_seconds: int) -> None:
    """Run the recurring sync until SIGINT or SIGTERM.

    Args:
        orchestrator: Sync orchestrator executed on every tick.
        interval_seconds: Seconds between run starts.

    Returns:
        None: Returns after the scheduler has shut down.

    Raises:
        ValueError: Raised when the interval is not positive.
    """

    scheduler = job_build_scheduler(lambda: job_run_logged(orchestrator), interval_seconds)

    def _job_handle_shutdown_signal(signal_number: int, _frame) -> None:
        logger.info(f"Received signal {signal.Signals(signal_number).name}, shutting down scheduler")
        scheduler.shutdown(wait=False)

    signal.signal(signal.SIGINT, _job_handle_shutdown_signal)
    signal.signal(signal.SIGTERM, _job_handle_shutdown_signal)

    logger.info(f"Scheduling sync every {interval_seconds} seconds; first run starts now")
    scheduler.start()
    logger.info("Scheduler stopped")
