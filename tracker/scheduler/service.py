"""Scheduler service for periodic ingestion runs."""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from tracker.logging import get_logger

logger = get_logger(__name__, component="scheduler")

JOB_ID = "ingestion-run"


class SchedulerService:
    """
    Wraps APScheduler to trigger ingestion at a fixed interval.

    Runs happen on a BackgroundScheduler worker thread; the main thread is
    left free to handle signals. A run that raises is logged and the
    schedule carries on.
    """

    def __init__(
        self,
        run_callable: Callable[[], object],
        interval_seconds: int,
        shutdown_event: Optional[threading.Event] = None,
        run_immediately: bool = True,
    ):
        """
        Initialize the scheduler service.

        Args:
            run_callable: Zero-argument callable performing one ingestion run
            interval_seconds: Interval between runs in seconds
            shutdown_event: Optional event set on shutdown for coordination
            run_immediately: Start the first run right away instead of after one interval
        """
        self.run_callable = run_callable
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event
        self.run_immediately = run_immediately

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """Register the ingestion job and start the scheduler thread."""
        trigger = IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc)

        job_kwargs = {}
        if self.run_immediately:
            job_kwargs["next_run_time"] = datetime.now(timezone.utc)

        self.scheduler.add_job(
            func=self._run_job,
            trigger=trigger,
            id=JOB_ID,
            name="Listing ingestion",
            replace_existing=True,
            **job_kwargs,
        )
        self.scheduler.start()

        next_run = self.get_next_run_time()
        logger.info(
            f"Scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "next_run_time": next_run.isoformat() if next_run else None,
            },
        )

    def _run_job(self) -> None:
        try:
            self.run_callable()
        except Exception as e:
            logger.error(
                f"Scheduled ingestion run failed: {e}",
                extra={"event": "scheduler.run.failed", "error_type": type(e).__name__},
                exc_info=True,
            )

    def shutdown(self, wait: bool = False) -> None:
        """
        Stop the scheduler.

        Args:
            wait: If True, wait for a running ingestion to finish
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self) -> None:
        """Run ingestion synchronously in the calling thread."""
        logger.info("Triggering immediate ingestion run", extra={"event": "scheduler.trigger_now"})
        self._run_job()

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        """Next scheduled run time, or None if the job is not registered."""
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None
