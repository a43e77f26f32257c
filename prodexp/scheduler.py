"""Scheduled recomputation of stored product statuses."""

from __future__ import annotations

import logging
from datetime import date

logger = logging.getLogger(__name__)


class StatusRecomputeScheduler:
    """Runs the status recompute job on a cron schedule.

    Uses APScheduler for cron-based scheduling.
    """

    def __init__(self, config) -> None:
        """Initialize scheduler with an AppConfig.

        Args:
            config: AppConfig instance.

        Raises:
            ImportError: If apscheduler is not installed.
        """
        try:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler
            from apscheduler.triggers.cron import CronTrigger
        except ImportError:
            raise ImportError(
                "apscheduler is required: pip install 'prodexp[scheduler]'"
            )

        self._config = config
        self._scheduler = AsyncIOScheduler()
        self._CronTrigger = CronTrigger
        self._running = False

    def setup_jobs(self) -> None:
        """Register scheduled jobs based on config."""
        schedule = self._config.scheduler.recompute_schedule
        trigger = self._parse_cron(schedule)
        self._scheduler.add_job(
            self._job_recompute_statuses,
            trigger=trigger,
            id="recompute_statuses",
            name="Recompute product statuses",
            replace_existing=True,
        )
        logger.info("Registered status recompute job: %s", schedule)

    def start(self) -> None:
        """Start the scheduler. Must be called from a running event loop."""
        self.setup_jobs()
        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    @property
    def running(self) -> bool:
        return self._running

    def get_jobs(self) -> list[dict]:
        """Return info about scheduled jobs."""
        jobs = []
        for job in self._scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": str(next_run) if next_run else None,
            })
        return jobs

    def _parse_cron(self, expr: str):
        """Parse a cron expression into a CronTrigger."""
        parts = expr.split()
        if len(parts) == 5:
            return self._CronTrigger(
                minute=parts[0],
                hour=parts[1],
                day=parts[2],
                month=parts[3],
                day_of_week=parts[4],
            )
        raise ValueError(f"Invalid cron expression: {expr}")

    async def _job_recompute_statuses(self) -> int:
        """Recompute statuses for the configured users (or all of them)."""
        logger.info("Running status recompute job...")

        try:
            from .db import ProductStore
            from .service import ProductService

            store = ProductStore(self._config.database.path)
            try:
                service = ProductService(store, self._config)
                count = service.recompute_all_statuses(
                    date.today(),
                    user_ids=self._config.scheduler.user_ids or None,
                )
            finally:
                store.close()
            if count > 0:
                logger.info("Updated status of %d products", count)
            return count
        except Exception:
            logger.exception("Status recompute job failed")
            return 0
