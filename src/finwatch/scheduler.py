"""Background scheduler driving the periodic monitoring work."""

from __future__ import annotations

import logging
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler as APScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .config import BaseConfig
from .monitoring.engine import MonitoringEngine

logger = logging.getLogger("finwatch.scheduler")


class MonitoringScheduler:
    """Runs cache sweeps, notification pruning, the daily tick and popup draining."""

    def __init__(self, engine: MonitoringEngine, config: BaseConfig):
        """Initialize the scheduler.

        Args:
            engine: Monitoring engine whose periodic hooks are driven
            config: Provides the sweep and popup polling intervals
        """
        self.engine = engine
        self.config = config
        self.scheduler: APScheduler | None = None

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = APScheduler()

        self.scheduler.add_job(
            func=self._run_maintenance,
            trigger=IntervalTrigger(minutes=self.config.SWEEP_INTERVAL_MINUTES),
            id="monitoring_sweep",
            name="Monitoring Cache Sweep",
            replace_existing=True,
        )
        logger.info(f"Scheduled cache sweep every {self.config.SWEEP_INTERVAL_MINUTES} minutes")

        # Daily monitors are idempotent per day, so an hourly tick catches up after sleep.
        self.scheduler.add_job(
            func=self._run_daily_tick,
            trigger=CronTrigger(minute=0),
            id="daily_tick",
            name="Payment And Debt Reminders",
            replace_existing=True,
        )
        self.scheduler.add_job(
            func=self._run_daily_tick,
            trigger=DateTrigger(),
            id="daily_tick_startup",
            name="Startup Reminder Check",
            replace_existing=True,
        )
        logger.info("Scheduled daily reminder checks")

        if self.engine.manager.popups is not None:
            self.scheduler.add_job(
                func=self.engine.drain_popups,
                trigger=IntervalTrigger(seconds=self.config.POPUP_POLL_SECONDS),
                id="popup_drain",
                name="Popup Queue Drain",
                replace_existing=True,
            )

        self.scheduler.start()
        logger.info("Background scheduler started")

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Background scheduler stopped")

    @property
    def running(self) -> bool:
        return self.scheduler is not None

    def _run_maintenance(self) -> None:
        try:
            evicted = self.engine.sweep()
            pruned = self.engine.manager.prune()
            logger.info("Monitoring maintenance completed", extra={"evicted": evicted, "pruned": pruned})
        except Exception as exc:
            logger.error(f"Monitoring maintenance failed: {exc}", exc_info=True)

    def _run_daily_tick(self) -> None:
        try:
            self.engine.daily_tick()
        except Exception as exc:
            logger.error(f"Daily reminder check failed: {exc}", exc_info=True)

    def add_job(
        self,
        func: Callable,
        trigger: str,
        *,
        job_id: str,
        name: str | None = None,
        **trigger_args,
    ) -> None:
        """Add a custom job to the scheduler.

        Args:
            func: Function to execute
            trigger: Trigger type ('cron', 'interval', 'date')
            job_id: Unique job identifier
            name: Human-readable job name
            **trigger_args: Additional trigger arguments
        """
        if self.scheduler is None:
            logger.warning(f"Cannot add job {job_id}: scheduler not started")
            return

        if trigger == "cron":
            trigger_obj = CronTrigger(**trigger_args)
        elif trigger == "interval":
            trigger_obj = IntervalTrigger(**trigger_args)
        elif trigger == "date":
            trigger_obj = DateTrigger(**trigger_args)
        else:
            raise ValueError(f"Unknown trigger type: {trigger}")

        self.scheduler.add_job(
            func=func,
            trigger=trigger_obj,
            id=job_id,
            name=name or job_id,
            replace_existing=True,
        )
        logger.info(f"Added job: {job_id}")

    def remove_job(self, job_id: str) -> None:
        if self.scheduler is not None:
            self.scheduler.remove_job(job_id)
            logger.info(f"Removed job: {job_id}")


def create_scheduler(
    engine: MonitoringEngine, config: BaseConfig, *, auto_start: bool = False
) -> MonitoringScheduler:
    """Create and optionally start a monitoring scheduler."""
    scheduler = MonitoringScheduler(engine, config)
    if auto_start:
        scheduler.start()
    return scheduler
