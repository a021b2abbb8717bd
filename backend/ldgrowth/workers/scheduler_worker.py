# backend/ldgrowth/workers/scheduler_worker.py
"""
Scheduler Worker - owns the timers of the scheduling subsystem.

Two APScheduler jobs:
- a daily cron job running automatic scheduling for every enabled store
- an interval job running the upcoming-evaluation reminder pass

The scheduling logic itself lives in the services; this worker only
decides when it runs. Job failures are logged and never escape into
APScheduler.
"""

from typing import Any, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..config import settings
from ..constants import (
    DAILY_SCHEDULING_JOB_ID,
    REMINDER_JOB_ID,
    SCHEDULER_MISFIRE_GRACE_TIME_SECONDS,
)
from ..enums import LogEmoji, LoggerName, LogSource
from ..models.scheduling_model import AllStoresSchedulingResult, ReminderPassResult
from ..services.logger import get_service_logger
from ..services.reminder_service import ReminderService
from ..services.scheduling.evaluation_scheduler_service import (
    EvaluationSchedulerService,
)
from .base_worker import BaseWorker

scheduler_logger = get_service_logger(LoggerName.SCHEDULER_WORKER, LogSource.WORKER)


class SchedulerWorker(BaseWorker):
    """
    APScheduler lifecycle and job registration.

    Responsibilities:
    - Start and stop the AsyncIOScheduler
    - Register the daily scheduling and reminder jobs
    - Contain job failures
    """

    def __init__(
        self,
        scheduler_service: EvaluationSchedulerService,
        reminder_service: ReminderService,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        super().__init__("SchedulerWorker")
        self.scheduler_service = scheduler_service
        self.reminder_service = reminder_service
        self.scheduler = scheduler or AsyncIOScheduler(timezone="UTC")

    async def initialize(self) -> None:
        """Register jobs and start the scheduler."""
        scheduler_logger.info(
            "Initializing scheduler worker", emoji=LogEmoji.STARTUP
        )
        self.register_jobs()
        if not self.scheduler.running:
            self.scheduler.start()
        scheduler_logger.info(
            "Scheduler started",
            extra_context={"jobs": [job.id for job in self.scheduler.get_jobs()]},
            emoji=LogEmoji.SUCCESS,
        )

    async def cleanup(self) -> None:
        """Shut the scheduler down without waiting for running jobs."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            scheduler_logger.info("Scheduler shut down", emoji=LogEmoji.SHUTDOWN)

    def register_jobs(self) -> None:
        """Add (or replace) the daily scheduling and reminder jobs."""
        self.scheduler.add_job(
            self.run_daily_scheduling,
            trigger=CronTrigger(
                hour=settings.scheduling_cron_hour,
                minute=settings.scheduling_cron_minute,
                timezone="UTC",
            ),
            id=DAILY_SCHEDULING_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=SCHEDULER_MISFIRE_GRACE_TIME_SECONDS,
        )
        self.scheduler.add_job(
            self.run_reminders,
            trigger=IntervalTrigger(hours=settings.reminder_interval_hours),
            id=REMINDER_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=SCHEDULER_MISFIRE_GRACE_TIME_SECONDS,
        )

    async def run_daily_scheduling(self) -> Optional[AllStoresSchedulingResult]:
        """Daily job: schedule every store with auto-scheduling enabled."""
        scheduler_logger.info(
            "Running daily evaluation scheduling", emoji=LogEmoji.PROCESSING
        )
        try:
            return await self.scheduler_service.run_scheduling()
        except Exception as e:
            scheduler_logger.error(
                f"Daily evaluation scheduling failed: {e}",
                exception=e,
                error_context={"job_id": DAILY_SCHEDULING_JOB_ID},
            )
            return None

    async def run_reminders(self) -> Optional[ReminderPassResult]:
        """Interval job: remind employees of evaluations due soon."""
        try:
            return await self.reminder_service.send_upcoming_reminders()
        except Exception as e:
            scheduler_logger.error(
                f"Evaluation reminder pass failed: {e}",
                exception=e,
                error_context={"job_id": REMINDER_JOB_ID},
            )
            return None

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status["jobs"] = [
            {
                "id": job.id,
                "next_run_time": (
                    job.next_run_time.isoformat()
                    if getattr(job, "next_run_time", None)
                    else None
                ),
            }
            for job in self.scheduler.get_jobs()
        ]
        return status
