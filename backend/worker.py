#!/usr/bin/env python3
"""
LD Growth scheduling worker.

Runs the SchedulerWorker in its own process, separate from the API server:
- daily automatic evaluation scheduling for every enabled store
- periodic reminders for evaluations due within the week

Shutdown is triggered by SIGINT/SIGTERM and closes the scheduler and the
database pool.
"""

import asyncio
import signal

from ldgrowth.config import settings
from ldgrowth.database import async_db
from ldgrowth.enums import LogEmoji, LoggerName, LogSource
from ldgrowth.services.logger import configure_logging, get_service_logger
from ldgrowth.services.reminder_service import ReminderService
from ldgrowth.services.scheduling import EvaluationSchedulerService
from ldgrowth.utils.retry import RetryPolicy
from ldgrowth.workers import SchedulerWorker

logger = get_service_logger(LoggerName.SYSTEM, LogSource.WORKER)


async def main():
    """
    Worker lifecycle:
    1. Configure logging and open the database pool
    2. Start the SchedulerWorker and wait for a shutdown signal
    3. Stop the worker and close the pool
    """
    configure_logging(settings.log_level, settings.log_file)
    logger.info(
        "Starting scheduling worker",
        extra_context={
            "environment": settings.environment,
            "cron": f"{settings.scheduling_cron_hour:02d}:{settings.scheduling_cron_minute:02d} UTC",
            "reminder_interval_hours": settings.reminder_interval_hours,
        },
        emoji=LogEmoji.STARTUP,
    )

    await async_db.initialize()

    retry_policy = RetryPolicy.from_settings()
    worker = SchedulerWorker(
        scheduler_service=EvaluationSchedulerService(async_db, retry_policy),
        reminder_service=ReminderService(async_db, retry_policy=retry_policy),
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await worker.start()
        await stop_event.wait()
        logger.info("Shutdown signal received", emoji=LogEmoji.SHUTDOWN)
    finally:
        await worker.stop()
        await async_db.close()
        logger.info("Scheduling worker stopped", emoji=LogEmoji.SHUTDOWN)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Worker interrupted by user")
