#!/usr/bin/env python3
"""
Tests for SchedulerWorker job registration, lifecycle and failure containment.
"""

from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ldgrowth.constants import DAILY_SCHEDULING_JOB_ID, REMINDER_JOB_ID
from ldgrowth.exceptions import SchedulingError
from ldgrowth.models.scheduling_model import (
    AllStoresSchedulingResult,
    ReminderPassResult,
)
from ldgrowth.workers.scheduler_worker import SchedulerWorker


@pytest.fixture
def scheduler_service():
    service = Mock()
    service.run_scheduling = AsyncMock(
        return_value=AllStoresSchedulingResult(stores_processed=2, scheduled=5)
    )
    return service


@pytest.fixture
def reminder_service():
    service = Mock()
    service.send_upcoming_reminders = AsyncMock(
        return_value=ReminderPassResult(checked=3, reminded=3)
    )
    return service


@pytest.fixture
def worker(scheduler_service, reminder_service):
    # Never started, so jobs stay pending and no event loop is needed
    return SchedulerWorker(
        scheduler_service, reminder_service, AsyncIOScheduler(timezone="UTC")
    )


@pytest.mark.unit
class TestJobRegistration:
    def test_registers_daily_and_reminder_jobs(self, worker):
        worker.register_jobs()

        daily = worker.scheduler.get_job(DAILY_SCHEDULING_JOB_ID)
        reminders = worker.scheduler.get_job(REMINDER_JOB_ID)
        assert isinstance(daily.trigger, CronTrigger)
        assert isinstance(reminders.trigger, IntervalTrigger)
        assert daily.max_instances == 1
        assert daily.coalesce is True

    def test_status_lists_pending_jobs(self, worker):
        worker.register_jobs()

        status = worker.get_status()

        assert status["name"] == "SchedulerWorker"
        assert status["running"] is False
        assert {job["id"] for job in status["jobs"]} == {
            DAILY_SCHEDULING_JOB_ID,
            REMINDER_JOB_ID,
        }


@pytest.mark.unit
class TestJobs:
    @pytest.mark.asyncio
    async def test_daily_scheduling_returns_result(self, worker):
        result = await worker.run_daily_scheduling()

        assert result.scheduled == 5

    @pytest.mark.asyncio
    async def test_daily_scheduling_failure_is_contained(
        self, worker, scheduler_service
    ):
        scheduler_service.run_scheduling = AsyncMock(
            side_effect=SchedulingError("boom")
        )

        assert await worker.run_daily_scheduling() is None

    @pytest.mark.asyncio
    async def test_reminder_pass_failure_is_contained(self, worker, reminder_service):
        reminder_service.send_upcoming_reminders = AsyncMock(
            side_effect=RuntimeError("boom")
        )

        assert await worker.run_reminders() is None

    @pytest.mark.asyncio
    async def test_reminder_pass_returns_result(self, worker):
        result = await worker.run_reminders()

        assert result.reminded == 3


@pytest.mark.unit
class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, scheduler_service, reminder_service):
        scheduler = MagicMock()
        scheduler.running = False
        scheduler.get_jobs.return_value = []
        worker = SchedulerWorker(scheduler_service, reminder_service, scheduler)

        await worker.start()

        assert worker.running is True
        assert scheduler.add_job.call_count == 2
        scheduler.start.assert_called_once()

        scheduler.running = True
        await worker.stop()

        assert worker.running is False
        scheduler.shutdown.assert_called_once_with(wait=False)

    @pytest.mark.asyncio
    async def test_stop_when_never_started(self, scheduler_service, reminder_service):
        scheduler = MagicMock()
        scheduler.running = False
        worker = SchedulerWorker(scheduler_service, reminder_service, scheduler)

        await worker.stop()

        scheduler.shutdown.assert_not_called()
