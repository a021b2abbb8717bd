# backend/ldgrowth/routers/evaluation_routers.py
"""
Evaluation scheduling HTTP endpoints.

Role: On-demand scheduling and readiness checks
Responsibilities: Trigger a store's scheduling run, report whether a store
can be auto-scheduled
Interactions: Uses EvaluationSchedulerService and SettingsService
"""

from fastapi import APIRouter

from ..dependencies import SchedulerServiceDep, SettingsServiceDep
from ..enums import LogEmoji, LoggerName, LogSource
from ..services.logger import get_service_logger
from ..utils.response_helpers import ResponseFormatter
from ..utils.router_helpers import handle_exceptions

logger = get_service_logger(LoggerName.API, LogSource.API)

router = APIRouter(tags=["evaluations"])


@router.post("/stores/{store_id}/evaluations/schedule")
@handle_exceptions("schedule evaluations")
async def schedule_store_evaluations(
    store_id: int, scheduler_service: SchedulerServiceDep
):
    """Run automatic scheduling for one store now"""
    logger.info(
        f"On-demand scheduling requested for store {store_id}",
        emoji=LogEmoji.PROCESSING,
    )
    result = await scheduler_service.schedule_store_evaluations(store_id)
    return ResponseFormatter.success(
        f"Scheduled {result.scheduled} of {result.total} employees",
        data=result.model_dump(mode="json"),
    )


@router.get("/stores/{store_id}/evaluations/scheduling-readiness")
@handle_exceptions("check scheduling readiness")
async def get_scheduling_readiness(store_id: int, settings_service: SettingsServiceDep):
    """Report whether a store can be auto-scheduled and what is misconfigured"""
    validation = await settings_service.validate_auto_scheduling(store_id)
    return ResponseFormatter.success(
        "Scheduling readiness retrieved successfully",
        data=validation.model_dump(mode="json"),
    )
