# backend/ldgrowth/routers/settings_routers.py
"""
Evaluation scheduling settings HTTP endpoints.

Role: Store-level scheduling configuration endpoints
Responsibilities: Read repaired settings, merge-update settings
Interactions: Uses SettingsService; an update that turns auto-scheduling on
runs the store immediately and embeds the outcome in the response
"""

from fastapi import APIRouter

from ..dependencies import SettingsServiceDep
from ..enums import LoggerName, LogSource
from ..models.settings_model import EvaluationSettingsUpdate
from ..services.logger import get_service_logger
from ..utils.response_helpers import ResponseFormatter
from ..utils.router_helpers import handle_exceptions

logger = get_service_logger(LoggerName.API, LogSource.API)

router = APIRouter(tags=["settings"])


@router.get("/stores/{store_id}/settings/evaluations")
@handle_exceptions("get evaluation settings")
async def get_evaluation_settings(store_id: int, settings_service: SettingsServiceDep):
    """Get a store's scheduling settings, repairing drift first"""
    scheduling_settings = await settings_service.get_scheduling_settings(store_id)
    return ResponseFormatter.success(
        "Evaluation settings retrieved successfully",
        data=scheduling_settings.model_dump(mode="json"),
    )


@router.put("/stores/{store_id}/settings/evaluations")
@handle_exceptions("update evaluation settings")
async def update_evaluation_settings(
    store_id: int,
    changes: EvaluationSettingsUpdate,
    settings_service: SettingsServiceDep,
):
    """Merge-update a store's scheduling settings"""
    result = await settings_service.update_evaluation_settings(store_id, changes)

    scheduling_results = result.get("scheduling_results")
    if scheduling_results and "error" in scheduling_results:
        logger.warning(
            f"Settings saved for store {store_id} but scheduling failed: "
            f"{scheduling_results['error']}"
        )

    return ResponseFormatter.success(
        "Evaluation settings updated successfully", data=result
    )
