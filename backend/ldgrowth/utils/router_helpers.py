# backend/ldgrowth/utils/router_helpers.py
"""
Router Helper Functions

Common decorators for FastAPI routers: standardized error handling that maps
application errors onto HTTP status codes.
"""

from functools import wraps
from typing import Callable

from fastapi import HTTPException

from ..database.exceptions import DatabaseOperationError
from ..enums import LoggerName, LogSource
from ..exceptions import (
    LDGrowthError,
    SchedulingInProgressError,
    SchedulingPreconditionError,
    SettingsValidationError,
)
from ..services.logger import get_service_logger
from .response_helpers import ResponseFormatter

logger = get_service_logger(LoggerName.API, LogSource.API)


def handle_exceptions(operation_name: str):
    """
    Decorator for standardized exception handling in router endpoints.

    SchedulingInProgressError maps to 409, precondition and validation
    failures to 422, everything else to 500.

    Args:
        operation_name: Human-readable description of the operation for error messages

    Usage:
        @handle_exceptions("schedule evaluations")
        async def schedule_store(...):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                # Re-raise HTTP exceptions as-is
                raise
            except SchedulingInProgressError as e:
                logger.warning(f"Conflict while trying to {operation_name}: {e}")
                raise HTTPException(
                    status_code=409,
                    detail=ResponseFormatter.error(
                        e.message, error_code="scheduling_in_progress", details=e.context
                    ),
                )
            except (SchedulingPreconditionError, SettingsValidationError) as e:
                logger.warning(f"Cannot {operation_name}: {e}")
                raise HTTPException(
                    status_code=422,
                    detail=ResponseFormatter.error(
                        e.message, error_code=e.category.value, details=e.context
                    ),
                )
            except (LDGrowthError, DatabaseOperationError) as e:
                logger.error(f"Error trying to {operation_name}: {e}", exception=e)
                raise HTTPException(
                    status_code=500, detail=f"Failed to {operation_name}"
                )
            except Exception as e:
                logger.error(f"Unexpected error trying to {operation_name}: {e}", exception=e)
                raise HTTPException(
                    status_code=500, detail=f"Failed to {operation_name}"
                )

        return wrapper

    return decorator
