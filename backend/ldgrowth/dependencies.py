# backend/ldgrowth/dependencies.py
"""
Dependency providers for FastAPI routes.

Services are cheap to build (they only hold the shared database instance
and a retry policy), so each request gets fresh ones.
"""

from typing import Annotated

from fastapi import Depends

from .database import async_db
from .database.core import AsyncDatabase
from .services.scheduling.evaluation_scheduler_service import (
    EvaluationSchedulerService,
)
from .services.settings_service import SettingsService
from .utils.retry import RetryPolicy


async def get_async_database() -> AsyncDatabase:
    """Get async database instance."""
    return async_db


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy.from_settings()


async def get_settings_service(
    db: Annotated[AsyncDatabase, Depends(get_async_database)],
    retry_policy: Annotated[RetryPolicy, Depends(get_retry_policy)],
) -> SettingsService:
    return SettingsService(db, retry_policy)


async def get_scheduler_service(
    db: Annotated[AsyncDatabase, Depends(get_async_database)],
    retry_policy: Annotated[RetryPolicy, Depends(get_retry_policy)],
) -> EvaluationSchedulerService:
    return EvaluationSchedulerService(db, retry_policy)


AsyncDatabaseDep = Annotated[AsyncDatabase, Depends(get_async_database)]
SettingsServiceDep = Annotated[SettingsService, Depends(get_settings_service)]
SchedulerServiceDep = Annotated[
    EvaluationSchedulerService, Depends(get_scheduler_service)
]
