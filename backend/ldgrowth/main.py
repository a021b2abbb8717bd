# backend/ldgrowth/main.py
"""
HTTP entry point for LD Growth evaluation scheduling.

Only request handling lives here. The daily scheduling run and the reminder
pass belong to the ``worker.py`` process; the API triggers runs on demand
(a settings update that enables auto-scheduling, or the explicit schedule
endpoint).
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import async_db
from .enums import LogEmoji, LoggerName, LogSource
from .routers import evaluation_routers, settings_routers
from .services.logger import configure_logging, get_service_logger

API_VERSION = "1.0.0"

logger = get_service_logger(LoggerName.SYSTEM, LogSource.SYSTEM)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Open the database pool for the lifetime of the app"""
    configure_logging(settings.log_level, settings.log_file)
    logger.info(
        "API starting",
        extra_context={
            "operation": "api_startup",
            "environment": settings.environment,
            "host": settings.api_host,
            "port": settings.api_port,
        },
        emoji=LogEmoji.STARTUP,
    )

    await async_db.initialize()
    try:
        yield
    finally:
        await async_db.close()
        logger.info(
            "API stopped, database pool closed",
            extra_context={"operation": "api_shutdown"},
            emoji=LogEmoji.SHUTDOWN,
        )


app = FastAPI(
    title="LD Growth Scheduling API",
    description="Automatic performance evaluation scheduling",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(settings_routers.router, prefix="/api")
app.include_router(evaluation_routers.router, prefix="/api")


@app.get("/health")
async def health_check():
    database = await async_db.health_check()
    return {
        "status": database.get("status", "unknown"),
        "database": database,
        "version": API_VERSION,
    }


if __name__ == "__main__":
    uvicorn.run(
        "ldgrowth.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.value.lower(),
    )
