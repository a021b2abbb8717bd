"""
Centralized Logger Service Module.

A unified logging interface over loguru with type-safe names, sources and
emoji.

Usage:
    from ldgrowth.services.logger import get_service_logger
    from ldgrowth.enums import LogSource, LoggerName

    logger = get_service_logger(LoggerName.SCHEDULING_SERVICE, LogSource.SCHEDULER)
    logger.info("Scheduled 3 evaluations", extra_context={"store_id": 7})
"""

# Re-export commonly used enums for convenience
from ...enums import LogEmoji, LoggerName, LogLevel, LogSource
from .logger_service import configure_logging, get_service_logger

__all__ = [
    "configure_logging",
    "get_service_logger",
    # Enums
    "LogLevel",
    "LogSource",
    "LoggerName",
    "LogEmoji",
]
