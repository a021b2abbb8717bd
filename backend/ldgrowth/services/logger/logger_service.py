"""
Centralized Logger Service for LD Growth.

Every service logs through a ServiceLogger obtained from get_service_logger().
Messages are emitted with loguru, bound with the logger name and source, and
prefixed with a LogEmoji. Structured context travels in loguru's ``extra``.

Architecture:
- Type-safe enum-based configuration
- Console sink always installed; rotating file sink when a log file is set
- Service code never touches loguru sinks directly
"""

import sys
from typing import Any, Dict, Optional

from loguru import logger

from ...enums import LogEmoji, LoggerName, LogLevel, LogSource

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[source]}</cyan>:<cyan>{extra[logger_name]}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[source]}:{extra[logger_name]} - {message} | {extra[context]}"
)

LOG_FILE_ROTATION = "10 MB"
LOG_FILE_RETENTION = "30 days"


def configure_logging(
    level: LogLevel = LogLevel.INFO, log_file: Optional[str] = None
) -> None:
    """
    Install the application's loguru sinks.

    Safe to call more than once; previously installed sinks are replaced.

    Args:
        level: Minimum level written to every sink
        log_file: Optional path for a rotating, compressed log file
    """
    logger.remove()
    logger.configure(
        extra={"source": LogSource.SYSTEM.value, "logger_name": "-", "context": {}}
    )
    logger.add(sys.stderr, level=level.value, format=CONSOLE_FORMAT, enqueue=False)

    if log_file:
        logger.add(
            log_file,
            level=level.value,
            format=FILE_FORMAT,
            rotation=LOG_FILE_ROTATION,
            retention=LOG_FILE_RETENTION,
            compression="gz",
            enqueue=True,
        )


def _emit(
    level: LogLevel,
    message: str,
    logger_name: LoggerName,
    source: LogSource,
    emoji: LogEmoji,
    context: Optional[Dict[str, Any]] = None,
    exception: Optional[BaseException] = None,
) -> None:
    bound = logger.bind(
        logger_name=logger_name.value,
        source=source.value,
        context=context or {},
    )
    if exception is not None:
        bound = bound.opt(exception=exception)
    bound.log(level.value, f"{emoji.value} {message}")


def get_service_logger(
    logger_name: LoggerName,
    source: LogSource = LogSource.SYSTEM,
    default_emoji: Optional[LogEmoji] = None,
):
    """
    Factory function to create a pre-configured logger for a specific service.

    Returns a logger with simplified methods that automatically include
    the correct source and logger_name parameters.

    Emoji priority system (highest to lowest):
    1. Direct: Emoji passed directly to log method call
    2. Instance-set: Default emoji set when creating the service logger
    3. Fallback: Default emoji based on log level (ERROR, WARNING, INFO, DEBUG)

    Args:
        logger_name: The logger name enum to use for all calls
        source: The log source enum to use for all calls (defaults to SYSTEM)
        default_emoji: Instance-level default emoji that overrides level-based fallbacks

    Returns:
        ServiceLogger instance with error, warning, info, debug methods

    Example:
        logger = get_service_logger(LoggerName.WORKLOAD_SERVICE)
        logger.warning("Window saturated")  # Uses LogEmoji.WARNING (fallback)

        email_logger = get_service_logger(LoggerName.EMAIL_SERVICE, default_emoji=LogEmoji.EMAIL)
        email_logger.info("Sent")  # Uses LogEmoji.EMAIL (instance-set)
        email_logger.error("Failed", emoji=LogEmoji.FAILED)  # Uses LogEmoji.FAILED (direct)
    """

    def _resolve_emoji(
        method_emoji: Optional[LogEmoji], fallback_emoji: LogEmoji
    ) -> LogEmoji:
        if method_emoji is not None:
            return method_emoji
        if default_emoji is not None:
            return default_emoji
        return fallback_emoji

    class ServiceLogger:
        name = logger_name

        @staticmethod
        def error(
            message: str,
            exception: Optional[BaseException] = None,
            error_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            **kwargs,
        ):
            """Log an error with emoji priority system."""
            _emit(
                LogLevel.ERROR,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, LogEmoji.ERROR),
                context=error_context,
                exception=exception,
            )

        @staticmethod
        def warning(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            **kwargs,
        ):
            """Log a warning with emoji priority system."""
            _emit(
                LogLevel.WARNING,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, LogEmoji.WARNING),
                context=extra_context,
            )

        @staticmethod
        def info(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            **kwargs,
        ):
            """Log an info message with emoji priority system."""
            _emit(
                LogLevel.INFO,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, LogEmoji.INFO),
                context=extra_context,
            )

        @staticmethod
        def debug(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            **kwargs,
        ):
            """Log a debug message with emoji priority system."""
            _emit(
                LogLevel.DEBUG,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, LogEmoji.DEBUG),
                context=extra_context,
            )

    return ServiceLogger()
