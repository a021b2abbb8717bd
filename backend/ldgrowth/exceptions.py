# backend/ldgrowth/exceptions.py
"""
Custom exceptions for LD Growth.

Centralized location for all custom exception classes to avoid
duplicating exception definitions across modules. Every application error
carries an ErrorCategory and a structured context (store/employee ids,
function name) so that logs can be filtered by domain.
"""

from typing import Any, Dict, Optional

from .enums import ErrorCategory, LoggerName, LogSource


class LDGrowthError(Exception):
    """Base exception for all LD Growth-specific errors."""

    default_category = ErrorCategory.SYSTEM

    def __init__(
        self,
        message: str,
        category: Optional[ErrorCategory] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "category": self.category.value,
            "context": self.context,
        }


class SchedulingError(LDGrowthError):
    """Business-rule violation while scheduling evaluations."""

    default_category = ErrorCategory.SCHEDULING


class SchedulingPreconditionError(SchedulingError):
    """A store is missing something scheduling cannot run without."""

    default_category = ErrorCategory.SETTINGS


class SchedulingInProgressError(SchedulingError):
    """Another scheduling run already holds the store."""

    pass


class SettingsValidationError(LDGrowthError):
    """Malformed scheduling settings that could not be repaired."""

    default_category = ErrorCategory.VALIDATION


class TimezoneOperationError(LDGrowthError):
    """Timezone arithmetic failed."""

    default_category = ErrorCategory.SYSTEM


class NotificationError(LDGrowthError):
    """Custom exception for notification delivery failures."""

    pass


class EmailDeliveryError(NotificationError):
    """Custom exception for SMTP failures."""

    pass


def handle_error(
    error: BaseException,
    category: ErrorCategory = ErrorCategory.SYSTEM,
    context: Optional[Dict[str, Any]] = None,
) -> LDGrowthError:
    """
    Convert any exception into a categorized LDGrowthError and log it.

    An LDGrowthError passes through with the extra context merged in. A
    database operation error is always categorized as ``database``.

    Returns:
        The categorized error, for the caller to raise
    """
    from .database.exceptions import DatabaseOperationError
    from .services.logger import get_service_logger

    context = dict(context or {})

    if isinstance(error, LDGrowthError):
        error.context = {**context, **error.context}
        categorized = error
    else:
        if isinstance(error, DatabaseOperationError):
            category = ErrorCategory.DATABASE
            if error.operation:
                context.setdefault("operation", error.operation)
        categorized = LDGrowthError(str(error), category=category, context=context)
        categorized.__cause__ = error

    get_service_logger(LoggerName.ERROR_HANDLER, LogSource.SYSTEM).error(
        f"[{categorized.category.value}] {categorized.message}",
        exception=error,
        error_context=categorized.context,
    )
    return categorized
