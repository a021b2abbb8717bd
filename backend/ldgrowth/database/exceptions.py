# backend/ldgrowth/database/exceptions.py
"""
Errors raised by the ``*_operations`` modules.

The data layer never logs. Each operation wraps driver failures
(``psycopg.Error``) and row-mapping failures (``KeyError``/``ValueError``)
in the error class for its table, naming the operation that failed::

    except (psycopg.Error, KeyError, ValueError) as e:
        raise EvaluationOperationError(
            "Failed to create evaluation", operation="create_evaluation"
        ) from e

Services log and decide whether to retry, skip the employee, or re-raise.
Every class here is retryable under the default ``RetryPolicy``.
"""

from typing import Any, Dict, Optional


class DatabaseOperationError(Exception):
    """
    A query or row mapping failed.

    ``operation`` names the failing ``*_operations`` method and is prefixed
    to the message; ``details`` carries identifiers for the error log.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.details = details or {}

    def __str__(self):
        message = super().__str__()
        return f"{self.operation}: {message}" if self.operation else message


class StoreOperationError(DatabaseOperationError):
    """stores table."""


class EmployeeOperationError(DatabaseOperationError):
    """users rows of active employees and their evaluators."""


class EvaluationOperationError(DatabaseOperationError):
    """evaluations, including the scheduling_key conflict insert."""


class SettingsOperationError(DatabaseOperationError):
    """settings rows holding the evaluations JSON document."""


class TemplateOperationError(DatabaseOperationError):
    """templates table."""


class NotificationOperationError(DatabaseOperationError):
    """notifications table."""


class SchedulingLockOperationError(DatabaseOperationError):
    """The per-store advisory lock query failed."""
