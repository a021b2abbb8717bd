# backend/ldgrowth/utils/retry.py
"""
Retry helper used by every persistence and email call of the scheduling
subsystem.

Usage:
    employees = await with_retry(
        lambda: self.employee_ops.get_active_employees(store_id),
        operation_name="get_active_employees",
    )
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

import psycopg

from ..config import settings
from ..database.exceptions import DatabaseOperationError
from ..enums import LogEmoji, LoggerName, LogSource
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.RETRY, LogSource.SYSTEM)

T = TypeVar("T")

RETRYABLE_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    DatabaseOperationError,
    psycopg.Error,
    ConnectionError,
    TimeoutError,
    OSError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """Linear backoff: the n-th failed attempt waits ``delay_seconds * n``."""

    max_attempts: int = 3
    delay_seconds: float = 1.0
    retry_on: Tuple[Type[BaseException], ...] = field(
        default=RETRYABLE_EXCEPTIONS
    )

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry_max_attempts,
            delay_seconds=settings.retry_delay_seconds,
        )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    operation_name: str = "",
) -> T:
    """
    Await ``operation()`` until it succeeds or the policy is exhausted.

    Args:
        operation: Zero-argument factory returning a fresh awaitable per attempt
        policy: Retry policy (defaults to the configured one)
        operation_name: Label used in log messages

    Returns:
        The operation's result

    Raises:
        The last error once every attempt has failed, or immediately any
        error the policy does not consider retryable
    """
    policy = policy or RetryPolicy.from_settings()
    name = operation_name or getattr(operation, "__name__", "operation")

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except policy.retry_on as e:
            if attempt >= policy.max_attempts:
                logger.error(
                    f"{name} failed after {policy.max_attempts} attempts: {e}",
                    error_context={"operation": name, "attempts": attempt},
                )
                raise

            delay = policy.delay_seconds * attempt
            logger.warning(
                f"{name} failed (attempt {attempt}/{policy.max_attempts}), "
                f"retrying in {delay:.1f}s: {e}",
                extra_context={"operation": name, "attempt": attempt},
                emoji=LogEmoji.RETRY,
            )
            await asyncio.sleep(delay)

    raise RuntimeError(f"{name}: retry policy allows no attempts")
