#!/usr/bin/env python3
"""
Tests for the linear-backoff retry helper.
"""

from unittest.mock import AsyncMock, call, patch

import psycopg
import pytest

from ldgrowth.database.exceptions import EvaluationOperationError
from ldgrowth.utils.retry import RetryPolicy, with_retry


@pytest.fixture
def mock_sleep():
    with patch("ldgrowth.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


@pytest.mark.unit
class TestWithRetry:
    @pytest.mark.asyncio
    async def test_returns_first_success(self, mock_sleep):
        operation = AsyncMock(return_value=42)

        assert await with_retry(operation, RetryPolicy(), operation_name="op") == 42
        operation.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, mock_sleep):
        operation = AsyncMock(
            side_effect=[
                psycopg.OperationalError("connection reset"),
                EvaluationOperationError("pool timeout", operation="op"),
                "ok",
            ]
        )

        result = await with_retry(
            operation, RetryPolicy(max_attempts=3, delay_seconds=0.5)
        )

        assert result == "ok"
        assert operation.await_count == 3
        # Linear backoff: delay * attempt
        assert mock_sleep.await_args_list == [call(0.5), call(1.0)]

    @pytest.mark.asyncio
    async def test_raises_last_error_when_exhausted(self, mock_sleep):
        operation = AsyncMock(side_effect=ConnectionError("refused"))

        with pytest.raises(ConnectionError, match="refused"):
            await with_retry(operation, RetryPolicy(max_attempts=3, delay_seconds=0))

        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates_immediately(self, mock_sleep):
        operation = AsyncMock(side_effect=ValueError("bad input"))

        with pytest.raises(ValueError):
            await with_retry(operation, RetryPolicy(max_attempts=5))

        operation.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fresh_awaitable_per_attempt(self, mock_sleep):
        attempts = []

        async def flaky():
            attempts.append(len(attempts))
            if len(attempts) < 2:
                raise TimeoutError("slow")
            return "done"

        assert await with_retry(lambda: flaky(), RetryPolicy(delay_seconds=0)) == "done"
        assert attempts == [0, 1]

    def test_policy_from_settings(self):
        policy = RetryPolicy.from_settings()

        assert policy.max_attempts == 3
        assert policy.delay_seconds == 1.0
