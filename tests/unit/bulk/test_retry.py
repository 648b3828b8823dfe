"""Tests for the exponential backoff retry handler."""

from unittest.mock import AsyncMock

import pytest

from src.forcelogout.bulk.retry import RetryHandler
from src.forcelogout.exceptions import RemoteError


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class TestRetryHandler:
    """Test cases for RetryHandler."""

    @pytest.fixture
    def sleep(self):
        return RecordingSleep()

    @pytest.fixture
    def handler(self, sleep):
        return RetryHandler(max_attempts=3, base_delay=0.5, sleep=sleep)

    def test_calculate_delay_doubles_each_attempt(self, handler):
        assert handler.calculate_delay(0) == 0.5
        assert handler.calculate_delay(1) == 1.0
        assert handler.calculate_delay(2) == 2.0

    def test_calculate_delay_respects_max_delay(self):
        handler = RetryHandler(base_delay=10.0, max_delay=15.0)

        assert handler.calculate_delay(0) == 10.0
        assert handler.calculate_delay(1) == 15.0
        assert handler.calculate_delay(5) == 15.0

    def test_rejects_non_positive_attempts(self):
        with pytest.raises(ValueError):
            RetryHandler(max_attempts=0)

    @pytest.mark.asyncio
    async def test_success_on_first_attempt_does_not_sleep(self, handler, sleep):
        operation = AsyncMock(return_value="ok")

        result = await handler.execute_with_retry(operation, "user-1", flag=True)

        assert result == "ok"
        operation.assert_awaited_once_with("user-1", flag=True)
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_transient_failures_then_success(self, handler, sleep):
        operation = AsyncMock(
            side_effect=[RemoteError("unavailable"), RemoteError("unavailable"), "ok"]
        )

        result = await handler.execute_with_retry(operation)

        assert result == "ok"
        assert operation.await_count == 3
        assert sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_last_error(self, handler, sleep):
        errors = [RemoteError("first"), RemoteError("second"), RemoteError("third")]
        operation = AsyncMock(side_effect=errors)

        with pytest.raises(RemoteError) as exc_info:
            await handler.execute_with_retry(operation)

        assert exc_info.value is errors[-1]
        assert operation.await_count == 3
        # No delay after the final attempt.
        assert sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_non_remote_errors_are_retried_too(self, handler, sleep):
        operation = AsyncMock(side_effect=[ConnectionError("reset"), "ok"])

        assert await handler.execute_with_retry(operation) == "ok"
        assert sleep.delays == [0.5]

    @pytest.mark.asyncio
    async def test_single_attempt_never_sleeps(self, sleep):
        handler = RetryHandler(max_attempts=1, sleep=sleep)
        operation = AsyncMock(side_effect=RemoteError("boom"))

        with pytest.raises(RemoteError):
            await handler.execute_with_retry(operation)

        assert operation.await_count == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_final_error_type(self, handler, sleep):
        final = RemoteError("quota", code="QUOTA_EXCEEDED")
        operation = AsyncMock(side_effect=[ConnectionError("reset"), TimeoutError(), final])

        with pytest.raises(RemoteError) as exc_info:
            await handler.execute_with_retry(operation)

        assert exc_info.value is final
        assert sleep.delays == [0.5, 1.0]
