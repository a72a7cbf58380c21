"""
Unit tests for the with_retry decorator.
"""

import pytest
from unittest.mock import AsyncMock, patch

from sqlalchemy.exc import OperationalError

from utils.retry import with_retry


def transient():
    return OperationalError("SELECT", {}, Exception("database is locked"))


class TestWithRetry:

    @pytest.mark.asyncio
    async def test_success_first_attempt(self):
        func = AsyncMock(return_value="ok")

        result = await with_retry(max_retries=3, delay_base=0)(func)()

        assert result == "ok"
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_recovers_after_transient_error(self):
        func = AsyncMock(side_effect=[transient(), "ok"])

        result = await with_retry(max_retries=3, delay_base=0)(func)()

        assert result == "ok"
        assert func.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        func = AsyncMock(side_effect=transient())

        with pytest.raises(OperationalError):
            await with_retry(max_retries=2, delay_base=0)(func)()

        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_non_transient_error_not_retried(self):
        func = AsyncMock(side_effect=ValueError("bad input"))

        with pytest.raises(ValueError):
            await with_retry(max_retries=3, delay_base=0)(func)()

        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_custom_retry_on(self):
        func = AsyncMock(side_effect=[OSError("reset"), "ok"])

        result = await with_retry(max_retries=1, delay_base=0, retry_on=(OSError,))(func)()

        assert result == "ok"

    @pytest.mark.asyncio
    async def test_exponential_backoff(self):
        func = AsyncMock(side_effect=[transient(), transient(), "ok"])

        with patch("utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await with_retry(max_retries=3, delay_base=1.0)(func)()

        delays = [call.args[0] for call in sleep.await_args_list]
        assert delays == pytest.approx([1.0, 2.1])
