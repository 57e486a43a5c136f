import asyncio
import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy.exc import OperationalError

from storefront.errors import ErrorType
from storefront.exceptions import AppException
from storefront.services.retry import store_call


@pytest.fixture(autouse=True)
def fast_config():
    with patch("storefront.services.retry.Config") as mock_config:
        mock_config.STORE_RETRIES = 3
        mock_config.STORE_RETRY_DELAY = 0
        mock_config.STORE_TIMEOUT_SECONDS = 0.05
        yield mock_config


def db_error():
    return OperationalError("SELECT 1", {}, Exception("connection refused"))


class TestStoreCall:
    """Tests for timeout and retry around store reads."""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        """Test result passes through untouched."""
        fetch = AsyncMock(return_value=[1, 2])
        assert await store_call("fetch")(fetch)() == [1, 2]
        assert fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        """Test transient failures are retried."""
        fetch = AsyncMock(side_effect=[db_error(), db_error(), ["ok"]])
        assert await store_call("fetch")(fetch)() == ["ok"]
        assert fetch.await_count == 3

    @pytest.mark.asyncio
    async def test_exhausted_raises_store_unavailable(self):
        """Test persistent failure becomes STORE_UNAVAILABLE."""
        fetch = AsyncMock(side_effect=db_error())
        with pytest.raises(AppException) as exc_info:
            await store_call("list brands")(fetch)()
        assert exc_info.value.error_type == ErrorType.STORE_UNAVAILABLE
        assert "list brands" in exc_info.value.message
        assert fetch.await_count == 3

    @pytest.mark.asyncio
    async def test_timeout_is_retried(self):
        """Test a hung call is cut off and counted as a failure."""
        calls = 0

        async def slow():
            nonlocal calls
            calls += 1
            await asyncio.sleep(1)

        with pytest.raises(AppException) as exc_info:
            await store_call("fetch")(slow)()
        assert exc_info.value.error_type == ErrorType.STORE_UNAVAILABLE
        assert calls == 3

    @pytest.mark.asyncio
    async def test_app_exception_not_retried(self):
        """Test NOT_FOUND passes straight through."""
        fetch = AsyncMock(side_effect=AppException(ErrorType.NOT_FOUND, "missing"))
        with pytest.raises(AppException) as exc_info:
            await store_call("fetch")(fetch)()
        assert exc_info.value.error_type == ErrorType.NOT_FOUND
        assert fetch.await_count == 1
