"""
Debounced re-query: only the last trigger inside the quiet window runs.

Used by clients of the listing API to coalesce search keystrokes before
re-requesting `/api/v1/products`.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

from storefront.config import Config

logger = logging.getLogger(__name__)


class Debouncer:
    """Coalesce bursts of calls into one delayed callback.

    Each trigger() cancels the pending task and schedules a new one, so the
    callback runs once, with the latest arguments, after `delay` seconds of
    quiet. Must be used from inside a running event loop.
    """

    def __init__(self, callback: Callable[..., Awaitable[Any] | Any], delay: float | None = None):
        self.callback = callback
        self.delay = Config.SEARCH_DEBOUNCE_SECONDS if delay is None else delay
        self._task: asyncio.Task | None = None
        self._pending: tuple[tuple, dict] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self, *args, **kwargs) -> asyncio.Task:
        self.cancel()
        self._pending = (args, kwargs)
        self._task = asyncio.get_running_loop().create_task(self._run_later())
        return self._task

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None
        self._pending = None

    async def flush(self) -> Any:
        """Run the pending callback now instead of waiting out the window."""
        if not self.pending or self._pending is None:
            return None
        args, kwargs = self._pending
        self.cancel()
        return await self._invoke(args, kwargs)

    async def _run_later(self) -> Any:
        await asyncio.sleep(self.delay)
        args, kwargs = self._pending
        self._pending = None
        try:
            return await self._invoke(args, kwargs)
        except Exception:
            # A triggered task usually has no awaiter
            logger.exception("Debounced callback failed")
            return None

    async def _invoke(self, args: tuple, kwargs: dict) -> Any:
        result = self.callback(*args, **kwargs)
        if asyncio.iscoroutine(result):
            result = await result
        return result
