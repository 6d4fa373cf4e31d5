# wandernav/core/search/debouncer.py
"""
Per-input debouncing of search-as-you-type.

Each ``InputContext`` owns at most one live timer.  A text change cancels
that context's timer and starts a new one; other contexts are untouched.
Once a timer has fired, the search it started runs to completion; stale
results are dropped later by the orchestrator's sequence check, not by
cancelling the request.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

from wandernav.config import settings
from wandernav.core.search.domain import InputContext
from wandernav.infra.logging_config import get_logger

logger = get_logger(__name__)

SearchTrigger = Callable[[InputContext, str], Awaitable[Any]]


def _log_task_exception(task: asyncio.Task) -> None:
    """Callback: log unhandled exceptions from debounced searches."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "Debounced search %r failed: %s", task.get_name(), exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )


class QueryDebouncer:
    def __init__(
        self,
        trigger: SearchTrigger,
        *,
        on_clear: Optional[Callable[[InputContext], None]] = None,
        delay_ms: Optional[int] = None,
        min_length: Optional[int] = None,
    ) -> None:
        self.trigger = trigger
        self.on_clear = on_clear
        self.delay_ms = delay_ms if delay_ms is not None else settings.search_debounce_ms
        self.min_length = min_length if min_length is not None else settings.search_min_query_length
        self._timers: dict[InputContext, asyncio.Task] = {}
        self._running: set[asyncio.Task] = set()

    def on_text_change(self, context: InputContext, text: str) -> bool:
        """
        Reschedule the search for ``context``.

        Returns True when a timer was scheduled, False when the query is
        too short (results are cleared immediately instead).
        """
        self.cancel(context)

        if len(text.strip()) < self.min_length:
            if self.on_clear is not None:
                self.on_clear(context)
            return False

        task = asyncio.create_task(
            self._fire_after_delay(context, text),
            name=f"debounce:{context.value}",
        )
        task.add_done_callback(_log_task_exception)
        self._timers[context] = task
        return True

    def is_pending(self, context: InputContext) -> bool:
        return context in self._timers

    def cancel(self, context: InputContext) -> None:
        task = self._timers.pop(context, None)
        if task is not None:
            task.cancel()

    def cancel_all(self) -> None:
        for context in list(self._timers):
            self.cancel(context)

    async def join(self) -> None:
        """Wait for every pending timer and running search to settle."""
        tasks = [*self._timers.values(), *self._running]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _fire_after_delay(self, context: InputContext, text: str) -> None:
        await asyncio.sleep(self.delay_ms / 1000)

        current = asyncio.current_task()
        if self._timers.get(context) is current:
            del self._timers[context]
        self._running.add(current)
        try:
            await self.trigger(context, text)
        finally:
            self._running.discard(current)
