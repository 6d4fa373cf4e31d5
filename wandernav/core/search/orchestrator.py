# wandernav/core/search/orchestrator.py
"""
Search dispatch for the search screen.

``SearchOrchestrator.perform_search()`` runs one remote search, falls back
to the heuristic generator when the backend fails, and publishes the
normalized items as the screen's current results.

Concurrency rules (single event loop, no locks):

- At most one search is in flight.  A call that arrives while one is
  running is dropped, not queued, so the shown results can trail the
  input text until the next keystroke schedules another search.
- Every accepted search gets a fresh sequence number.  Its result is
  applied only if no newer sequence was issued in the meantime (tab
  change, cleared input) and its input is still the active one;
  otherwise it is discarded as superseded.
- The busy flag is held by ``_searching()`` and released on every exit
  path, including errors and cancellation.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date
from typing import Callable, Optional

from wandernav.config import settings
from wandernav.core.search.domain import (
    CURRENT_LOCATION_TEXT,
    InputContext,
    LocationPoint,
    PendingSearch,
    SearchResultItem,
    SearchTab,
)
from wandernav.core.search.errors import NetworkError
from wandernav.core.search.fallback import heuristic_results
from wandernav.core.search.ports import SearchBackend
from wandernav.core.search.results import normalize_results
from wandernav.infra.logging_config import LogContext, get_logger
from wandernav.infra.metrics import AppMetrics

logger = get_logger(__name__)


class SearchOrchestrator:
    def __init__(
        self,
        client: SearchBackend,
        *,
        fallback_enabled: Optional[bool] = None,
        active_context: Optional[Callable[[], InputContext]] = None,
        today: Callable[[], date] = date.today,
        screen_id: Optional[str] = None,
    ) -> None:
        self.client = client
        self.fallback_enabled = (
            settings.search_fallback_enabled if fallback_enabled is None else fallback_enabled
        )
        self._active_context = active_context
        self._today = today
        self._log = LogContext(logger, screen_id=screen_id)

        # Screen-facing state
        self.results: list[SearchResultItem] = []
        self.results_context: Optional[InputContext] = None
        self.is_loading = False
        self.show_no_results = False
        self.has_searched_once = False
        self.degraded = False

        self._busy = False
        self._sequence = 0

    @property
    def is_searching(self) -> bool:
        return self._busy

    @property
    def sequence(self) -> int:
        return self._sequence

    def invalidate(self) -> None:
        """Mark any in-flight search as superseded."""
        self._sequence += 1

    def clear_results(self) -> None:
        self.results = []
        self.results_context = None
        self.show_no_results = False
        self.degraded = False
        self.is_loading = self._busy

    def mark_pending(self) -> None:
        """A debounced search is scheduled; show the spinner meanwhile."""
        self.is_loading = True
        self.show_no_results = False

    def reset(self) -> None:
        """Tab change: drop results and forget that a search ever ran."""
        self.invalidate()
        self.clear_results()
        self.has_searched_once = False

    @staticmethod
    def is_rejected(query_text: str, context: InputContext, start_point_selected: bool) -> bool:
        """Queries that never reach the backend."""
        if not query_text.strip():
            return True
        return (
            context is InputContext.START
            and query_text == CURRENT_LOCATION_TEXT
            and start_point_selected
        )

    async def perform_search(
        self,
        query_text: str,
        tab: SearchTab,
        context: InputContext,
        *,
        start_point_selected: bool = False,
        near: Optional[LocationPoint] = None,
    ) -> list[SearchResultItem]:
        """
        Search ``query_text`` on ``tab`` for the input ``context``.

        Returns the applied items, or ``[]`` when the query was rejected,
        the call was dropped because another search is running, or the
        result was superseded before it arrived.
        """
        tab = SearchTab(tab)
        context = InputContext(context)

        if self._busy:
            self._log.debug(
                "Search for '%s' dropped: another search is in flight; "
                "results may trail the input until the next change", query_text,
            )
            AppMetrics.search_dropped_busy(context.value)
            return []

        if self.is_rejected(query_text, context, start_point_selected):
            self.clear_results()
            return []

        self._sequence += 1
        pending = PendingSearch(
            tab=tab, context=context, query_text=query_text, sequence=self._sequence,
        )
        log = self._log.bind(context=context.value, tab=tab.value, sequence=pending.sequence)
        log.info("Searching '%s'", query_text.strip())
        AppMetrics.search_started(tab.value, context.value)

        async with self._searching():
            self.show_no_results = False
            self.has_searched_once = True
            items, degraded = await self._fetch(pending, near, log)

        if not self._is_current(pending):
            log.debug("Discarding superseded results (latest sequence is %d)", self._sequence)
            AppMetrics.search_superseded(context.value)
            return []

        self.results = items
        self.results_context = context
        self.degraded = degraded
        self.show_no_results = not items and bool(query_text.strip())
        return items

    @asynccontextmanager
    async def _searching(self):
        self._busy = True
        self.is_loading = True
        try:
            yield
        finally:
            self._busy = False
            self.is_loading = False

    def _is_current(self, pending: PendingSearch) -> bool:
        if pending.sequence != self._sequence:
            return False
        if self._active_context is not None and self._active_context() is not pending.context:
            return False
        return True

    async def _fetch(
        self,
        pending: PendingSearch,
        near: Optional[LocationPoint],
        log: LogContext,
    ) -> tuple[list[SearchResultItem], bool]:
        query = pending.query_text.strip()
        with AppMetrics.track_search_time(pending.tab.value):
            try:
                raw = await self.client.search(query, pending.tab, near=near)
            except NetworkError as exc:
                log.warning("Search API error: %s", exc)
                if not self.fallback_enabled:
                    return [], True
                AppMetrics.search_fallback(pending.tab.value)
                items = heuristic_results(query, pending.tab)
                log.info("Serving %d fallback results", len(items))
                return items, True

        items = normalize_results(raw, pending.tab, today=self._today)
        log.debug("Search returned %d results", len(items))
        return items, False
