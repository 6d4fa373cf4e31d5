# wandernav/core/search/screen.py
from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING, Callable, Optional, Union, assert_never

from wandernav.core.search.debouncer import QueryDebouncer
from wandernav.core.search.domain import (
    SLOTS,
    HazardResult,
    InputContext,
    LocationPoint,
    NavigationIntent,
    PlaceResult,
    RouteIntent,
    SearchResultItem,
    SearchTab,
    UserResult,
)
from wandernav.core.search.errors import LocationError, SearchScreenError, ValidationError
from wandernav.core.search.orchestrator import SearchOrchestrator
from wandernav.core.search.ports import AlertPresenter, Navigator, SearchBackend
from wandernav.core.search.selection import PointSelectionStateMachine
from wandernav.infra.logging_config import LogContext, get_logger

if TYPE_CHECKING:
    from wandernav.infra.location import LocationResolver

logger = get_logger(__name__)


class SearchScreenController:
    """
    One search screen: tabs, three inputs, results and the two slots.

    Owns its own debouncer, orchestrator and selection state machine;
    create one per screen and ``close()`` it when the screen goes away.
    Location and validation problems are reported through ``alerts``,
    never raised to the caller.
    """

    def __init__(
        self,
        *,
        client: SearchBackend,
        navigator: Navigator,
        alerts: AlertPresenter,
        resolver: Optional[LocationResolver] = None,
        debounce_ms: Optional[int] = None,
        min_query_length: Optional[int] = None,
        fallback_enabled: Optional[bool] = None,
        today: Callable[[], date] = date.today,
        screen_id: Optional[str] = None,
    ) -> None:
        self.screen_id = screen_id or uuid.uuid4().hex[:8]
        self.navigator = navigator
        self.alerts = alerts
        self.tab = SearchTab.PLACES
        self.general_query = ""
        self._log = LogContext(logger, screen_id=self.screen_id)

        self.selection = PointSelectionStateMachine(
            navigator, resolver, screen_id=self.screen_id,
        )
        self.orchestrator = SearchOrchestrator(
            client,
            fallback_enabled=fallback_enabled,
            active_context=lambda: self.selection.focus,
            today=today,
            screen_id=self.screen_id,
        )
        self.debouncer = QueryDebouncer(
            self._run_search,
            on_clear=self._on_short_query,
            delay_ms=debounce_ms,
            min_length=min_query_length,
        )

    # ------------------------------------------------------------------
    # Read-only view state
    # ------------------------------------------------------------------

    @property
    def active_context(self) -> InputContext:
        return self.selection.focus

    @property
    def results(self) -> list[SearchResultItem]:
        return self.orchestrator.results

    @property
    def is_loading(self) -> bool:
        return self.orchestrator.is_loading

    @property
    def show_no_results(self) -> bool:
        return self.orchestrator.show_no_results

    def query_for(self, context: InputContext) -> str:
        if context is InputContext.GENERAL:
            return self.general_query
        return self.selection.slot(context).query_text

    # ------------------------------------------------------------------
    # Screen lifecycle
    # ------------------------------------------------------------------

    async def activate(self) -> None:
        """Screen gained focus: resolve the device location if needed, pick focus."""
        if self.selection.should_resolve_start(self.tab):
            try:
                await self.selection.resolve_start_location()
            except LocationError as exc:
                self._alert(exc)
        self.selection.focus_for(self.tab)
        self._refresh_search()

    async def change_tab(self, tab: SearchTab) -> None:
        tab = SearchTab(tab)
        self._log.info("Switching to tab '%s'", tab.value)
        self.tab = tab
        self.debouncer.cancel_all()
        self.orchestrator.reset()
        self.selection.reset_destination()
        self.general_query = ""
        await self.activate()

    def close(self) -> None:
        self.debouncer.cancel_all()
        self.orchestrator.invalidate()

    async def use_current_location(self) -> Optional[LocationPoint]:
        """Explicit user request to (re)use the device location as start."""
        self.debouncer.cancel(InputContext.START)
        self.orchestrator.invalidate()
        self.orchestrator.clear_results()
        try:
            return await self.selection.resolve_start_location(user_initiated=True)
        except LocationError as exc:
            self._alert(exc)
            return None

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------

    def focus(self, context: InputContext) -> None:
        context = InputContext(context)
        self._check_context(context)
        self.selection.focus = context
        self._refresh_search()

    def on_text_change(self, context: InputContext, text: str) -> None:
        context = InputContext(context)
        self._check_context(context)
        if context is InputContext.GENERAL:
            self.general_query = text
        else:
            self.selection.edit_text(context, text)
        self.selection.focus = context
        self._refresh_search()

    def clear_input(self, context: InputContext) -> None:
        context = InputContext(context)
        self._check_context(context)
        self.debouncer.cancel(context)
        self.orchestrator.invalidate()
        self.orchestrator.clear_results()
        self.orchestrator.has_searched_once = True
        if context is InputContext.GENERAL:
            self.general_query = ""
            self.selection.focus = InputContext.GENERAL
        else:
            self.selection.clear(context)

    def select_result(self, item: SearchResultItem) -> Union[LocationPoint, NavigationIntent, None]:
        """
        Handle a tap on a result row.

        Places fill the focused slot; users and hazards open their detail
        screen through the navigator.
        """
        if isinstance(item, PlaceResult):
            return self._select_place(item)
        elif isinstance(item, UserResult):
            intent = NavigationIntent(kind="user", target_id=item.id)
        elif isinstance(item, HazardResult):
            intent = NavigationIntent(kind="hazard", target_id=item.id)
        else:
            assert_never(item)

        self._log.info("Opening %s", intent.path)
        self.navigator.navigate(intent)
        return intent

    def request_route(self) -> Optional[RouteIntent]:
        try:
            return self.selection.request_route()
        except ValidationError as exc:
            self._alert(exc)
            if exc.focus is not None:
                self.selection.focus = exc.focus
            return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_context(self, context: InputContext) -> None:
        on_places = self.tab is SearchTab.PLACES
        if on_places != (context in SLOTS):
            raise ValueError(f"Input '{context.value}' is not shown on tab '{self.tab.value}'")

    def _select_place(self, place: PlaceResult) -> Optional[LocationPoint]:
        slot = self.selection.focus
        if self.tab is not SearchTab.PLACES or slot not in SLOTS:
            return None
        try:
            point = self.selection.select_place(slot, place)
        except ValidationError as exc:
            self._alert(exc)
            return None

        self.debouncer.cancel(slot)
        self.orchestrator.invalidate()
        self.orchestrator.clear_results()
        return point

    def _refresh_search(self) -> None:
        context = self.active_context
        text = self.query_for(context)
        if self.orchestrator.is_rejected(text, context, self.selection.start.has_point):
            self.debouncer.cancel(context)
            self.orchestrator.clear_results()
            return
        if self.debouncer.on_text_change(context, text):
            self.orchestrator.mark_pending()

    def _on_short_query(self, context: InputContext) -> None:
        if context is self.active_context:
            self.orchestrator.clear_results()

    async def _run_search(self, context: InputContext, text: str) -> None:
        near = None
        if self.tab is SearchTab.PLACES and context is InputContext.DESTINATION:
            near = self.selection.start.selected_point
        await self.orchestrator.perform_search(
            text,
            self.tab,
            context,
            start_point_selected=self.selection.start.has_point,
            near=near,
        )

    def _alert(self, exc: SearchScreenError) -> None:
        self._log.info("Alert: %s - %s", exc.title, exc.message)
        self.alerts.alert(exc.title, exc.message)
