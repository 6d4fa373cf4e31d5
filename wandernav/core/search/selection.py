# wandernav/core/search/selection.py
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from wandernav.core.search.domain import (
    CURRENT_LOCATION_TEXT,
    SLOTS,
    InputContext,
    LocationPoint,
    PlaceResult,
    RouteIntent,
    SearchTab,
    SlotPhase,
    SlotState,
)
from wandernav.core.search.errors import LocationError, ValidationError
from wandernav.core.search.ports import Navigator
from wandernav.infra.logging_config import LogContext, get_logger
from wandernav.infra.metrics import AppMetrics

if TYPE_CHECKING:
    from wandernav.infra.location import LocationResolver

logger = get_logger(__name__)


class PointSelectionStateMachine:
    """
    Start / destination slots and the input focus.

    Phases per slot::

        EMPTY ──activate──▶ CURRENT_LOCATION_PENDING ──ok──▶ CURRENT_LOCATION_RESOLVED
                                      │ fail
                                      ▼
                                    EMPTY
        any ──edit diverging from point name──▶ MANUAL_TEXT_ENTERED (EMPTY if blank)
        MANUAL_TEXT_ENTERED ──pick place──▶ PLACE_SELECTED

    A slot only holds a point while its text equals the point's name.
    """

    def __init__(
        self,
        navigator: Navigator,
        resolver: Optional[LocationResolver] = None,
        *,
        screen_id: Optional[str] = None,
    ) -> None:
        self.navigator = navigator
        self.resolver = resolver
        self._log = LogContext(logger, screen_id=screen_id)
        self.slots: dict[InputContext, SlotState] = {
            InputContext.START: SlotState(query_text=CURRENT_LOCATION_TEXT),
            InputContext.DESTINATION: SlotState(),
        }
        self.focus: InputContext = InputContext.START

    @property
    def start(self) -> SlotState:
        return self.slots[InputContext.START]

    @property
    def destination(self) -> SlotState:
        return self.slots[InputContext.DESTINATION]

    def slot(self, name: InputContext) -> SlotState:
        if name not in SLOTS:
            raise ValueError(f"{name!r} is not a point-selection slot")
        return self.slots[name]

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def focus_for(self, tab: SearchTab) -> InputContext:
        """Pick the input to focus when the screen or a tab is shown."""
        if SearchTab(tab) is not SearchTab.PLACES:
            self.focus = InputContext.GENERAL
        elif not self.start.has_point:
            self.focus = InputContext.START
        else:
            self.focus = InputContext.DESTINATION
        return self.focus

    # ------------------------------------------------------------------
    # Current location
    # ------------------------------------------------------------------

    def should_resolve_start(self, tab: SearchTab) -> bool:
        start = self.start
        return (
            self.resolver is not None
            and SearchTab(tab) is SearchTab.PLACES
            and start.query_text == CURRENT_LOCATION_TEXT
            and not start.has_point
            and start.phase is SlotPhase.EMPTY
            and self.resolver.can_auto_resolve
        )

    async def resolve_start_location(self, *, user_initiated: bool = False) -> Optional[LocationPoint]:
        """
        Fill the start slot with the device location.

        Returns the point, or None if the user edited the start text while
        the lookup was running.

        Raises:
            LocationError: the slot is back to EMPTY with blank text and
                focus is on the start input; the caller alerts the user.
        """
        if self.resolver is None:
            raise RuntimeError("No location resolver configured")

        start = self.start
        start.query_text = CURRENT_LOCATION_TEXT
        start.selected_point = None
        start.phase = SlotPhase.CURRENT_LOCATION_PENDING

        try:
            point = await self.resolver.resolve_current_location(user_initiated=user_initiated)
        except LocationError as exc:
            self._log.info("Current location unavailable (%s), switching to manual entry", exc.reason)
            if start.phase is SlotPhase.CURRENT_LOCATION_PENDING:
                start.query_text = ""
                start.phase = SlotPhase.EMPTY
            self.focus = InputContext.START
            raise

        if start.phase is not SlotPhase.CURRENT_LOCATION_PENDING:
            self._log.debug("Start text edited during location lookup; dropping device point")
            return None

        start.selected_point = point
        start.phase = SlotPhase.CURRENT_LOCATION_RESOLVED
        if not self.destination.has_point:
            self.focus = InputContext.DESTINATION
        return point

    # ------------------------------------------------------------------
    # Text edits & selection
    # ------------------------------------------------------------------

    def edit_text(self, name: InputContext, text: str) -> SlotState:
        state = self.slot(name)
        if text == state.query_text:
            return state

        state.query_text = text
        if state.selected_point is not None:
            self._log.debug("Slot %s edited away from '%s'", name.value, state.selected_point.name)
        state.selected_point = None
        state.phase = SlotPhase.MANUAL_TEXT_ENTERED if text.strip() else SlotPhase.EMPTY
        return state

    def select_place(self, name: InputContext, place: PlaceResult) -> LocationPoint:
        """
        Put ``place`` into slot ``name``.  Choosing the start moves focus
        to the destination.

        Raises:
            ValidationError: the place has no coordinates.
        """
        state = self.slot(name)
        if not place.has_coordinates:
            raise ValidationError(
                "This place doesn't have coordinates.",
                title="Location Data Missing",
                focus=name,
            )

        point = LocationPoint(
            latitude=place.lat,
            longitude=place.lng,
            name=place.name,
            address=place.address,
        )
        state.selected_point = point
        state.query_text = place.name
        state.phase = SlotPhase.PLACE_SELECTED

        if name is InputContext.START:
            self.focus = InputContext.DESTINATION
            self._log.info("Start point selected: %s", place.name)
        else:
            self._log.info("Destination point selected: %s", place.name)
            if self.start.has_point:
                self._log.debug("Both points selected, ready for directions")
        return point

    def clear(self, name: InputContext) -> None:
        state = self.slot(name)
        state.query_text = ""
        state.selected_point = None
        state.phase = SlotPhase.EMPTY
        self.focus = name

    def reset_destination(self) -> None:
        """Tab change: the destination starts over, the start slot is kept."""
        dest = self.destination
        dest.query_text = ""
        dest.selected_point = None
        dest.phase = SlotPhase.EMPTY

    # ------------------------------------------------------------------
    # Route intent
    # ------------------------------------------------------------------

    def request_route(self) -> RouteIntent:
        """
        Emit the route intent for the two selected points.

        Raises:
            ValidationError: a slot has no point; ``focus`` names it and
                nothing is emitted.
        """
        start = self.start.selected_point
        destination = self.destination.selected_point
        if start is None:
            raise ValidationError(
                "Please select a starting point.",
                title="Start Location Needed",
                focus=InputContext.START,
            )
        if destination is None:
            raise ValidationError(
                "Please select a destination point.",
                title="Destination Needed",
                focus=InputContext.DESTINATION,
            )

        intent = RouteIntent.between(start, destination)
        self._log.info("Routing from '%s' to '%s'", start.name, destination.name)
        self.navigator.navigate(intent)
        AppMetrics.route_intent_emitted()
        return intent
