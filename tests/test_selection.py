# tests/test_selection.py
"""Tests for the start/destination point-selection state machine"""
from __future__ import annotations

import pytest

from conftest import FakeLocationProvider
from wandernav.core.search.domain import (
    CURRENT_LOCATION_TEXT,
    InputContext,
    PlaceResult,
    SearchTab,
    SlotPhase,
)
from wandernav.core.search.errors import PermissionDenied, ValidationError
from wandernav.core.search.selection import PointSelectionStateMachine
from wandernav.infra.location import LocationResolver

PIKE = PlaceResult(id="p9", name="Pike Place", address="Seattle", lat=47.6, lng=-122.3)
HOME = PlaceResult(id="p1", name="Home", address="1 Elm St", lat=34.0, lng=-118.0)


@pytest.fixture
def machine(navigator):
    return PointSelectionStateMachine(navigator)


class TestInitialState:
    def test_start_holds_sentinel_text(self, machine):
        assert machine.start.query_text == CURRENT_LOCATION_TEXT
        assert machine.start.selected_point is None
        assert machine.destination.query_text == ""
        assert machine.focus is InputContext.START

    def test_general_is_not_a_slot(self, machine):
        with pytest.raises(ValueError):
            machine.slot(InputContext.GENERAL)


class TestFocus:
    def test_non_places_tab_focuses_general(self, machine):
        assert machine.focus_for(SearchTab.USERS) is InputContext.GENERAL

    def test_places_without_start_focuses_start(self, machine):
        assert machine.focus_for(SearchTab.PLACES) is InputContext.START

    def test_places_with_start_focuses_destination(self, machine):
        machine.select_place(InputContext.START, HOME)
        assert machine.focus_for(SearchTab.PLACES) is InputContext.DESTINATION


class TestEditAndSelect:
    def test_select_start_advances_focus(self, machine):
        point = machine.select_place(InputContext.START, HOME)

        assert machine.start.selected_point == point
        assert machine.start.query_text == "Home"
        assert machine.start.phase is SlotPhase.PLACE_SELECTED
        assert machine.focus is InputContext.DESTINATION

    def test_editing_text_drops_point(self, machine):
        machine.select_place(InputContext.DESTINATION, PIKE)

        state = machine.edit_text(InputContext.DESTINATION, "Pike Plac")

        assert state.selected_point is None
        assert state.phase is SlotPhase.MANUAL_TEXT_ENTERED

    def test_unchanged_text_keeps_point(self, machine):
        machine.select_place(InputContext.DESTINATION, PIKE)

        state = machine.edit_text(InputContext.DESTINATION, "Pike Place")

        assert state.has_point
        assert state.phase is SlotPhase.PLACE_SELECTED

    def test_blank_text_is_empty_phase(self, machine):
        state = machine.edit_text(InputContext.DESTINATION, "  ")
        assert state.phase is SlotPhase.EMPTY

    def test_selecting_same_place_twice_is_idempotent(self, machine):
        first = machine.select_place(InputContext.DESTINATION, PIKE)
        second = machine.select_place(InputContext.DESTINATION, PIKE)

        assert first == second
        assert machine.destination.query_text == "Pike Place"

    def test_place_without_coordinates_rejected(self, machine):
        nowhere = PlaceResult(id="x", name="Nowhere", address="No address available")

        with pytest.raises(ValidationError) as exc_info:
            machine.select_place(InputContext.DESTINATION, nowhere)

        assert exc_info.value.title == "Location Data Missing"
        assert exc_info.value.focus is InputContext.DESTINATION
        assert machine.destination.selected_point is None

    def test_clear_resets_slot_and_focuses_it(self, machine):
        machine.select_place(InputContext.START, HOME)

        machine.clear(InputContext.START)

        assert machine.start.query_text == ""
        assert machine.start.selected_point is None
        assert machine.focus is InputContext.START

    def test_reset_destination_keeps_start(self, machine):
        machine.select_place(InputContext.START, HOME)
        machine.select_place(InputContext.DESTINATION, PIKE)

        machine.reset_destination()

        assert machine.start.has_point
        assert not machine.destination.has_point
        assert machine.destination.query_text == ""


class TestRequestRoute:
    def test_emits_route_params(self, machine, navigator):
        machine.select_place(InputContext.START, HOME)
        machine.select_place(InputContext.DESTINATION, PIKE)

        intent = machine.request_route()

        assert navigator.intents == [intent]
        assert intent.to_params() == {
            "startLat": 34.0, "startLng": -118.0, "startName": "Home",
            "destLat": 47.6, "destLng": -122.3, "destName": "Pike Place",
        }

    def test_missing_start(self, machine, navigator):
        machine.select_place(InputContext.DESTINATION, PIKE)

        with pytest.raises(ValidationError) as exc_info:
            machine.request_route()

        assert exc_info.value.title == "Start Location Needed"
        assert exc_info.value.focus is InputContext.START
        assert navigator.intents == []

    def test_missing_destination(self, machine, navigator):
        machine.select_place(InputContext.START, HOME)

        with pytest.raises(ValidationError) as exc_info:
            machine.request_route()

        assert exc_info.value.title == "Destination Needed"
        assert exc_info.value.message == "Please select a destination point."
        assert exc_info.value.focus is InputContext.DESTINATION
        assert navigator.intents == []

    def test_edited_destination_blocks_route(self, machine, navigator):
        machine.select_place(InputContext.START, HOME)
        machine.select_place(InputContext.DESTINATION, PIKE)
        machine.edit_text(InputContext.DESTINATION, "Pike")

        with pytest.raises(ValidationError):
            machine.request_route()
        assert navigator.intents == []


class TestResolveStartLocation:

    @pytest.mark.asyncio
    async def test_resolved_point_fills_start(self, navigator):
        resolver = LocationResolver(FakeLocationProvider(), timeout_ms=500)
        machine = PointSelectionStateMachine(navigator, resolver)
        assert machine.should_resolve_start(SearchTab.PLACES)

        point = await machine.resolve_start_location()

        assert (point.latitude, point.longitude) == (34.0, -118.0)
        assert machine.start.query_text == CURRENT_LOCATION_TEXT
        assert machine.start.phase is SlotPhase.CURRENT_LOCATION_RESOLVED
        assert machine.focus is InputContext.DESTINATION
        assert not machine.should_resolve_start(SearchTab.PLACES)

    @pytest.mark.asyncio
    async def test_failure_clears_start_text(self, navigator):
        resolver = LocationResolver(FakeLocationProvider(granted=False), timeout_ms=500)
        machine = PointSelectionStateMachine(navigator, resolver)

        with pytest.raises(PermissionDenied):
            await machine.resolve_start_location()

        assert machine.start.query_text == ""
        assert machine.start.phase is SlotPhase.EMPTY
        assert machine.focus is InputContext.START

    def test_no_resolve_on_other_tabs(self, navigator):
        resolver = LocationResolver(FakeLocationProvider(), timeout_ms=500)
        machine = PointSelectionStateMachine(navigator, resolver)
        assert not machine.should_resolve_start(SearchTab.HAZARDS)

    def test_no_resolve_without_resolver(self, machine):
        assert not machine.should_resolve_start(SearchTab.PLACES)
