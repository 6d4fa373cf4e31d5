# tests/test_orchestrator.py
"""Tests for search dispatch: busy-drop, supersession and fallback"""
from __future__ import annotations

import asyncio
import logging

import pytest

from conftest import FakeSearchClient
from wandernav.core.search.domain import (
    CURRENT_LOCATION_TEXT,
    InputContext,
    LocationPoint,
    PlaceResult,
    SearchTab,
)
from wandernav.core.search.errors import NetworkError
from wandernav.core.search.orchestrator import SearchOrchestrator
from wandernav.infra.metrics import get_metrics_collector


def _counter(name, **labels):
    return get_metrics_collector().get_counter(name, **labels)


class TestRejectedQueries:

    @pytest.mark.asyncio
    async def test_blank_query_never_calls_backend(self, search_client):
        orch = SearchOrchestrator(search_client)

        result = await orch.perform_search("   ", SearchTab.PLACES, InputContext.DESTINATION)

        assert result == []
        assert search_client.calls == []
        assert orch.is_loading is False

    @pytest.mark.asyncio
    async def test_sentinel_start_text_with_point_is_rejected(self, search_client):
        orch = SearchOrchestrator(search_client)

        result = await orch.perform_search(
            CURRENT_LOCATION_TEXT, SearchTab.PLACES, InputContext.START,
            start_point_selected=True,
        )

        assert result == []
        assert search_client.calls == []

    @pytest.mark.asyncio
    async def test_sentinel_text_without_point_is_searched(self, search_client):
        orch = SearchOrchestrator(search_client)

        await orch.perform_search(CURRENT_LOCATION_TEXT, SearchTab.PLACES, InputContext.START)

        assert len(search_client.calls) == 1

    @pytest.mark.asyncio
    async def test_sentinel_text_in_destination_is_searched(self, search_client):
        orch = SearchOrchestrator(search_client)

        await orch.perform_search(
            CURRENT_LOCATION_TEXT, SearchTab.PLACES, InputContext.DESTINATION,
            start_point_selected=True,
        )

        assert len(search_client.calls) == 1


class TestPerformSearch:

    @pytest.mark.asyncio
    async def test_applies_normalized_results(self, search_client):
        orch = SearchOrchestrator(search_client)

        items = await orch.perform_search("  central ", SearchTab.PLACES, InputContext.DESTINATION)

        assert search_client.calls[0][0] == "central"
        assert items == orch.results
        [place] = items
        assert isinstance(place, PlaceResult)
        assert (place.lat, place.lng) == (34.05, -118.24)
        assert orch.results_context is InputContext.DESTINATION
        assert orch.has_searched_once is True
        assert orch.show_no_results is False
        assert orch.degraded is False
        assert orch.is_loading is False
        assert _counter("searches_started_total", tab="places", context="destination") == 1

    @pytest.mark.asyncio
    async def test_near_point_is_forwarded(self, search_client):
        orch = SearchOrchestrator(search_client)
        near = LocationPoint(latitude=34.0, longitude=-118.0, name=CURRENT_LOCATION_TEXT)

        await orch.perform_search("pier", SearchTab.PLACES, InputContext.DESTINATION, near=near)

        assert search_client.calls[0][2] == near

    @pytest.mark.asyncio
    async def test_empty_response_shows_no_results(self):
        orch = SearchOrchestrator(FakeSearchClient(rows=[]))

        items = await orch.perform_search("zzz", SearchTab.USERS, InputContext.GENERAL)

        assert items == []
        assert orch.show_no_results is True

    @pytest.mark.asyncio
    async def test_loading_flag_while_in_flight(self):
        gate = asyncio.Event()
        orch = SearchOrchestrator(FakeSearchClient(gate=gate))

        task = asyncio.create_task(
            orch.perform_search("park", SearchTab.PLACES, InputContext.DESTINATION)
        )
        await asyncio.sleep(0)
        assert orch.is_loading is True
        assert orch.is_searching is True

        gate.set()
        await task
        assert orch.is_loading is False
        assert orch.is_searching is False


class TestBusyDrop:

    @pytest.mark.asyncio
    async def test_second_call_dropped_while_busy(self):
        gate = asyncio.Event()
        client = FakeSearchClient(rows=[{"id": "1", "name": "First"}], gate=gate)
        orch = SearchOrchestrator(client)

        first = asyncio.create_task(
            orch.perform_search("first", SearchTab.PLACES, InputContext.DESTINATION)
        )
        await asyncio.sleep(0)

        dropped = await orch.perform_search("second", SearchTab.PLACES, InputContext.DESTINATION)
        gate.set()
        applied = await first

        assert dropped == []
        assert [c[0] for c in client.calls] == ["first"]
        assert [i.name for i in applied] == ["First"]
        assert _counter("searches_dropped_busy_total", context="destination") == 1

    @pytest.mark.asyncio
    async def test_dropped_search_leaves_older_results_shown(self, caplog):
        gate = asyncio.Event()
        client = FakeSearchClient(rows=[{"id": "1", "name": "Cof Shop"}], gate=gate)
        orch = SearchOrchestrator(client)

        first = asyncio.create_task(
            orch.perform_search("cof", SearchTab.PLACES, InputContext.DESTINATION)
        )
        await asyncio.sleep(0)
        with caplog.at_level(logging.DEBUG, logger="wandernav.core.search.orchestrator"):
            await orch.perform_search("coffee", SearchTab.PLACES, InputContext.DESTINATION)
        gate.set()
        await first

        # Results belong to "cof" until the next text change searches again
        assert [i.name for i in orch.results] == ["Cof Shop"]
        assert any("results may trail the input" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_busy_flag_released_on_unexpected_error(self):
        orch = SearchOrchestrator(FakeSearchClient(error=RuntimeError("boom")))

        with pytest.raises(RuntimeError):
            await orch.perform_search("park", SearchTab.PLACES, InputContext.DESTINATION)

        assert orch.is_searching is False
        assert orch.is_loading is False

    @pytest.mark.asyncio
    async def test_busy_flag_released_on_cancel(self):
        gate = asyncio.Event()
        orch = SearchOrchestrator(FakeSearchClient(gate=gate))

        task = asyncio.create_task(
            orch.perform_search("park", SearchTab.PLACES, InputContext.DESTINATION)
        )
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert orch.is_searching is False


class TestSupersession:

    @pytest.mark.asyncio
    async def test_invalidate_discards_in_flight_result(self):
        gate = asyncio.Event()
        client = FakeSearchClient(rows=[{"id": "1", "name": "Stale"}], gate=gate)
        orch = SearchOrchestrator(client)

        task = asyncio.create_task(
            orch.perform_search("stale", SearchTab.PLACES, InputContext.DESTINATION)
        )
        await asyncio.sleep(0)
        orch.reset()
        gate.set()

        assert await task == []
        assert orch.results == []
        assert _counter("searches_superseded_total", context="destination") == 1

    @pytest.mark.asyncio
    async def test_result_for_inactive_context_is_discarded(self):
        gate = asyncio.Event()
        client = FakeSearchClient(rows=[{"id": "1", "name": "Home"}], gate=gate)
        active = {"context": InputContext.START}
        orch = SearchOrchestrator(client, active_context=lambda: active["context"])

        task = asyncio.create_task(
            orch.perform_search("home", SearchTab.PLACES, InputContext.START)
        )
        await asyncio.sleep(0)
        active["context"] = InputContext.DESTINATION
        gate.set()

        assert await task == []
        assert orch.results == []

    @pytest.mark.asyncio
    async def test_sequence_is_monotonic(self, search_client):
        orch = SearchOrchestrator(search_client)
        before = orch.sequence

        await orch.perform_search("park", SearchTab.PLACES, InputContext.DESTINATION)
        orch.invalidate()
        await orch.perform_search("park", SearchTab.PLACES, InputContext.DESTINATION)

        assert orch.sequence == before + 3


class TestFallback:

    @pytest.mark.asyncio
    async def test_network_error_serves_fallback(self, failing_client):
        orch = SearchOrchestrator(failing_client, fallback_enabled=True)

        items = await orch.perform_search("coffee", SearchTab.PLACES, InputContext.DESTINATION)

        assert [i.name for i in items] == ["The coffee Spot"]
        assert items[0].source == "fallback"
        assert orch.degraded is True
        assert orch.is_loading is False
        assert _counter("search_fallbacks_total", tab="places") == 1

    @pytest.mark.asyncio
    async def test_fallback_disabled_yields_no_results(self, failing_client):
        orch = SearchOrchestrator(failing_client, fallback_enabled=False)

        items = await orch.perform_search("coffee", SearchTab.PLACES, InputContext.DESTINATION)

        assert items == []
        assert orch.degraded is True
        assert orch.show_no_results is True

    @pytest.mark.asyncio
    async def test_degraded_cleared_by_next_success(self):
        client = FakeSearchClient(error=NetworkError("down"))
        orch = SearchOrchestrator(client, fallback_enabled=True)
        await orch.perform_search("museum", SearchTab.PLACES, InputContext.DESTINATION)
        assert orch.degraded is True

        client.error = None
        client.rows = [{"id": "m1", "name": "Museum"}]
        await orch.perform_search("museum", SearchTab.PLACES, InputContext.DESTINATION)

        assert orch.degraded is False
        assert orch.results[0].source == "remote"
