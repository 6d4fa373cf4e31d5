#!/usr/bin/env python3
"""
Search Screen Example

Walks a search screen through a typical session without a UI or a backend:
resolve the current location, type a destination, pick it, request a route,
then look up a user on the users tab.

Run from project root:
    python examples/search_screen_example.py
"""
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wandernav.core.search.domain import InputContext, SearchTab  # noqa: E402
from wandernav.core.search.ports import DeviceCoordinates  # noqa: E402
from wandernav.core.search.screen import SearchScreenController  # noqa: E402
from wandernav.infra.location import LocationResolver  # noqa: E402
from wandernav.infra.logging_config import setup_logging  # noqa: E402
from wandernav.infra.metrics import get_metrics_collector  # noqa: E402
from wandernav.transport.schemas import RawResult  # noqa: E402


class DemoBackend:
    """Canned /api/search rows"""

    ROWS = {
        SearchTab.PLACES: [
            {"id": "1", "name": "Pike Place", "description": "Seattle market",
             "latitude": 47.6097, "longitude": -122.3422},
            {"id": "2", "name": "Space Needle", "description": "Observation tower",
             "latitude": 47.6205, "longitude": -122.3493},
        ],
        SearchTab.USERS: [
            {"id": "u7", "name": "Jane Doe"},
        ],
        SearchTab.HAZARDS: [],
    }

    async def search(self, query, tab, *, near=None):
        await asyncio.sleep(0.05)
        return [RawResult.model_validate(row) for row in self.ROWS[tab]
                if query.lower() in row["name"].lower()]


class DemoDevice:
    async def request_permission(self) -> bool:
        return True

    async def get_current_position(self, accuracy: str) -> DeviceCoordinates:
        await asyncio.sleep(0.1)
        return DeviceCoordinates(latitude=47.6062, longitude=-122.3321)


class ConsoleNavigator:
    def navigate(self, intent) -> None:
        if hasattr(intent, "to_params"):
            print(f"  → navigate /map {intent.to_params()}")
        else:
            print(f"  → navigate {intent.path}")


class ConsoleAlerts:
    def alert(self, title: str, message: str) -> None:
        print(f"  ! {title}: {message}")


def show_results(screen: SearchScreenController) -> None:
    if screen.show_no_results:
        print("  (no results)")
    for item in screen.results:
        label = getattr(item, "name", None) or getattr(item, "description", "")
        print(f"  • [{item.type}] {label}")


async def demo_route():
    print("\n" + "=" * 60)
    print("ROUTE DEMO")
    print("=" * 60 + "\n")

    screen = SearchScreenController(
        client=DemoBackend(),
        navigator=ConsoleNavigator(),
        alerts=ConsoleAlerts(),
        resolver=LocationResolver(DemoDevice()),
        debounce_ms=200,
    )

    await screen.activate()
    start = screen.selection.start
    print(f"✓ Start: {start.query_text} ({start.selected_point.address})")
    print(f"  Focus: {screen.active_context.value}\n")

    for text in ("Pi", "Pik", "Pike"):
        print(f"User types: {text!r}")
        screen.on_text_change(InputContext.DESTINATION, text)
        await asyncio.sleep(0.05)
    await screen.debouncer.join()
    show_results(screen)

    print("\nUser taps the first result")
    screen.select_result(screen.results[0])
    print(f"✓ Destination: {screen.selection.destination.query_text}\n")

    print("User taps 'Get directions'")
    screen.request_route()
    screen.close()


async def demo_users():
    print("\n" + "=" * 60)
    print("USERS TAB DEMO")
    print("=" * 60 + "\n")

    screen = SearchScreenController(
        client=DemoBackend(),
        navigator=ConsoleNavigator(),
        alerts=ConsoleAlerts(),
        debounce_ms=200,
    )
    await screen.change_tab(SearchTab.USERS)

    print("User types: 'jane'")
    screen.on_text_change(InputContext.GENERAL, "jane")
    await screen.debouncer.join()
    show_results(screen)

    print("\nUser taps the first result")
    screen.select_result(screen.results[0])

    print("\nUser asks for a route without a destination")
    await screen.change_tab(SearchTab.PLACES)
    screen.request_route()
    screen.close()


async def main():
    setup_logging("WARNING")
    await demo_route()
    await demo_users()

    print("\n" + "=" * 60)
    print("METRICS")
    print("=" * 60)
    for name, value in get_metrics_collector().get_metrics()["counters"].items():
        print(f"  {name}: {value}")


if __name__ == "__main__":
    asyncio.run(main())
