# wandernav/core/search/fallback.py
"""
Heuristic results used when /api/search cannot be reached.

The output is synthetic and deterministic: it depends only on the query
text.  Every item is marked ``source="fallback"`` so the UI can tell it
apart from real data.  Disable with ``SEARCH_FALLBACK_ENABLED=false``.
"""
from __future__ import annotations

from wandernav.core.search.domain import (
    HazardResult,
    PlaceResult,
    SearchResultItem,
    SearchTab,
    UserResult,
)
from wandernav.core.search.results import HAZARD_ICON, avatar_url

FALLBACK_HAZARD_DATE = "2024-01-15"


def _places(query: str) -> list[SearchResultItem]:
    lowered = query.lower()
    if "park" in lowered:
        return [
            PlaceResult(
                id="p1", name=f"{query} Central Park", address="123 Main St",
                lat=34.0522, lng=-118.2437, source="fallback",
            ),
            PlaceResult(
                id="p2", name=f"Community {query}side", address="456 Oak Ave",
                lat=34.0550, lng=-118.2500, source="fallback",
            ),
        ]
    if "coffee" in lowered:
        return [
            PlaceResult(
                id="p3", name=f"The {query} Spot", address="789 Pine Ln",
                lat=34.0500, lng=-118.2400, source="fallback",
            ),
        ]
    if len(query) > 1:
        return [
            PlaceResult(
                id=f"p-generic-{query}", name=f"Place for {query}", address="Some Address",
                lat=34.0511, lng=-118.2411, source="fallback",
            ),
        ]
    return []


def _users(query: str) -> list[SearchResultItem]:
    if len(query) <= 1:
        return []
    return [
        UserResult(
            id=f"u-{query}",
            name=f"{query} User",
            username=f"{query.lower()}_tag",
            avatar=avatar_url(query),
            source="fallback",
        ),
    ]


def _hazards(query: str) -> list[SearchResultItem]:
    if len(query) <= 1:
        return []
    return [
        HazardResult(
            id=f"h-{query}",
            category="Report",
            description=f"Hazard near {query}",
            date=FALLBACK_HAZARD_DATE,
            icon=HAZARD_ICON,
            source="fallback",
        ),
    ]


_GENERATORS = {
    SearchTab.PLACES: _places,
    SearchTab.USERS: _users,
    SearchTab.HAZARDS: _hazards,
}


def heuristic_results(query: str, tab: SearchTab) -> list[SearchResultItem]:
    """Synthetic results for ``query`` (trimmed) on ``tab``."""
    return _GENERATORS[SearchTab(tab)](query.strip())
