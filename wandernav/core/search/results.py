# wandernav/core/search/results.py
"""Normalization of raw /api/search rows into SearchResultItem variants."""
from __future__ import annotations

import re
from datetime import date
from typing import Callable, Optional

from wandernav.config import settings
from wandernav.core.search.domain import (
    HazardResult,
    PlaceResult,
    SearchResultItem,
    SearchTab,
    UserResult,
)
from wandernav.transport.schemas import RawResult

NO_ADDRESS_TEXT = "No address available"
DEFAULT_HAZARD_CATEGORY = "Report"
HAZARD_ICON = "alert-outline"

_WHITESPACE = re.compile(r"\s+")


def slugify_username(name: str) -> str:
    """``"Jane Smith"`` → ``"jane_smith"``"""
    return _WHITESPACE.sub("_", name.lower())


def avatar_url(key: str, template: Optional[str] = None) -> str:
    return (template or settings.avatar_url_template).format(id=key)


def to_place(raw: RawResult) -> PlaceResult:
    return PlaceResult(
        id=raw.id,
        name=raw.name,
        address=raw.description or NO_ADDRESS_TEXT,
        lat=raw.latitude,
        lng=raw.longitude,
    )


def to_user(raw: RawResult) -> UserResult:
    return UserResult(
        id=raw.id,
        name=raw.name,
        username=raw.username or slugify_username(raw.name),
        avatar=avatar_url(raw.id),
    )


def to_hazard(raw: RawResult, today: date) -> HazardResult:
    return HazardResult(
        id=raw.id,
        category=raw.hazard_type or DEFAULT_HAZARD_CATEGORY,
        description=raw.description or f"Hazard near {raw.name}",
        date=today.isoformat(),
        icon=HAZARD_ICON,
    )


def normalize_results(
    raw_results: list[RawResult],
    tab: SearchTab,
    *,
    today: Callable[[], date] = date.today,
) -> list[SearchResultItem]:
    """Map raw rows to the variant for ``tab``, keeping source order."""
    tab = SearchTab(tab)
    if tab is SearchTab.PLACES:
        return [to_place(raw) for raw in raw_results]
    if tab is SearchTab.USERS:
        return [to_user(raw) for raw in raw_results]
    day = today()
    return [to_hazard(raw, day) for raw in raw_results]
