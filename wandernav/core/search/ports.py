# wandernav/core/search/ports.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Union

from wandernav.core.search.domain import (
    LocationPoint,
    NavigationIntent,
    RouteIntent,
    SearchTab,
)
from wandernav.transport.schemas import RawResult


@dataclass(frozen=True)
class DeviceCoordinates:
    latitude: float
    longitude: float
    accuracy_m: Optional[float] = None


class SearchBackend(Protocol):
    async def search(
        self,
        query: str,
        tab: SearchTab,
        *,
        near: Optional[LocationPoint] = None,
    ) -> list[RawResult]:
        """Raises NetworkError on any failure."""
        ...


class LocationProvider(Protocol):
    """Platform location capability (GPS, network location, test double)."""

    async def request_permission(self) -> bool: ...

    async def get_current_position(self, accuracy: str) -> DeviceCoordinates: ...


class AlertPresenter(Protocol):
    def alert(self, title: str, message: str) -> None: ...


class Navigator(Protocol):
    def navigate(self, intent: Union[RouteIntent, NavigationIntent]) -> None: ...
