# wandernav/core/search/domain.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Union


CURRENT_LOCATION_TEXT = "Your Current Location"


# ============================================================================
# ENUMS
# ============================================================================

class SearchTab(str, Enum):
    """Search category; the value is the ``type`` sent to /api/search."""
    PLACES = "places"
    USERS = "users"
    HAZARDS = "hazards"


class InputContext(str, Enum):
    """
    Which text input a query belongs to.
    START and DESTINATION double as the two point-selection slots.
    """
    START = "start"
    DESTINATION = "destination"
    GENERAL = "general"


SLOTS = (InputContext.START, InputContext.DESTINATION)


class SlotPhase(str, Enum):
    EMPTY = "empty"
    CURRENT_LOCATION_PENDING = "current_location_pending"
    CURRENT_LOCATION_RESOLVED = "current_location_resolved"
    MANUAL_TEXT_ENTERED = "manual_text_entered"
    PLACE_SELECTED = "place_selected"


ResultSource = Literal["remote", "fallback"]


# ============================================================================
# POINTS & SLOTS
# ============================================================================

@dataclass(frozen=True)
class LocationPoint:
    """A resolved coordinate with its display name."""
    latitude: float
    longitude: float
    name: str
    address: Optional[str] = None


@dataclass
class SlotState:
    """
    Query text and selected point of one slot.

    ``selected_point`` is only set while ``query_text`` equals its name;
    PointSelectionStateMachine is the only writer.
    """
    query_text: str = ""
    selected_point: Optional[LocationPoint] = None
    phase: SlotPhase = SlotPhase.EMPTY

    @property
    def has_point(self) -> bool:
        return self.selected_point is not None


# ============================================================================
# SEARCH RESULTS
# ============================================================================

@dataclass(frozen=True)
class PlaceResult:
    id: str
    name: str
    address: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    source: ResultSource = "remote"
    type: Literal["place"] = "place"

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None


@dataclass(frozen=True)
class UserResult:
    id: str
    name: str
    username: str
    avatar: Optional[str] = None
    source: ResultSource = "remote"
    type: Literal["user"] = "user"


@dataclass(frozen=True)
class HazardResult:
    id: str
    category: str
    description: str
    date: str
    icon: Optional[str] = None
    source: ResultSource = "remote"
    type: Literal["hazard"] = "hazard"


SearchResultItem = Union[PlaceResult, UserResult, HazardResult]


@dataclass(frozen=True)
class PendingSearch:
    """One in-flight search attempt; ``sequence`` decides supersession."""
    tab: SearchTab
    context: InputContext
    query_text: str
    sequence: int


# ============================================================================
# OUTBOUND INTENTS
# ============================================================================

@dataclass(frozen=True)
class RouteIntent:
    """Route request handed to the navigation layer once both slots hold a point."""
    start_lat: float
    start_lng: float
    start_name: str
    dest_lat: float
    dest_lng: float
    dest_name: str

    @classmethod
    def between(cls, start: LocationPoint, destination: LocationPoint) -> "RouteIntent":
        return cls(
            start_lat=start.latitude,
            start_lng=start.longitude,
            start_name=start.name,
            dest_lat=destination.latitude,
            dest_lng=destination.longitude,
            dest_name=destination.name,
        )

    def to_params(self) -> dict:
        """Map-screen route parameters"""
        return {
            "startLat": self.start_lat,
            "startLng": self.start_lng,
            "startName": self.start_name,
            "destLat": self.dest_lat,
            "destLng": self.dest_lng,
            "destName": self.dest_name,
        }


@dataclass(frozen=True)
class NavigationIntent:
    """Open the detail screen of a user or hazard result."""
    kind: Literal["user", "hazard"]
    target_id: str

    @property
    def path(self) -> str:
        if self.kind == "user":
            return f"/userProfile/{self.target_id}"
        return f"/hazardDetails/{self.target_id}"
