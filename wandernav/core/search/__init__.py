# wandernav/core/search/__init__.py
"""
Location search -- the search screen's coordination logic.

Debounced remote search with a heuristic fallback, device-location
lookup, and the start/destination point-selection state machine.
Rendering, routing and the backend itself live outside this package
and are reached through the protocols in ``ports``.

Canonical imports:
    from wandernav.core.search import SearchScreenController
    from wandernav.core.search.domain import SearchTab, InputContext, LocationPoint
    from wandernav.core.search.errors import NetworkError, LocationError, ValidationError
"""
from wandernav.core.search.domain import (  # noqa: F401
    CURRENT_LOCATION_TEXT,
    HazardResult,
    InputContext,
    LocationPoint,
    NavigationIntent,
    PendingSearch,
    PlaceResult,
    RouteIntent,
    SearchResultItem,
    SearchTab,
    SlotPhase,
    SlotState,
    UserResult,
)
from wandernav.core.search.errors import (  # noqa: F401
    LocationError,
    LocationTimeout,
    LocationUnavailable,
    NetworkError,
    PermissionDenied,
    SearchScreenError,
    ValidationError,
)
from wandernav.core.search.debouncer import QueryDebouncer  # noqa: F401
from wandernav.core.search.orchestrator import SearchOrchestrator  # noqa: F401
from wandernav.core.search.selection import PointSelectionStateMachine  # noqa: F401
from wandernav.core.search.screen import SearchScreenController  # noqa: F401
