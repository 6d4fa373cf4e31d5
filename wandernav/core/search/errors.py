# wandernav/core/search/errors.py
"""
Typed errors for the location-search screen.

Every error carries a user-facing ``title`` and ``message``.  The screen
controller catches ``LocationError`` and ``ValidationError`` and turns
them into alerts; ``NetworkError`` never reaches the user because the
orchestrator recovers from it with the heuristic fallback.
"""
from __future__ import annotations

from typing import Optional

from wandernav.core.search.domain import InputContext


class SearchScreenError(Exception):
    """Base class for all search-screen errors."""

    title: str = "Error"

    def __init__(self, message: str = "Something went wrong", *, title: Optional[str] = None):
        self.message = message
        if title is not None:
            self.title = title
        super().__init__(message)


class NetworkError(SearchScreenError):
    """
    Backend call failed (timeout, non-2xx, malformed body).

    Attributes:
        status: HTTP status when the server answered, else None.
    """

    title = "Network Error"

    def __init__(self, message: str, *, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


# ---------------------------------------------------------------------------
# Device location
# ---------------------------------------------------------------------------

class LocationError(SearchScreenError):
    """Current location could not be resolved; the user falls back to typing."""

    title = "Location Error"
    reason: str = "unavailable"


class PermissionDenied(LocationError):
    title = "Permission Needed"
    reason = "permission_denied"

    def __init__(self, message: str = (
        "Location permission is required. "
        "Please search manually or enable permissions in settings."
    )):
        super().__init__(message)


class LocationTimeout(LocationError):
    reason = "timeout"

    def __init__(self, message: str = (
        "Could not fetch current location. Please type your start location."
    )):
        super().__init__(message)


class LocationUnavailable(LocationError):
    reason = "unavailable"

    def __init__(self, message: str = (
        "Could not fetch current location. Please type your start location."
    )):
        super().__init__(message)


# ---------------------------------------------------------------------------
# User input
# ---------------------------------------------------------------------------

class ValidationError(SearchScreenError):
    """
    User action cannot proceed as-is (missing slot, place without coordinates).

    Attributes:
        focus: Input the user should be sent to, if any.
    """

    title = "Check Your Input"

    def __init__(self, message: str, *, title: Optional[str] = None, focus: Optional[InputContext] = None):
        self.focus = focus
        super().__init__(message, title=title)
