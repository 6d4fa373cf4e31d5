# wandernav/infra/location.py
"""
Device location with a bounded wait.

``LocationResolver.resolve_current_location()`` asks the platform provider
for permission, then races the position fetch against a timer.  When the
timer wins, the fetch task is abandoned (left to finish on its own, its
outcome is only logged); the provider call is idempotent and side-effect
free, so nothing has to be undone.

After a permission denial or an unavailable provider, automatic calls
fail fast with the same error kind and never re-prompt the user.  A
call with ``user_initiated=True`` clears that block.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from wandernav.config import settings
from wandernav.core.search.domain import CURRENT_LOCATION_TEXT, LocationPoint
from wandernav.core.search.errors import (
    LocationError,
    LocationTimeout,
    LocationUnavailable,
    PermissionDenied,
)
from wandernav.core.search.ports import DeviceCoordinates, LocationProvider
from wandernav.infra.logging_config import get_logger, mask_coordinates
from wandernav.infra.metrics import AppMetrics

logger = get_logger(__name__)


def _log_abandoned_fetch(task: asyncio.Task) -> None:
    """Callback: retrieve the outcome of a fetch that lost the race."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned location fetch failed late: %s", exc)
    else:
        logger.debug("Abandoned location fetch completed late")


def point_from_coordinates(coords: DeviceCoordinates) -> LocationPoint:
    return LocationPoint(
        latitude=coords.latitude,
        longitude=coords.longitude,
        name=CURRENT_LOCATION_TEXT,
        address=f"Lat: {coords.latitude:.4f}, Lng: {coords.longitude:.4f}",
    )


class LocationResolver:
    def __init__(
        self,
        provider: LocationProvider,
        *,
        timeout_ms: Optional[int] = None,
        accuracy: Optional[str] = None,
    ) -> None:
        self.provider = provider
        self.timeout_ms = timeout_ms if timeout_ms is not None else settings.location_timeout_ms
        self.accuracy = accuracy or settings.location_accuracy
        self._blocked_by: Optional[type[LocationError]] = None
        self._abandoned: set[asyncio.Task] = set()

    @property
    def can_auto_resolve(self) -> bool:
        """False after a non-timeout failure, until the user retries explicitly."""
        return self._blocked_by is None

    async def resolve_current_location(
        self,
        timeout_ms: Optional[int] = None,
        *,
        user_initiated: bool = False,
    ) -> LocationPoint:
        """
        Resolve the device position as a ``LocationPoint`` named with the
        current-location sentinel text.

        Raises:
            PermissionDenied: the user refused location access.
            LocationTimeout: no fix within ``timeout_ms``.
            LocationUnavailable: the provider failed or is blocked.
        """
        if user_initiated:
            self._blocked_by = None
        elif self._blocked_by is not None:
            logger.debug("Automatic location lookup skipped (%s)", self._blocked_by.reason)
            raise self._blocked_by()

        try:
            point = await self._resolve(timeout_ms if timeout_ms is not None else self.timeout_ms)
        except LocationTimeout:
            AppMetrics.location_failed(LocationTimeout.reason)
            raise
        except LocationError as exc:
            self._blocked_by = type(exc)
            AppMetrics.location_failed(exc.reason)
            raise

        AppMetrics.location_resolved()
        logger.info(
            "Current location resolved (%s)",
            mask_coordinates(point.latitude, point.longitude),
        )
        return point

    async def _resolve(self, timeout_ms: int) -> LocationPoint:
        try:
            granted = await self.provider.request_permission()
        except Exception as exc:
            logger.warning("Location permission request failed: %s", exc)
            raise LocationUnavailable() from exc

        if not granted:
            logger.info("Location permission denied")
            raise PermissionDenied()

        fetch = asyncio.ensure_future(self.provider.get_current_position(self.accuracy))
        try:
            done, _ = await asyncio.wait({fetch}, timeout=timeout_ms / 1000)
        except asyncio.CancelledError:
            fetch.cancel()
            raise

        if fetch not in done:
            logger.warning("Location request timed out after %d ms", timeout_ms)
            self._abandoned.add(fetch)
            fetch.add_done_callback(self._abandoned.discard)
            fetch.add_done_callback(_log_abandoned_fetch)
            raise LocationTimeout()

        exc = fetch.exception()
        if isinstance(exc, LocationError):
            raise exc
        if exc is not None:
            logger.warning("Error fetching current location: %s", exc)
            raise LocationUnavailable() from exc

        return point_from_coordinates(fetch.result())
