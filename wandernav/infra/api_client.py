# wandernav/infra/api_client.py
"""
Typed clients for the WanderNav backend.

- ``SearchApiClient``  – ``POST /api/search``
- ``WeatherApiClient`` – ``GET /api/weather``
- ``AuthApiClient``    – ``POST /api/auth/register`` and ``/api/auth/login``

Each call is a single attempt on the shared ``api`` aiohttp session.
Timeouts, non-2xx answers and bodies that do not decode or validate all
raise ``NetworkError``; none of these clients retries or falls back.
Recovering from a failed search is the orchestrator's job.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

import aiohttp
import pydantic
from pydantic import TypeAdapter

from wandernav.config import settings
from wandernav.core.search.domain import LocationPoint, SearchTab
from wandernav.core.search.errors import NetworkError, ValidationError
from wandernav.infra.http_client import get_api_session
from wandernav.infra.logging_config import get_logger, mask_coordinates
from wandernav.transport.schemas import (
    AuthRequest,
    RawResult,
    SearchApiRequest,
    WeatherApiResponse,
)

logger = get_logger(__name__)

_RAW_RESULTS = TypeAdapter(list[RawResult])


class _BackendClient:
    """Shared request plumbing for the backend clients."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout_seconds: Optional[float] = None,
        session_factory: Callable[[], aiohttp.ClientSession] = get_api_session,
    ) -> None:
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session_factory = session_factory

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        request_kwargs: dict[str, Any] = {"json": json, "params": params}
        # Without a per-client limit the session's own ClientTimeout applies
        if self.timeout_seconds:
            request_kwargs["timeout"] = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            session = self._session_factory()
            async with session.request(method, url, **request_kwargs) as resp:
                if not 200 <= resp.status < 300:
                    logger.warning("%s %s returned status %d", method, path, resp.status)
                    raise NetworkError(
                        f"{method} {path} failed with status {resp.status}",
                        status=resp.status,
                    )
                return await resp.json(content_type=None)

        except NetworkError:
            raise

        except TimeoutError as exc:
            logger.warning("%s %s timed out", method, path)
            raise NetworkError(f"{method} {path} timed out") from exc

        except aiohttp.ClientError as exc:
            logger.warning("%s %s network error: %s", method, path, exc)
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        except ValueError as exc:
            logger.warning("%s %s returned a body that is not JSON: %s", method, path, exc)
            raise NetworkError(f"{method} {path} returned malformed JSON") from exc


class SearchApiClient(_BackendClient):
    """Remote search for places, users and hazards."""

    def __init__(self, base_url: Optional[str] = None, **kwargs) -> None:
        kwargs.setdefault("timeout_seconds", settings.search_timeout_seconds)
        super().__init__(base_url, **kwargs)

    async def search(
        self,
        query: str,
        tab: SearchTab,
        *,
        near: Optional[LocationPoint] = None,
    ) -> list[RawResult]:
        """
        Run one search.  ``query`` must be non-blank (the caller checks).

        ``near`` biases results around a point when the backend supports it.

        Raises:
            NetworkError: on timeout, non-2xx status or malformed payload.
        """
        request = SearchApiRequest(
            query=query.strip(),
            type=SearchTab(tab).value,
            latitude=near.latitude if near else None,
            longitude=near.longitude if near else None,
        )
        data = await self._request_json(
            "POST", "/api/search", json=request.model_dump(exclude_none=True),
        )

        try:
            results = _RAW_RESULTS.validate_python(data)
        except pydantic.ValidationError as exc:
            logger.warning(
                "Search response failed validation (%d errors)", exc.error_count(),
            )
            raise NetworkError("Search response is malformed") from exc

        logger.debug("Search '%s' (%s) → %d results", request.query, request.type, len(results))
        return results


class WeatherApiClient(_BackendClient):
    """Current weather at a coordinate."""

    def __init__(self, base_url: Optional[str] = None, **kwargs) -> None:
        kwargs.setdefault("timeout_seconds", settings.weather_timeout_seconds)
        super().__init__(base_url, **kwargs)

    async def get_weather(self, latitude: float, longitude: float) -> WeatherApiResponse:
        data = await self._request_json(
            "GET",
            "/api/weather",
            params={"latitude": str(latitude), "longitude": str(longitude)},
        )
        try:
            report = WeatherApiResponse.model_validate(data)
        except pydantic.ValidationError as exc:
            raise NetworkError("Weather response is malformed") from exc

        logger.info(
            "Weather at (%s): %s, %.1f°",
            mask_coordinates(latitude, longitude), report.description, report.temp,
        )
        return report


class AuthApiClient(_BackendClient):
    """Account registration and login."""

    def __init__(self, base_url: Optional[str] = None, **kwargs) -> None:
        kwargs.setdefault("timeout_seconds", settings.auth_timeout_seconds)
        super().__init__(base_url, **kwargs)

    @staticmethod
    def _credentials(username: str, password: str) -> dict:
        try:
            return AuthRequest(username=username, password=password).model_dump()
        except pydantic.ValidationError as exc:
            raise ValidationError(
                "Username and password are required.", title="Missing Credentials",
            ) from exc

    async def register(self, username: str, password: str) -> Any:
        payload = self._credentials(username, password)
        data = await self._request_json("POST", "/api/auth/register", json=payload)
        logger.info("Registered account '%s'", username)
        return data

    async def login(self, username: str, password: str) -> Any:
        payload = self._credentials(username, password)
        data = await self._request_json("POST", "/api/auth/login", json=payload)
        logger.info("Logged in as '%s'", username)
        return data
