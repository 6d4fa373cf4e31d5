# wandernav/infra/http_client.py
"""
Shared HTTP client sessions for the application.

Provides named, lazy-initialized aiohttp.ClientSession singletons
to avoid per-request session creation overhead and TCP connection churn.

Session profiles
~~~~~~~~~~~~~~~~
- **api** – WanderNav backend calls (total=15 s, connect=5 s, pool limit=10)

Individual requests may pass a tighter ``aiohttp.ClientTimeout``
(search uses ``settings.search_timeout_seconds``).

Shutdown
~~~~~~~~
Call ``close_all_sessions()`` once when the last screen controller closes.
"""
from __future__ import annotations

import aiohttp

from wandernav.infra.logging_config import get_logger

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Internal state
# ---------------------------------------------------------------------------

_sessions: dict[str, aiohttp.ClientSession] = {}


def _get_or_create(
    name: str,
    timeout: aiohttp.ClientTimeout,
    limit: int = 10,
) -> aiohttp.ClientSession:
    """Return an existing session or create a new one."""
    session = _sessions.get(name)
    if session is None or session.closed:
        session = aiohttp.ClientSession(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            connector=aiohttp.TCPConnector(
                keepalive_timeout=30,
                limit=limit,
                enable_cleanup_closed=True,
            ),
        )
        _sessions[name] = session
        logger.debug("HTTP session '%s' created (limit=%d)", name, limit)
    return session


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_api_session() -> aiohttp.ClientSession:
    """Session for WanderNav backend calls (search, weather, auth)."""
    return _get_or_create(
        "api",
        aiohttp.ClientTimeout(total=15, connect=5),
        limit=10,
    )


async def close_all_sessions() -> None:
    """Gracefully close every managed session.  Call during app shutdown."""
    for name in list(_sessions):
        session = _sessions.pop(name, None)
        if session is not None and not session.closed:
            await session.close()
            logger.debug("HTTP session '%s' closed", name)
