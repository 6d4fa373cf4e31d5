"""Pytest configuration and fixtures"""
import pytest
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wandernav.core.search.errors import NetworkError  # noqa: E402
from wandernav.core.search.ports import DeviceCoordinates  # noqa: E402
from wandernav.infra.metrics import get_metrics_collector  # noqa: E402
from wandernav.transport.schemas import RawResult  # noqa: E402


class FakeSearchClient:
    """Records calls; returns canned rows or raises NetworkError"""

    def __init__(self, rows=None, error: Exception | None = None, gate=None):
        self.rows = rows or []
        self.error = error
        self.gate = gate  # asyncio.Event to hold the call open
        self.calls = []

    async def search(self, query, tab, *, near=None):
        self.calls.append((query, tab, near))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return [RawResult.model_validate(row) for row in self.rows]


class FakeLocationProvider:
    def __init__(self, coords=None, granted=True, error: Exception | None = None, gate=None):
        self.coords = coords or DeviceCoordinates(latitude=34.0, longitude=-118.0)
        self.granted = granted
        self.error = error
        self.gate = gate
        self.permission_requests = 0
        self.position_requests = 0

    async def request_permission(self) -> bool:
        self.permission_requests += 1
        return self.granted

    async def get_current_position(self, accuracy: str) -> DeviceCoordinates:
        self.position_requests += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.coords


class RecordingNavigator:
    def __init__(self):
        self.intents = []

    def navigate(self, intent) -> None:
        self.intents.append(intent)


class RecordingAlerts:
    def __init__(self):
        self.alerts = []

    def alert(self, title: str, message: str) -> None:
        self.alerts.append((title, message))


@pytest.fixture(autouse=True)
def reset_metrics():
    get_metrics_collector().reset()
    yield


@pytest.fixture
def search_client():
    return FakeSearchClient(rows=[
        {"id": "p1", "name": "Central Park", "description": "Popular park", "latitude": 34.05, "longitude": -118.24},
    ])


@pytest.fixture
def failing_client():
    return FakeSearchClient(error=NetworkError("connection refused"))


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def alerts():
    return RecordingAlerts()
