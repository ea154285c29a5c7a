"""
Shared fixtures for the test suite.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Set

import pytest
from fastapi.testclient import TestClient

from error_monitor.api.dependencies import get_error_cache
from error_monitor.main import app
from error_monitor.models.error import ErrorRecord
from error_monitor.services.error_cache import ErrorCache
from error_monitor.stores.memory import MemoryErrorStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FlakyStore(MemoryErrorStore):
    """Memory store that counts calls and fails on demand."""

    def __init__(self):
        super().__init__()
        self.fetch_calls = 0
        self.fail_fetch = False
        self.fail_update = False
        self.fail_create_ids: Set[str] = set()

    async def fetch_all(self) -> List[ErrorRecord]:
        self.fetch_calls += 1
        if self.fail_fetch:
            raise ConnectionError("database unreachable")
        return await super().fetch_all()

    async def create(self, record: ErrorRecord) -> ErrorRecord:
        if record.id in self.fail_create_ids:
            raise ConnectionError(f"insert of {record.id} failed")
        return await super().create(record)

    async def update(self, error_id: str, updates: Dict[str, Any]) -> bool:
        if self.fail_update:
            raise ConnectionError("database unreachable")
        return await super().update(error_id, updates)


BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def build_error(index: int = 0, **overrides: Any) -> ErrorRecord:
    """Build a canonical error record; index n is n minutes older than BASE_TIME."""
    fields = dict(
        id=f"error-{index}",
        workflow_id=f"wf-{index % 2}",
        workflow_name=f"Workflow {index % 2}",
        node_name="HTTP Request",
        error_message=f"Request {index} failed",
        timestamp=BASE_TIME - timedelta(minutes=index),
        execution_id=f"exec-{index}",
    )
    fields.update(overrides)
    return ErrorRecord(**fields)


@pytest.fixture
def make_error():
    """Factory for canonical error records."""
    return build_error


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def error_cache(store: FlakyStore, clock: FakeClock) -> ErrorCache:
    return ErrorCache(store, ttl_seconds=5.0, clock=clock)


@pytest.fixture
def client(error_cache: ErrorCache):
    """Test client wired to a fresh cache and store."""
    app.dependency_overrides[get_error_cache] = lambda: error_cache
    yield TestClient(app)
    app.dependency_overrides.clear()
