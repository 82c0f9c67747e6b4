# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- An event factory with sensible defaults
- A fakeredis-backed ValkeySnapshotStore
- Isolated settings (no .env leakage, cache cleared per test)
"""

from datetime import datetime, timedelta

import fakeredis
import pytest

from insights.base.snapshots import RetentionPolicy
from insights.core.models import RawEvent
from insights.infrastructure.snapshots import ValkeySnapshotStore
from insights.utils.config import get_settings

BASE_TIME = datetime(2024, 3, 4, 10, 0, 0)  # a Monday


def make_event(event_type: str = "page_view", offset: float = 0, **fields) -> RawEvent:
    """Build a RawEvent ``offset`` seconds after BASE_TIME."""
    data = {
        "session_id": "s1",
        "visitor_id": "v1",
        "event_type": event_type,
        "created_at": BASE_TIME + timedelta(seconds=offset),
        "page_url": "https://example.com/",
    }
    data.update(fields)
    return RawEvent.model_validate(data)


@pytest.fixture()
def event():
    """The make_event factory."""
    return make_event


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def fake_redis():
    """A clean fakeredis instance for each test.

    Uses decode_responses=True to match the real Valkey client behavior.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture()
def valkey_store(fake_redis):
    """A ValkeySnapshotStore backed by fakeredis, keeping 3 snapshots."""
    return ValkeySnapshotStore(
        client=fake_redis, key="test:snapshots", policy=RetentionPolicy(max_items=3)
    )
