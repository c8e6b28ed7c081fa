# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- fakeredis-backed ValkeyCache and ValkeySessionRepository instances
- An in-memory event store
- A FastAPI TestClient wired to both, plus a valid bearer token
"""

import fakeredis
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from sitepulse.api import create_app
from sitepulse.core.models import epoch_to_datetime
from sitepulse.infrastructure.cache import ValkeyCache
from sitepulse.infrastructure.repositories import InMemoryEventRepository
from sitepulse.infrastructure.session_store import ValkeySessionRepository
from sitepulse.utils.config import AuthSettings, Settings, StoreSettings

TEST_SECRET = "test-secret"

# 2023-11-14 22:13:20 UTC
T0 = 1_700_000_000


@pytest.fixture()
def fake_redis():
    """A clean fakeredis instance for each test.

    Uses decode_responses=True to match the real ValkeyCache behavior.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture()
def fake_cache(fake_redis):
    """A ValkeyCache with its internal client replaced by fakeredis.

    This avoids needing a real Valkey/Redis server for unit tests.
    """
    # Create a ValkeyCache without connecting, then swap in the fake client
    cache = ValkeyCache.__new__(ValkeyCache)
    cache._client = fake_redis
    cache._url = "redis://fake:6379"
    return cache


@pytest.fixture()
def session_repository(fake_cache):
    """A ValkeySessionRepository backed by fakeredis."""
    return ValkeySessionRepository(cache=fake_cache)


@pytest.fixture()
def event_repository():
    """A fresh in-memory event store."""
    return InMemoryEventRepository()


@pytest.fixture()
def settings():
    """Settings using the memory backend and a known signing secret."""
    return Settings(
        store=StoreSettings(backend="memory"),
        auth=AuthSettings(secret_key=TEST_SECRET, algorithm="HS256"),
    )


@pytest.fixture()
def app(settings, event_repository, session_repository):
    """The API application with test stores injected."""
    return create_app(
        settings=settings,
        event_repository=event_repository,
        session_repository=session_repository,
    )


@pytest.fixture()
def client(app):
    """A TestClient with the lifespan handler running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers():
    """Authorization header carrying a valid token for user 'owner-1'."""
    token = jwt.encode({"userId": "owner-1"}, TEST_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


# ==============================================================================
# Record builders
# ==============================================================================


def _build_record(
    type_: str,
    *,
    session_id: str = "s1",
    path: str = "/",
    timestamp: float = T0,
    site_id: str = "site-1",
    **fields,
) -> dict:
    """Build a store record the way IngestionValidator produces them."""
    record = {
        "site_id": site_id,
        "session_id": session_id,
        "type": type_,
        "path": path,
        "url": None,
        "referrer": None,
        "x": None,
        "y": None,
        "viewport": None,
        "scrollY": None,
        "timestamp": epoch_to_datetime(timestamp),
    }
    record.update(fields)
    return record


@pytest.fixture()
def make_record():
    """Factory for store records (see _build_record)."""
    return _build_record
