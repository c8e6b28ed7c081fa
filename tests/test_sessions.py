# ==============================================================================
# Tests for Server Sessions
# ==============================================================================
"""
Tests for SessionTracker and the Valkey-backed session repository.

The repository runs against fakeredis, so TTL handling is exercised for real.
"""

import json
import re
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from sitepulse.core import InvalidRequestError, SessionTracker, StoreError
from sitepulse.infrastructure.session_store import ValkeySessionRepository

HEX_32 = re.compile(r"^[0-9a-f]{32}$")


# ==============================================================================
# SessionTracker
# ==============================================================================


class TestSessionTracker:
    """Tests for SessionTracker.create."""

    def test_grant_has_hex_id_and_fixed_expiry(self):
        repository = MagicMock()
        grant = SessionTracker(repository).create("site-1", "/")
        assert HEX_32.match(grant.session_id)
        assert grant.expires_in == 1800

    def test_session_persisted_with_ttl(self):
        repository = MagicMock()
        now = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        grant = SessionTracker(repository).create("site-1", "/pricing", now=now)

        repository.save.assert_called_once()
        saved, = repository.save.call_args.args
        assert repository.save.call_args.kwargs == {"ttl_seconds": 1800}
        assert saved["session_id"] == grant.session_id
        assert saved["site_id"] == "site-1"
        assert saved["path"] == "/pricing"
        assert saved["started_at"] == now
        assert saved["expires_at"] == now + timedelta(seconds=1800)

    def test_every_call_creates_a_new_session(self):
        tracker = SessionTracker(MagicMock())
        ids = {tracker.create("site-1", "/").session_id for _ in range(50)}
        assert len(ids) == 50

    @pytest.mark.parametrize("site_id,path", [("", "/"), ("site-1", ""), (None, None)])
    def test_missing_fields(self, site_id, path):
        repository = MagicMock()
        with pytest.raises(InvalidRequestError, match="site_id and path are required"):
            SessionTracker(repository).create(site_id, path)
        repository.save.assert_not_called()

    def test_custom_ttl(self):
        grant = SessionTracker(MagicMock(), ttl_seconds=60).create("site-1", "/")
        assert grant.expires_in == 60


# ==============================================================================
# ValkeySessionRepository
# ==============================================================================


class TestValkeySessionRepository:
    """Tests for session persistence on fakeredis."""

    def _session(self, session_id="abc") -> dict:
        started = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        return {
            "session_id": session_id,
            "site_id": "site-1",
            "path": "/",
            "started_at": started,
            "expires_at": started + timedelta(seconds=1800),
        }

    def test_stored_as_json(self, session_repository, fake_redis):
        session_repository.save(self._session(), ttl_seconds=1800)
        stored = json.loads(fake_redis.get("session:abc"))
        assert stored == {
            "session_id": "abc",
            "site_id": "site-1",
            "path": "/",
            "started_at": "2024-05-01T12:00:00+00:00",
            "expires_at": "2024-05-01T12:30:00+00:00",
        }

    def test_stored_with_ttl(self, session_repository, fake_redis):
        session_repository.save(self._session(), ttl_seconds=1800)
        ttl = fake_redis.ttl("session:abc")
        assert 0 < ttl <= 1800

    def test_ping(self, session_repository):
        assert session_repository.ping() is True

    def test_redis_failure_wrapped(self):
        cache = MagicMock()
        cache.set.side_effect = RedisConnectionError("connection refused")
        repository = ValkeySessionRepository(cache=cache)
        with pytest.raises(StoreError, match="Failed to save session"):
            repository.save(self._session(), ttl_seconds=1800)

    def test_close_releases_cache(self):
        cache = MagicMock()
        ValkeySessionRepository(cache=cache).close()
        cache.close.assert_called_once()

    def test_tracker_end_to_end(self, session_repository, fake_redis):
        grant = SessionTracker(session_repository).create("site-1", "/docs")
        stored = json.loads(fake_redis.get(f"session:{grant.session_id}"))
        assert stored["path"] == "/docs"
        assert 0 < fake_redis.ttl(f"session:{grant.session_id}") <= 1800


# ==============================================================================
# ValkeyCache
# ==============================================================================


class TestValkeyCache:
    """Tests for the expiring JSON writes used by the session store."""

    def test_set_writes_json_with_expiry(self, fake_cache, fake_redis):
        fake_cache.set("k", {"a": 1}, ttl_seconds=30)
        assert json.loads(fake_redis.get("k")) == {"a": 1}
        assert 0 < fake_redis.ttl("k") <= 30

    def test_set_overwrites_and_restarts_expiry(self, fake_cache, fake_redis):
        fake_cache.set("k", {"a": 1}, ttl_seconds=5)
        fake_cache.set("k", {"a": 2}, ttl_seconds=60)
        assert json.loads(fake_redis.get("k")) == {"a": 2}
        assert fake_redis.ttl("k") > 5

    def test_ping(self, fake_cache):
        assert fake_cache.ping() is True

    def test_ping_failure_returns_false(self, fake_cache):
        fake_cache._client = MagicMock()
        fake_cache._client.ping.side_effect = RedisConnectionError("refused")
        assert fake_cache.ping() is False
