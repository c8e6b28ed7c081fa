# ==============================================================================
# Session Repository Implementation (Valkey/Redis)
# ==============================================================================
"""
Valkey/Redis implementation of the SessionRepository interface.

Sessions are stored as JSON values under ``session:{session_id}`` with a TTL
equal to their lifetime, so Valkey removes them once they expire. Nothing
ever refreshes or rewrites a stored session.
"""

import logging

from redis.exceptions import RedisError

from sitepulse.base import Cache, SessionRepository
from sitepulse.core.errors import StoreError
from sitepulse.infrastructure.cache import ValkeyCache

logger = logging.getLogger(__name__)

# Key prefix for server-issued sessions
SESSION_KEY_PREFIX = "session:"


def session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


class ValkeySessionRepository(SessionRepository):
    """Session persistence backed by a Cache with TTL support."""

    def __init__(self, cache: Cache | None = None):
        self._cache = cache or ValkeyCache()

    def save(self, session: dict, ttl_seconds: int) -> None:
        value = {
            "session_id": session["session_id"],
            "site_id": session["site_id"],
            "path": session["path"],
            "started_at": session["started_at"].isoformat(),
            "expires_at": session["expires_at"].isoformat(),
        }
        try:
            self._cache.set(session_key(session["session_id"]), value, ttl_seconds=ttl_seconds)
        except RedisError as e:
            raise StoreError(f"Failed to save session: {e}") from e
        logger.debug("Saved session %s (ttl=%ds)", session["session_id"], ttl_seconds)

    def ping(self) -> bool:
        return self._cache.ping()

    def close(self) -> None:
        self._cache.close()
