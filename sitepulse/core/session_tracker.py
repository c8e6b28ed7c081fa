# ==============================================================================
# Session Tracker
# ==============================================================================
"""
Issues short-lived server-side session identifiers.

Every call creates a brand new session; there is no lookup of existing ones
and no uniqueness re-check, since 128 random bits make collisions negligible.
These sessions are independent of the collector's own client-side id.
"""

import logging
import secrets
from datetime import datetime

from sitepulse.base import SessionRepository
from sitepulse.core.errors import InvalidRequestError
from sitepulse.core.models import SESSION_TTL_SECONDS, ServerSession, SessionGrant

logger = logging.getLogger(__name__)

# Random bytes per session id (hex-encoded to 32 characters)
SESSION_ID_BYTES = 16


class SessionTracker:
    """
    Create server sessions with a fixed lifetime.

    Args:
        repository: Session store; records expire after ttl_seconds
        ttl_seconds: Session lifetime, reported back as ``expires_in``
    """

    def __init__(self, repository: SessionRepository, ttl_seconds: int = SESSION_TTL_SECONDS):
        self._repository = repository
        self.ttl_seconds = ttl_seconds

    def create(self, site_id: str, path: str, now: datetime | None = None) -> SessionGrant:
        """
        Create and persist a new session.

        Args:
            site_id: Site the visitor is on
            path: Page path the session was requested from
            now: Override of the creation time (for testing)

        Returns:
            SessionGrant with the new id and its lifetime in seconds

        Raises:
            InvalidRequestError: If site_id or path is missing
            StoreError: If the session could not be persisted
        """
        if not site_id or not path:
            raise InvalidRequestError("site_id and path are required")

        session = ServerSession.start(
            session_id=secrets.token_hex(SESSION_ID_BYTES),
            site_id=site_id,
            path=path,
            ttl_seconds=self.ttl_seconds,
            now=now,
        )
        self._repository.save(session.model_dump(), ttl_seconds=self.ttl_seconds)

        logger.debug("Created session %s for site %s", session.session_id, site_id)
        return SessionGrant(session_id=session.session_id, expires_in=self.ttl_seconds)
