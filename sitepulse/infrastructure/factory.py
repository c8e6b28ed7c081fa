# ==============================================================================
# Repository Factory
# ==============================================================================
"""
Factory functions for creating store instances.

Uses STORE_BACKEND environment variable (via config) to determine which
event store implementation to use.
"""

from sitepulse.base import EventRepository, SessionRepository
from sitepulse.utils.config import Settings, get_settings


def create_event_repository(settings: Settings | None = None) -> EventRepository:
    """
    Get an event repository based on configuration.

    The backend is determined by the STORE_BACKEND environment variable:
    - "postgresql" (default): PostgreSQL via a psycopg2 connection pool
    - "memory": In-process list, for development only

    The returned repository is not yet connected.

    Raises:
        ValueError: If unknown backend is configured
    """
    settings = settings or get_settings()
    backend = settings.store.backend

    match backend:
        case "postgresql":
            from sitepulse.infrastructure.repositories import PostgreSQLEventRepository

            return PostgreSQLEventRepository(settings)
        case "memory":
            from sitepulse.infrastructure.repositories import InMemoryEventRepository

            return InMemoryEventRepository()
        case _:
            raise ValueError(
                f"Unknown store backend: '{backend}'.\n"
                "Valid options are: postgresql, memory"
            )


def create_session_repository(settings: Settings | None = None) -> SessionRepository:
    """Get the Valkey-backed session repository."""
    from sitepulse.infrastructure.cache import ValkeyCache
    from sitepulse.infrastructure.session_store import ValkeySessionRepository

    settings = settings or get_settings()
    return ValkeySessionRepository(ValkeyCache(url=settings.valkey.url))
