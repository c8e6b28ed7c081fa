# ==============================================================================
# Repository Abstract Base Classes
# ==============================================================================
"""
Repository ABCs for data persistence.

These define the "what" (append events, look up sessions) not the "how".
Concrete implementations in infrastructure/ handle the specifics.

Includes:
- EventRepository: Append-only interaction event store with range reads
- SessionRepository: Server-issued session persistence with expiry

Note: Cache is in a separate module (cache.py) since it is not a traditional
repository (collection of domain objects).
"""

from abc import ABC, abstractmethod
from datetime import datetime


class EventRepository(ABC):
    """
    Repository for interaction events.

    Records are plain dicts with keys: site_id, session_id, type, path, url,
    referrer, x, y, viewport ({"w", "h"} or None), scrollY and timestamp
    (timezone-aware datetime).
    """

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data store."""
        ...

    @abstractmethod
    def save(self, events: list[dict]) -> int:
        """
        Append events as one atomic unit.

        Either every record is persisted or none is.

        Args:
            events: List of event records to persist

        Returns:
            Count of events saved

        Raises:
            StoreError: If the write fails
        """
        ...

    @abstractmethod
    def find(
        self,
        site_id: str,
        *,
        event_type: str | None = None,
        path: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[dict]:
        """
        Fetch events for a site, optionally narrowed by type, path and time.

        Args:
            site_id: Site partition key
            event_type: Only return events of this type
            path: Only return events for this page path
            start: Inclusive lower bound on timestamp
            end: Inclusive upper bound on timestamp

        Returns:
            Matching event records in store order

        Raises:
            StoreError: If the read fails
        """
        ...

    @abstractmethod
    def ping(self) -> bool:
        """Check whether the store is reachable."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close connection and release resources."""
        ...


class SessionRepository(ABC):
    """Repository for server-issued sessions."""

    @abstractmethod
    def save(self, session: dict, ttl_seconds: int) -> None:
        """
        Persist a session that becomes eligible for removal after ttl_seconds.

        Args:
            session: Session dict (session_id, site_id, path, started_at, expires_at)
            ttl_seconds: Time-to-live for the record

        Raises:
            StoreError: If the write fails
        """
        ...

    @abstractmethod
    def ping(self) -> bool:
        """Check whether the store is reachable."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close connection and release resources."""
        ...
