# ==============================================================================
# In-Memory Repository Implementation
# ==============================================================================
"""
In-memory EventRepository for local development and tests.

Keeps records in a list guarded by a lock; a batch is appended under the lock
in one step, so concurrent readers never observe half a batch.
"""

import copy
import logging
import threading
from datetime import datetime

from sitepulse.base.repositories import EventRepository

logger = logging.getLogger(__name__)


class InMemoryEventRepository(EventRepository):
    """In-memory event store (data is lost when the process exits)."""

    def __init__(self) -> None:
        self._events: list[dict] = []
        self._lock = threading.Lock()

    def connect(self) -> None:
        logger.info("InMemoryEventRepository ready")

    def save(self, events: list[dict]) -> int:
        if not events:
            return 0
        records = [copy.deepcopy(event) for event in events]
        with self._lock:
            self._events.extend(records)
        logger.debug("Stored %d events in memory", len(records))
        return len(records)

    def find(
        self,
        site_id: str,
        *,
        event_type: str | None = None,
        path: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[dict]:
        with self._lock:
            snapshot = list(self._events)

        result = []
        for event in snapshot:
            if event["site_id"] != site_id:
                continue
            if event_type is not None and event["type"] != event_type:
                continue
            if path is not None and event["path"] != path:
                continue
            if start is not None and event["timestamp"] < start:
                continue
            if end is not None and event["timestamp"] > end:
                continue
            result.append(copy.deepcopy(event))
        return result

    def get_all(self) -> list[dict]:
        """Get all stored events (for testing)."""
        with self._lock:
            return copy.deepcopy(self._events)

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass
