# ==============================================================================
# Event Collector
# ==============================================================================
"""
Client-side emitter implementing the collector delivery contract.

Events are buffered in memory and POSTed as one batch to the ingestion
endpoint, either periodically from a background thread or when the collector
is closed. Delivery is fire-and-forget: a failed batch is logged and dropped,
never retried and never raised to the caller.

Usage:
    with EventCollector("http://localhost:3000", "site-1") as collector:
        collector.page_view("/pricing", url="http://shop.test/pricing")
        collector.click("/pricing", 640, 120, Viewport(w=1280, h=800))
"""

import logging
import math
import threading
import time
import uuid
from typing import Any, Mapping

import requests

from sitepulse.core.models import EventType, Viewport

logger = logging.getLogger(__name__)

# Browser collector flushes every 3 seconds
DEFAULT_FLUSH_INTERVAL = 3.0
DEFAULT_TIMEOUT = 5.0

EVENTS_ENDPOINT = "/api/v1/events"


def _viewport_dict(viewport: Viewport | tuple[int, int] | Mapping[str, int]) -> dict[str, int]:
    if isinstance(viewport, Viewport):
        return viewport.model_dump()
    if isinstance(viewport, Mapping):
        return {"w": int(viewport["w"]), "h": int(viewport["h"])}
    w, h = viewport
    return {"w": int(w), "h": int(h)}


class EventCollector:
    """
    Buffers interaction events for one site and session and ships them in batches.

    Thread-safe: events may be recorded from any thread while the flush loop
    runs in the background.
    """

    def __init__(
        self,
        api_base: str,
        site_id: str,
        session_id: str | None = None,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        http: requests.Session | None = None,
    ):
        """
        Initialize the collector.

        Args:
            api_base: Base URL of the SitePulse API (e.g. http://localhost:3000)
            site_id: Site the events belong to
            session_id: Client session key (defaults to a random UUID4)
            flush_interval: Seconds between background flushes
            timeout: HTTP timeout for one batch POST
            http: requests.Session to send with (one is created if None)
        """
        self.api_base = api_base.rstrip("/")
        self.site_id = site_id
        self.session_id = session_id or str(uuid.uuid4())
        self.flush_interval = flush_interval
        self.timeout = timeout

        self._owns_http = http is None
        self._http = http or requests.Session()
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}{EVENTS_ENDPOINT}"

    @property
    def pending(self) -> int:
        """Number of buffered events not yet sent."""
        with self._lock:
            return len(self._buffer)

    # ==========================================================================
    # Recording
    # ==========================================================================

    def track(self, event: Mapping[str, Any]) -> None:
        """Buffer a raw event, stamping it with the current time if needed."""
        record = dict(event)
        record.setdefault("timestamp", math.floor(time.time()))
        with self._lock:
            self._buffer.append(record)

    def page_view(self, path: str, url: str | None = None, referrer: str | None = None) -> None:
        self.track(
            {"type": EventType.PAGE_VIEW.value, "path": path, "url": url, "referrer": referrer}
        )

    def click(self, path: str, x: int, y: int, viewport) -> None:
        self.track(
            {
                "type": EventType.CLICK.value,
                "path": path,
                "x": x,
                "y": y,
                "viewport": _viewport_dict(viewport),
            }
        )

    def scroll(self, path: str, scroll_y: float, viewport) -> None:
        self.track(
            {
                "type": EventType.SCROLL.value,
                "path": path,
                "scrollY": scroll_y,
                "viewport": _viewport_dict(viewport),
            }
        )

    # ==========================================================================
    # Delivery
    # ==========================================================================

    def flush(self) -> bool:
        """
        Send all buffered events as one batch.

        Returns:
            True if the batch was accepted (or there was nothing to send),
            False if it was dropped
        """
        with self._lock:
            batch, self._buffer = self._buffer, []
        if not batch:
            return True

        payload = {"site_id": self.site_id, "session_id": self.session_id, "events": batch}
        try:
            response = self._http.post(self.endpoint, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("Dropped batch of %d events for site %s: %s", len(batch), self.site_id, e)
            return False

        logger.debug("Delivered batch of %d events for site %s", len(batch), self.site_id)
        return True

    def _run(self) -> None:
        while not self._stop.wait(self.flush_interval):
            self.flush()

    def start(self) -> "EventCollector":
        """Start the background flush loop (no-op if already running)."""
        if self._thread is None or not self._thread.is_alive():
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._run, name="sitepulse-collector", daemon=True
            )
            self._thread.start()
        return self

    def close(self) -> bool:
        """
        Stop the flush loop and send whatever is still buffered.

        Returns:
            Result of the final flush
        """
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.flush_interval + self.timeout)
            self._thread = None
        delivered = self.flush()
        if self._owns_http:
            self._http.close()
        return delivered

    def __enter__(self) -> "EventCollector":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
