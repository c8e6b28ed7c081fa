# ==============================================================================
# SitePulse Domain Models
# ==============================================================================
"""
Pydantic models for interaction events, server sessions and analytics results.

These models are used for:
- Validating raw events submitted by the browser collector
- Converting events into store records (and back to epoch seconds on reads)
- Typing the results returned by the aggregation engine

Raw events are a tagged union keyed by ``type``: each variant only carries the
fields that make sense for it, so a page view can never hold click coordinates.

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

import math
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

# Server-issued sessions always expire 30 minutes after creation
SESSION_TTL_SECONDS = 1800

# Scroll-depth thresholds reported by the funnel, in percent
SCROLL_THRESHOLDS = (25, 50, 75)


def epoch_to_datetime(seconds: float) -> datetime:
    """Convert client epoch seconds to a UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=UTC)


def datetime_to_epoch(value: datetime) -> int:
    """Convert a stored datetime back to whole epoch seconds (floored)."""
    return math.floor(value.timestamp())


class EventType(str, Enum):
    """Interaction types accepted from the collector."""

    PAGE_VIEW = "page_view"
    CLICK = "click"
    SCROLL = "scroll"


class Viewport(BaseModel):
    """Browser viewport dimensions in CSS pixels."""

    w: int = Field(..., description="Viewport width")
    h: int = Field(..., description="Viewport height")


class _BaseEvent(BaseModel):
    """Fields common to every interaction event."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    path: str = Field(..., min_length=1, description="Page path at time of event")
    timestamp: float = Field(..., allow_inf_nan=False, description="Unix timestamp in seconds")

    @field_validator("timestamp")
    @classmethod
    def _representable(cls, value: float) -> float:
        try:
            epoch_to_datetime(value)
        except (OverflowError, ValueError, OSError) as e:
            raise ValueError("timestamp out of range") from e
        return value

    @property
    def event_time(self) -> datetime:
        """Convert timestamp to a UTC datetime."""
        return epoch_to_datetime(self.timestamp)

    def _record_fields(self) -> dict:
        return {}

    def to_record(self, site_id: str, session_id: str) -> dict:
        """
        Convert event to the store record format.

        The batch-level site and session identifiers always win over any value
        the raw payload may have carried.
        """
        record = {
            "site_id": site_id,
            "session_id": session_id,
            "type": self.type,
            "path": self.path,
            "url": None,
            "referrer": None,
            "x": None,
            "y": None,
            "viewport": None,
            "scrollY": None,
            "timestamp": self.event_time,
        }
        record.update(self._record_fields())
        return record


class PageViewEvent(_BaseEvent):
    """A page load."""

    type: Literal["page_view"] = EventType.PAGE_VIEW.value
    url: str | None = None
    referrer: str | None = None

    def _record_fields(self) -> dict:
        return {"url": self.url, "referrer": self.referrer}


class ClickEvent(_BaseEvent):
    """A click at viewport coordinates."""

    type: Literal["click"] = EventType.CLICK.value
    x: int | None = None
    y: int | None = None
    viewport: Viewport | None = None

    def _record_fields(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "viewport": self.viewport.model_dump() if self.viewport else None,
        }


class ScrollEvent(_BaseEvent):
    """A (debounced) scroll position sample."""

    type: Literal["scroll"] = EventType.SCROLL.value
    scroll_y: float | None = Field(None, alias="scrollY", description="Pixels scrolled")
    viewport: Viewport | None = None

    def _record_fields(self) -> dict:
        return {
            "scrollY": self.scroll_y,
            "viewport": self.viewport.model_dump() if self.viewport else None,
        }


RawEvent = Annotated[
    Union[PageViewEvent, ClickEvent, ScrollEvent],
    Field(discriminator="type"),
]

raw_event_adapter: TypeAdapter[RawEvent] = TypeAdapter(RawEvent)


def parse_event(data: dict) -> PageViewEvent | ClickEvent | ScrollEvent:
    """Validate a raw event dict into its typed variant."""
    return raw_event_adapter.validate_python(data)


class ServerSession(BaseModel):
    """
    A server-issued session.

    Attributes:
        session_id: Opaque random identifier
        site_id: Site the session belongs to
        path: Page path the session was requested from
        started_at: Creation time
        expires_at: Always started_at + ttl
    """

    session_id: str
    site_id: str
    path: str
    started_at: datetime
    expires_at: datetime

    @classmethod
    def start(
        cls,
        session_id: str,
        site_id: str,
        path: str,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        now: datetime | None = None,
    ) -> "ServerSession":
        started_at = now or datetime.now(UTC)
        return cls(
            session_id=session_id,
            site_id=site_id,
            path=path,
            started_at=started_at,
            expires_at=started_at + timedelta(seconds=ttl_seconds),
        )

    @property
    def ttl_seconds(self) -> int:
        return int((self.expires_at - self.started_at).total_seconds())


class SessionGrant(BaseModel):
    """Response returned to the collector when a session is created."""

    session_id: str
    expires_in: int


class OverviewMetrics(BaseModel):
    """Site-wide traffic overview."""

    page_views: int = 0
    unique_sessions: int = 0
    avg_session_duration: int = Field(0, description="Seconds, rounded")
    first_event: int | None = Field(None, description="Unix timestamp in seconds")
    last_event: int | None = Field(None, description="Unix timestamp in seconds")


class PageMetrics(BaseModel):
    """Page view statistics for a single path."""

    path: str
    views: int
    unique_sessions: int
    first_view: int | None = None
    last_view: int | None = None


class HeatmapPoint(BaseModel):
    """A click heatmap bin in normalized viewport coordinates."""

    x: float
    y: float
    count: int


class ScrollDepth(BaseModel):
    """Number of sessions that scrolled at least ``percent`` of the page."""

    percent: int
    users: int
