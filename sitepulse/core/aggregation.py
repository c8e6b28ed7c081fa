# ==============================================================================
# Aggregation Engine
# ==============================================================================
"""
Read-side analytics computed from stored interaction events.

The summarize_* / bin_* functions are pure: they take a list of event records
(see EventRepository) and make a single pass over it, accumulating into a map
keyed by session id, path or rounded coordinate pair. AggregationEngine fetches
the site-scoped slice from the store and hands it to them.

Rounding follows round-half-up (2.5 -> 3, 0.125 -> 0.13) rather than Python's
banker's rounding, so bins and averages match what the dashboards already show.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime

from sitepulse.base import EventRepository
from sitepulse.core.errors import InvalidRequestError
from sitepulse.core.models import (
    SCROLL_THRESHOLDS,
    EventType,
    HeatmapPoint,
    OverviewMetrics,
    PageMetrics,
    ScrollDepth,
    datetime_to_epoch,
    epoch_to_datetime,
)

logger = logging.getLogger(__name__)

# Decimal places kept when binning normalized click coordinates (101x101 grid)
HEATMAP_PRECISION = 2


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals, halves rounding towards +infinity."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


@dataclass
class _SessionSpan:
    first: datetime
    last: datetime

    @property
    def duration_seconds(self) -> float:
        return (self.last - self.first).total_seconds()


@dataclass
class _PageStats:
    views: int = 0
    sessions: set[str] = field(default_factory=set)
    first: datetime | None = None
    last: datetime | None = None


# ==============================================================================
# Pure aggregations
# ==============================================================================


def summarize_overview(events: list[dict]) -> OverviewMetrics:
    """
    Compute the traffic overview for a slice of events.

    Sessions are grouped over every event type; single-event (zero duration)
    sessions count towards unique_sessions but not towards the average.
    first_event/last_event only consider page views.
    """
    page_views = 0
    first_view: datetime | None = None
    last_view: datetime | None = None
    spans: dict[str, _SessionSpan] = {}

    for event in events:
        timestamp = event["timestamp"]

        span = spans.get(event["session_id"])
        if span is None:
            spans[event["session_id"]] = _SessionSpan(first=timestamp, last=timestamp)
        else:
            span.first = min(span.first, timestamp)
            span.last = max(span.last, timestamp)

        if event["type"] == EventType.PAGE_VIEW.value:
            page_views += 1
            if first_view is None or timestamp < first_view:
                first_view = timestamp
            if last_view is None or timestamp > last_view:
                last_view = timestamp

    durations = [span.duration_seconds for span in spans.values()]
    positive = [d for d in durations if d > 0]
    avg_duration = int(round_half_up(sum(positive) / len(positive))) if positive else 0

    return OverviewMetrics(
        page_views=page_views,
        unique_sessions=len(spans),
        avg_session_duration=avg_duration,
        first_event=datetime_to_epoch(first_view) if first_view else None,
        last_event=datetime_to_epoch(last_view) if last_view else None,
    )


def summarize_pages(events: list[dict]) -> list[PageMetrics]:
    """
    Per-path page view statistics, most viewed first.

    Only page_view events are counted. Paths with equal view counts keep the
    order in which they first appeared in ``events``.
    """
    pages: dict[str, _PageStats] = {}

    for event in events:
        if event["type"] != EventType.PAGE_VIEW.value:
            continue
        timestamp = event["timestamp"]
        stats = pages.setdefault(event["path"], _PageStats())
        stats.views += 1
        stats.sessions.add(event["session_id"])
        if stats.first is None or timestamp < stats.first:
            stats.first = timestamp
        if stats.last is None or timestamp > stats.last:
            stats.last = timestamp

    result = [
        PageMetrics(
            path=path,
            views=stats.views,
            unique_sessions=len(stats.sessions),
            first_view=datetime_to_epoch(stats.first) if stats.first else None,
            last_view=datetime_to_epoch(stats.last) if stats.last else None,
        )
        for path, stats in pages.items()
    ]
    return sorted(result, key=lambda page: page.views, reverse=True)


def bin_clicks(events: list[dict]) -> list[HeatmapPoint]:
    """
    Bin clicks by their position relative to the viewport.

    Clicks without coordinates or a usable viewport are skipped. Normalized
    positions are not clamped, so clicks outside the reported viewport land
    in bins beyond [0, 1].
    """
    bins: dict[tuple[float, float], int] = {}

    for event in events:
        x, y, viewport = event.get("x"), event.get("y"), event.get("viewport")
        if x is None or y is None or not viewport:
            continue
        width, height = viewport.get("w"), viewport.get("h")
        if not width or not height or width <= 0 or height <= 0:
            continue

        key = (
            round_half_up(x / width, HEATMAP_PRECISION),
            round_half_up(y / height, HEATMAP_PRECISION),
        )
        bins[key] = bins.get(key, 0) + 1

    ranked = sorted(bins.items(), key=lambda item: item[1], reverse=True)
    return [HeatmapPoint(x=bx, y=by, count=count) for (bx, by), count in ranked]


def scroll_percent(scroll_y: float, viewport_height: float) -> int:
    """
    Estimate how far down the page a scroll position is.

    The document height is unknown, so it is approximated as
    ``scroll_y + viewport_height``.
    """
    estimated_height = scroll_y + viewport_height
    if estimated_height <= 0:
        return 0
    return min(100, int(round_half_up(scroll_y / estimated_height * 100)))


def scroll_funnel(events: list[dict]) -> list[ScrollDepth]:
    """
    Count sessions whose deepest scroll reached each threshold.

    Returns an empty list when there are no scroll events at all.
    """
    if not events:
        return []

    deepest: dict[str, int] = {}
    for event in events:
        scroll_y = event.get("scrollY")
        viewport = event.get("viewport") or {}
        height = viewport.get("h")
        if scroll_y is None or not height:
            continue

        percent = scroll_percent(scroll_y, height)
        current = deepest.get(event["session_id"])
        if current is None or percent > current:
            deepest[event["session_id"]] = percent

    return [
        ScrollDepth(percent=threshold, users=sum(1 for d in deepest.values() if d >= threshold))
        for threshold in SCROLL_THRESHOLDS
    ]


# ==============================================================================
# Store-backed engine
# ==============================================================================


def _bound(seconds: int | None) -> datetime | None:
    if seconds is None:
        return None
    try:
        return epoch_to_datetime(seconds)
    except (OverflowError, ValueError, OSError) as e:
        raise InvalidRequestError("from/to out of range") from e


class AggregationEngine:
    """
    Answers analytics queries against an EventRepository.

    Time bounds are inclusive epoch seconds; None leaves that side open.
    """

    def __init__(self, repository: EventRepository):
        self._repository = repository

    def _fetch(
        self,
        site_id: str,
        event_type: EventType | None,
        path: str | None,
        start: int | None,
        end: int | None,
    ) -> list[dict]:
        events = self._repository.find(
            site_id,
            event_type=event_type.value if event_type else None,
            path=path,
            start=_bound(start),
            end=_bound(end),
        )
        logger.debug(
            "Fetched %d events (site=%s, type=%s, path=%s)",
            len(events),
            site_id,
            event_type.value if event_type else "*",
            path or "*",
        )
        return events

    def overview(
        self, site_id: str, start: int | None = None, end: int | None = None
    ) -> OverviewMetrics:
        if not site_id:
            raise InvalidRequestError("site_id is required")
        return summarize_overview(self._fetch(site_id, None, None, start, end))

    def pages(
        self, site_id: str, start: int | None = None, end: int | None = None
    ) -> list[PageMetrics]:
        if not site_id:
            raise InvalidRequestError("site_id is required")
        return summarize_pages(self._fetch(site_id, EventType.PAGE_VIEW, None, start, end))

    def click_heatmap(
        self, site_id: str, path: str, start: int | None = None, end: int | None = None
    ) -> list[HeatmapPoint]:
        if not site_id or not path:
            raise InvalidRequestError("site_id and path are required")
        return bin_clicks(self._fetch(site_id, EventType.CLICK, path, start, end))

    def scroll_depth(
        self, site_id: str, path: str, start: int | None = None, end: int | None = None
    ) -> list[ScrollDepth]:
        if not site_id or not path:
            raise InvalidRequestError("site_id and path are required")
        return scroll_funnel(self._fetch(site_id, EventType.SCROLL, path, start, end))
