# ==============================================================================
# Tests for Domain Models
# ==============================================================================
"""
Tests for the event union, record conversion, server sessions and the
epoch/datetime helpers in sitepulse.core.models.
"""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from sitepulse.core.models import (
    SESSION_TTL_SECONDS,
    ClickEvent,
    PageViewEvent,
    ScrollEvent,
    ServerSession,
    datetime_to_epoch,
    epoch_to_datetime,
    parse_event,
)

T0 = 1_700_000_000


# ==============================================================================
# Time helpers
# ==============================================================================


class TestEpochHelpers:
    """Tests for epoch_to_datetime / datetime_to_epoch."""

    def test_epoch_to_datetime_is_utc(self):
        dt = epoch_to_datetime(T0)
        assert dt.tzinfo is UTC
        assert dt == datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)

    def test_fractional_seconds_kept_on_write(self):
        dt = epoch_to_datetime(T0 + 0.75)
        assert dt.microsecond == 750000

    def test_datetime_to_epoch_floors(self):
        assert datetime_to_epoch(epoch_to_datetime(T0 + 0.99)) == T0


# ==============================================================================
# Event union
# ==============================================================================


class TestParseEvent:
    """Tests for the discriminated RawEvent union."""

    def test_page_view_variant(self):
        event = parse_event(
            {"type": "page_view", "path": "/", "timestamp": T0, "url": "https://a.test/"}
        )
        assert isinstance(event, PageViewEvent)
        assert event.url == "https://a.test/"
        assert event.referrer is None

    def test_click_variant(self):
        event = parse_event(
            {
                "type": "click",
                "path": "/",
                "timestamp": T0,
                "x": 10,
                "y": 20,
                "viewport": {"w": 100, "h": 200},
            }
        )
        assert isinstance(event, ClickEvent)
        assert (event.x, event.y) == (10, 20)
        assert event.viewport.w == 100

    def test_scroll_variant_reads_scrolly_alias(self):
        event = parse_event(
            {
                "type": "scroll",
                "path": "/",
                "timestamp": T0,
                "scrollY": 812.5,
                "viewport": {"w": 100, "h": 800},
            }
        )
        assert isinstance(event, ScrollEvent)
        assert event.scroll_y == 812.5

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_event({"type": "hover", "path": "/", "timestamp": T0})

    def test_non_numeric_timestamp_rejected(self):
        with pytest.raises(ValidationError):
            parse_event({"type": "page_view", "path": "/", "timestamp": "yesterday"})

    def test_fields_of_other_variants_ignored(self):
        event = parse_event(
            {"type": "page_view", "path": "/", "timestamp": T0, "x": 5, "scrollY": 10}
        )
        record = event.to_record("site-1", "s1")
        assert record["x"] is None
        assert record["scrollY"] is None


class TestToRecord:
    """Tests for converting events into store records."""

    def test_batch_ids_override_payload(self):
        event = parse_event(
            {
                "type": "page_view",
                "path": "/",
                "timestamp": T0,
                "site_id": "spoofed",
                "session_id": "spoofed",
            }
        )
        record = event.to_record("site-1", "s1")
        assert record["site_id"] == "site-1"
        assert record["session_id"] == "s1"

    def test_record_shape(self):
        event = parse_event(
            {
                "type": "scroll",
                "path": "/docs",
                "timestamp": T0,
                "scrollY": 400,
                "viewport": {"w": 1280, "h": 800},
            }
        )
        record = event.to_record("site-1", "s1")
        assert record == {
            "site_id": "site-1",
            "session_id": "s1",
            "type": "scroll",
            "path": "/docs",
            "url": None,
            "referrer": None,
            "x": None,
            "y": None,
            "viewport": {"w": 1280, "h": 800},
            "scrollY": 400.0,
            "timestamp": epoch_to_datetime(T0),
        }


# ==============================================================================
# Server sessions
# ==============================================================================


class TestServerSession:
    """Tests for ServerSession.start."""

    def test_expires_after_default_ttl(self):
        now = datetime(2024, 1, 1, tzinfo=UTC)
        session = ServerSession.start("abc", "site-1", "/", now=now)
        assert session.expires_at == now + timedelta(seconds=1800)
        assert session.ttl_seconds == SESSION_TTL_SECONDS

    def test_custom_ttl(self):
        now = datetime(2024, 1, 1, tzinfo=UTC)
        session = ServerSession.start("abc", "site-1", "/", ttl_seconds=60, now=now)
        assert session.ttl_seconds == 60
