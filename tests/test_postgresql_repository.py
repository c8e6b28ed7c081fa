# ==============================================================================
# Tests for PostgreSQLEventRepository
# ==============================================================================
"""
Tests for the PostgreSQL event store with the connection pool mocked out.

Verifies transaction handling (one commit per batch, rollback on failure,
connections always returned to the pool) and row mapping in both directions.
"""

from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from sitepulse.core import StoreError
from sitepulse.core.models import epoch_to_datetime
from sitepulse.infrastructure.repositories.postgresql import (
    PostgreSQLEventRepository,
    _from_row,
    _to_row,
)

T0 = 1_700_000_000

MODULE = "sitepulse.infrastructure.repositories.postgresql"


@pytest.fixture()
def pool():
    """A mocked ThreadedConnectionPool handing out one mocked connection."""
    pool = MagicMock()
    conn = MagicMock()
    cursor = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    pool.getconn.return_value = conn
    return pool


@pytest.fixture()
def repository(settings, pool):
    repo = PostgreSQLEventRepository(settings)
    repo._pool = pool
    return repo


# ==============================================================================
# Row mapping
# ==============================================================================


class TestRowMapping:
    """Tests for _to_row / _from_row."""

    def test_to_row_flattens_viewport(self, make_record):
        row = _to_row(make_record("scroll", scrollY=420.5, viewport={"w": 1280, "h": 800}))
        assert row["viewport_w"] == 1280
        assert row["viewport_h"] == 800
        assert row["scroll_y"] == 420.5
        assert row["event_time"] == epoch_to_datetime(T0)

    def test_to_row_without_viewport(self, make_record):
        row = _to_row(make_record("page_view", url="https://a.test/"))
        assert row["viewport_w"] is None
        assert row["url"] == "https://a.test/"

    def test_from_row_rebuilds_record(self):
        when = epoch_to_datetime(T0)
        row = ("site-1", "s1", "click", "/", None, None, 10, 20, 1000, 800, None, when)
        record = _from_row(row)
        assert record["viewport"] == {"w": 1000, "h": 800}
        assert record["x"] == 10
        assert record["scrollY"] is None
        assert record["timestamp"] == when

    def test_from_row_without_viewport(self):
        row = ("site-1", "s1", "page_view", "/", "u", "r", None, None, None, None, None, None)
        assert _from_row(row)["viewport"] is None


# ==============================================================================
# save
# ==============================================================================


class TestSave:
    """Tests for batch inserts."""

    def test_single_commit_per_batch(self, repository, pool, make_record):
        conn = pool.getconn.return_value
        with patch(f"{MODULE}.execute_batch") as execute_batch:
            saved = repository.save([make_record("page_view"), make_record("click")])

        assert saved == 2
        execute_batch.assert_called_once()
        sql, rows = execute_batch.call_args.args[1:3]
        assert "INSERT INTO sitepulse.events" in sql
        assert "::sitepulse.event_type" in sql
        assert len(rows) == 2
        conn.commit.assert_called_once()
        pool.putconn.assert_called_once_with(conn)

    def test_failure_rolls_back_and_raises(self, repository, pool, make_record):
        conn = pool.getconn.return_value
        with patch(f"{MODULE}.execute_batch", side_effect=psycopg2.OperationalError("gone")):
            with pytest.raises(StoreError, match="Failed to save events"):
                repository.save([make_record("page_view")])

        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()
        pool.putconn.assert_called_once_with(conn)

    def test_empty_batch_skips_database(self, repository, pool):
        assert repository.save([]) == 0
        pool.getconn.assert_not_called()

    def test_requires_connect(self, settings, make_record):
        repo = PostgreSQLEventRepository(settings)
        with pytest.raises(RuntimeError, match="connect"):
            repo.save([make_record("page_view")])


# ==============================================================================
# find
# ==============================================================================


class TestFind:
    """Tests for filtered reads."""

    def test_site_only(self, repository, pool):
        cursor = pool.getconn.return_value.cursor.return_value.__enter__.return_value
        cursor.fetchall.return_value = []

        assert repository.find("site-1") == []
        query, params = cursor.execute.call_args.args
        assert "WHERE site_id = %s ORDER BY id" in query
        assert params == ["site-1"]

    def test_all_filters(self, repository, pool):
        cursor = pool.getconn.return_value.cursor.return_value.__enter__.return_value
        when = epoch_to_datetime(T0)
        cursor.fetchall.return_value = [
            ("site-1", "s1", "click", "/", None, None, 1, 2, 100, 100, None, when)
        ]
        start, end = epoch_to_datetime(T0 - 10), epoch_to_datetime(T0 + 10)

        records = repository.find("site-1", event_type="click", path="/", start=start, end=end)

        query, params = cursor.execute.call_args.args
        assert "type = %s::sitepulse.event_type" in query
        assert "path = %s" in query
        assert "event_time >= %s" in query
        assert "event_time <= %s" in query
        assert params == ["site-1", "click", "/", start, end]
        assert records[0]["type"] == "click"
        assert records[0]["timestamp"] == when

    def test_read_error_wrapped(self, repository, pool):
        conn = pool.getconn.return_value
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.execute.side_effect = psycopg2.InterfaceError("closed")

        with pytest.raises(StoreError, match="Failed to read events"):
            repository.find("site-1")
        conn.rollback.assert_called_once()
        pool.putconn.assert_called_once_with(conn)


# ==============================================================================
# ping / close
# ==============================================================================


class TestLifecycle:
    """Tests for ping and close."""

    def test_ping_without_pool(self, settings):
        assert PostgreSQLEventRepository(settings).ping() is False

    def test_ping(self, repository):
        assert repository.ping() is True

    def test_close_releases_pool(self, repository, pool):
        repository.close()
        pool.closeall.assert_called_once()
        assert repository.ping() is False
