# ==============================================================================
# PostgreSQL Repository Implementation
# ==============================================================================
"""
PostgreSQL implementation of the EventRepository interface.

Each batch is written inside a single transaction, so a failed insert leaves
no partial batch behind. Reads go through the (site_id, event_time) and
(site_id, path, event_time) indexes created by schema/init.sql.
"""

import logging
from datetime import datetime

import psycopg2
from psycopg2.extras import execute_batch
from psycopg2.pool import ThreadedConnectionPool

from sitepulse.base.repositories import EventRepository
from sitepulse.core.errors import StoreError
from sitepulse.utils.config import Settings, get_settings
from sitepulse.utils.retry import POSTGRES_RETRY_EXCEPTIONS, retry_standard

logger = logging.getLogger(__name__)

# Batch size for execute_batch
PAGE_SIZE = 1000

# Connection timeout
CONNECT_TIMEOUT = 10

# Columns returned by find(), in SELECT order
_COLUMNS = (
    "site_id",
    "session_id",
    "type",
    "path",
    "url",
    "referrer",
    "x",
    "y",
    "viewport_w",
    "viewport_h",
    "scroll_y",
    "event_time",
)


def _add_connect_timeout(conn_string: str) -> str:
    """Add connect_timeout to connection string if not present."""
    if "connect_timeout" not in conn_string:
        separator = "&" if "?" in conn_string else "?"
        return f"{conn_string}{separator}connect_timeout={CONNECT_TIMEOUT}"
    return conn_string


def _to_row(event: dict) -> dict:
    """Flatten an event record into insert parameters."""
    viewport = event.get("viewport") or {}
    return {
        "site_id": event["site_id"],
        "session_id": event["session_id"],
        "type": event["type"],
        "path": event["path"],
        "url": event.get("url"),
        "referrer": event.get("referrer"),
        "x": event.get("x"),
        "y": event.get("y"),
        "viewport_w": viewport.get("w"),
        "viewport_h": viewport.get("h"),
        "scroll_y": event.get("scrollY"),
        "event_time": event["timestamp"],
    }


def _from_row(row: tuple) -> dict:
    """Rebuild an event record from a SELECT row."""
    data = dict(zip(_COLUMNS, row))
    viewport = None
    if data["viewport_w"] is not None or data["viewport_h"] is not None:
        viewport = {"w": data["viewport_w"], "h": data["viewport_h"]}
    return {
        "site_id": data["site_id"],
        "session_id": data["session_id"],
        "type": data["type"],
        "path": data["path"],
        "url": data["url"],
        "referrer": data["referrer"],
        "x": data["x"],
        "y": data["y"],
        "viewport": viewport,
        "scrollY": data["scroll_y"],
        "timestamp": data["event_time"],
    }


class PostgreSQLEventRepository(EventRepository):
    """
    PostgreSQL implementation of EventRepository.

    Uses a ThreadedConnectionPool so concurrent API requests never share a
    transaction, and psycopg2.extras.execute_batch() for bulk inserts.
    No ON CONFLICT clause: retried batches are stored again.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the event repository.

        Args:
            settings: Application settings. If None, uses get_settings().
        """
        self._settings = settings or get_settings()
        self._pool: ThreadedConnectionPool | None = None
        self._schema = self._settings.postgres.schema_name

    @property
    def schema(self) -> str:
        """Get the database schema name."""
        return self._schema

    @retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
    def connect(self) -> None:
        """Open the connection pool."""
        pg = self._settings.postgres
        self._pool = ThreadedConnectionPool(
            pg.pool_min,
            pg.pool_max,
            _add_connect_timeout(pg.connection_string),
        )
        logger.info("PostgreSQLEventRepository connected (schema=%s)", self._schema)

    def _getconn(self):
        if self._pool is None:
            raise RuntimeError("PostgreSQL connection not established. Call connect() first.")
        try:
            return self._pool.getconn()
        except psycopg2.Error as e:
            raise StoreError(f"Failed to acquire database connection: {e}") from e

    def _rollback(self, conn) -> None:
        try:
            conn.rollback()
        except psycopg2.Error as e:
            logger.warning("Rollback failed: %s", e)

    def save(self, events: list[dict]) -> int:
        """
        Insert all events in one transaction.

        Args:
            events: Event records (see EventRepository)

        Returns:
            Count of events saved

        Raises:
            StoreError: If any insert fails; nothing from the batch is kept
        """
        if not events:
            return 0

        rows = [_to_row(event) for event in events]
        conn = self._getconn()
        try:
            with conn.cursor() as cur:
                execute_batch(
                    cur,
                    f"""
                    INSERT INTO {self._schema}.events
                        (site_id, session_id, type, path, url, referrer,
                         x, y, viewport_w, viewport_h, scroll_y, event_time)
                    VALUES
                        (%(site_id)s, %(session_id)s, %(type)s::{self._schema}.event_type,
                         %(path)s, %(url)s, %(referrer)s, %(x)s, %(y)s,
                         %(viewport_w)s, %(viewport_h)s, %(scroll_y)s, %(event_time)s)
                    """,
                    rows,
                    page_size=PAGE_SIZE,
                )
            conn.commit()
        except psycopg2.Error as e:
            self._rollback(conn)
            raise StoreError(f"Failed to save events: {e}") from e
        finally:
            self._pool.putconn(conn)

        logger.debug("Inserted %d events", len(rows))
        return len(rows)

    def find(
        self,
        site_id: str,
        *,
        event_type: str | None = None,
        path: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[dict]:
        """Fetch matching events ordered by insertion."""
        clauses = ["site_id = %s"]
        params: list = [site_id]
        if event_type is not None:
            clauses.append(f"type = %s::{self._schema}.event_type")
            params.append(event_type)
        if path is not None:
            clauses.append("path = %s")
            params.append(path)
        if start is not None:
            clauses.append("event_time >= %s")
            params.append(start)
        if end is not None:
            clauses.append("event_time <= %s")
            params.append(end)

        query = (
            f"SELECT {', '.join(_COLUMNS)} FROM {self._schema}.events "
            f"WHERE {' AND '.join(clauses)} ORDER BY id"
        )

        conn = self._getconn()
        try:
            with conn.cursor() as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
            # End the read-only transaction so the pooled connection is clean
            conn.commit()
        except psycopg2.Error as e:
            self._rollback(conn)
            raise StoreError(f"Failed to read events: {e}") from e
        finally:
            self._pool.putconn(conn)

        return [_from_row(row) for row in rows]

    def ping(self) -> bool:
        """Run SELECT 1 on a pooled connection."""
        if self._pool is None:
            return False
        try:
            conn = self._pool.getconn()
        except psycopg2.Error:
            return False
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
            conn.rollback()
            return True
        except psycopg2.Error:
            return False
        finally:
            self._pool.putconn(conn)

    def close(self) -> None:
        """Close all pooled connections."""
        if self._pool:
            try:
                self._pool.closeall()
                logger.info("PostgreSQLEventRepository connection pool closed")
            except Exception as e:
                logger.warning("Error closing connection pool: %s", e)
            finally:
                self._pool = None


def check_postgresql_connection(settings: Settings | None = None) -> bool:
    """
    Check if PostgreSQL is reachable.

    Args:
        settings: Application settings. If None, uses get_settings().

    Returns:
        True if connection successful, False otherwise
    """
    try:
        settings = settings or get_settings()
        conn_string = _add_connect_timeout(settings.postgres.connection_string)
        conn = psycopg2.connect(conn_string)
        conn.close()
        return True
    except Exception:
        return False
