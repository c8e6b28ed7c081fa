# ==============================================================================
# Tests for Configuration and Schema Rendering
# ==============================================================================
"""
Tests for environment-driven settings, the store factory and the Jinja2
schema template.
"""

import pytest

from sitepulse.infrastructure.factory import create_event_repository
from sitepulse.infrastructure.repositories import (
    InMemoryEventRepository,
    PostgreSQLEventRepository,
)
from sitepulse.utils.config import (
    PostgresSettings,
    Settings,
    StoreSettings,
    ValkeySettings,
)
from sitepulse.utils.db import render_schema_sql


class TestSettings:
    """Tests for the pydantic-settings classes."""

    def test_defaults(self, monkeypatch):
        for name in ("SESSION_TTL_SECONDS", "INGEST_MAX_BATCH_EVENTS", "API_PORT"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.session.ttl_seconds == 1800
        assert settings.ingest.max_batch_events == 1000
        assert settings.api.port == 3000

    def test_env_prefixes(self, monkeypatch):
        monkeypatch.setenv("PG_HOST", "db.internal")
        monkeypatch.setenv("STORE_BACKEND", "memory")
        monkeypatch.setenv("SESSION_TTL_SECONDS", "60")
        settings = Settings()
        assert settings.postgres.host == "db.internal"
        assert settings.store.backend == "memory"
        assert settings.session.ttl_seconds == 60

    def test_postgres_connection_string(self):
        pg = PostgresSettings(
            host="h", port=5433, user="u", password="p", database="d", sslmode="require"
        )
        assert pg.connection_string == "postgresql://u:p@h:5433/d?sslmode=require"

    def test_valkey_url(self):
        assert ValkeySettings(host="v", port=6380, db=2).url == "redis://v:6380/2"
        secure = ValkeySettings(host="v", password="pw", ssl=True)
        assert secure.url == "rediss://:pw@v:6379/0"

    def test_invalid_backend_rejected(self):
        with pytest.raises(ValueError):
            StoreSettings(backend="mongodb")


class TestFactory:
    """Tests for create_event_repository."""

    def test_memory_backend(self):
        settings = Settings(store=StoreSettings(backend="memory"))
        assert isinstance(create_event_repository(settings), InMemoryEventRepository)

    def test_postgresql_backend_not_connected(self):
        settings = Settings(store=StoreSettings(backend="postgresql"))
        repository = create_event_repository(settings)
        assert isinstance(repository, PostgreSQLEventRepository)
        assert repository.ping() is False


class TestSchemaTemplate:
    """Tests for schema/init.sql rendering."""

    def test_schema_name_substituted(self):
        sql = render_schema_sql("analytics_test")
        assert "analytics_test.events" in sql
        assert "{{" not in sql

    def test_indexes_present(self):
        sql = render_schema_sql("sitepulse")
        assert "(site_id, event_time DESC)" in sql
        assert "(site_id, path, event_time DESC)" in sql
