# ==============================================================================
# Tests for CLI Commands
# ==============================================================================
"""
Tests that run CLI commands end to end against the in-memory store, with
get_settings patched so no environment or external service is needed.
"""

import json
from unittest.mock import MagicMock

import psycopg2
import pytest
from typer.testing import CliRunner

from sitepulse.app import app
from sitepulse.infrastructure.repositories import InMemoryEventRepository

runner = CliRunner()

T0 = 1_700_000_000


@pytest.fixture()
def memory_settings(monkeypatch, settings):
    """Point the CLI modules at memory-backend settings."""
    monkeypatch.setattr("sitepulse.cli.analytics.get_settings", lambda: settings)
    monkeypatch.setattr("sitepulse.cli.config.get_settings", lambda: settings)
    return settings


@pytest.fixture()
def seeded_store(monkeypatch, make_record):
    """An in-memory store returned by the factory, pre-loaded with events."""
    store = InMemoryEventRepository()
    store.save(
        [
            make_record("page_view", session_id="a", timestamp=T0),
            make_record("page_view", session_id="b", timestamp=T0 + 10),
            make_record(
                "click", session_id="a", timestamp=T0 + 20, x=50, y=50, viewport={"w": 100, "h": 100}
            ),
        ]
    )
    monkeypatch.setattr(
        "sitepulse.infrastructure.factory.create_event_repository", lambda settings: store
    )
    return store


class TestAnalyticsCommands:
    """Tests for `sitepulse analytics ...`."""

    def test_overview_json(self, memory_settings, seeded_store):
        result = runner.invoke(app, ["analytics", "overview", "--site-id", "site-1", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["page_views"] == 2
        assert data["unique_sessions"] == 2
        assert data["avg_session_duration"] == 20

    def test_clicks_json(self, memory_settings, seeded_store):
        result = runner.invoke(
            app, ["analytics", "clicks", "--site-id", "site-1", "--path", "/", "--json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {"points": [{"x": 0.5, "y": 0.5, "count": 1}]}

    def test_scroll_json_empty(self, memory_settings, seeded_store):
        result = runner.invoke(
            app, ["analytics", "scroll", "--site-id", "site-1", "--path", "/", "--json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {"depth": []}

    def test_pages_table(self, memory_settings, seeded_store):
        result = runner.invoke(app, ["analytics", "pages", "--site-id", "site-1"])
        assert result.exit_code == 0
        assert "Pages: site-1" in result.output

    def test_empty_site_id_fails(self, memory_settings, seeded_store):
        result = runner.invoke(app, ["analytics", "overview", "--site-id", ""])
        assert result.exit_code == 1
        assert "site_id is required" in result.output

    def test_unreachable_store_fails_cleanly(self, memory_settings, monkeypatch):
        repository = MagicMock()
        repository.connect.side_effect = psycopg2.OperationalError("could not connect to server")
        monkeypatch.setattr(
            "sitepulse.infrastructure.factory.create_event_repository", lambda settings: repository
        )
        result = runner.invoke(app, ["analytics", "overview", "--site-id", "site-1"])
        assert result.exit_code == 1
        assert "Event store unavailable" in result.output
        assert not isinstance(result.exception, psycopg2.Error)
        repository.close.assert_called_once()


class TestConfigShow:
    """Tests for `sitepulse config show`."""

    def test_json(self, memory_settings):
        result = runner.invoke(app, ["config", "show", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["store"]["backend"] == "memory"
        assert data["session"]["ttl_seconds"] == 1800

    def test_human_readable_masks_secret(self, memory_settings):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "test-secret" not in result.output
