# ==============================================================================
# Status Command
# ==============================================================================
"""
Status command for the SitePulse CLI.

Checks connectivity of the event store and the session store and prints a
formatted summary, or JSON for programmatic consumption.
"""

import json as json_module
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import typer

from sitepulse.cli.shared import (
    BOX_WIDTH,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _section_header,
    _status_line,
)
from sitepulse.utils.config import Settings, get_settings


# ==============================================================================
# Data Collection
# ==============================================================================


def _collect_store_data(settings: Settings) -> dict[str, Any]:
    """Collect event store connectivity."""
    from sitepulse.infrastructure.repositories import check_postgresql_connection

    backend = settings.store.backend
    if backend == "memory":
        return {"backend": backend, "status": "in-process", "ok": True}

    ok = check_postgresql_connection(settings)
    return {
        "backend": backend,
        "status": "connected" if ok else "unreachable",
        "ok": ok,
        "target": f"{settings.postgres.host}:{settings.postgres.port}/{settings.postgres.database}",
    }


def _collect_valkey_data(settings: Settings) -> dict[str, Any]:
    """Collect session store connectivity."""
    from sitepulse.infrastructure.cache import check_valkey_connection

    ok = check_valkey_connection(settings.valkey.url)
    return {
        "status": "connected" if ok else "unreachable",
        "ok": ok,
        "target": f"{settings.valkey.host}:{settings.valkey.port}",
    }


def collect_status_data() -> dict[str, Any]:
    """Run both connectivity checks in parallel."""
    settings = get_settings()
    with ThreadPoolExecutor(max_workers=2) as executor:
        store_future = executor.submit(_collect_store_data, settings)
        valkey_future = executor.submit(_collect_valkey_data, settings)
        return {"store": store_future.result(), "sessions": valkey_future.result()}


# ==============================================================================
# Display
# ==============================================================================


def _display_status(data: dict[str, Any]) -> None:
    """Display status in formatted box output."""
    W = BOX_WIDTH
    store = data["store"]
    sessions = data["sessions"]

    print()
    print(_box_header("SITEPULSE STATUS", W))
    print(_empty_line(W))

    print(_section_header("Event Store", W))
    print(_empty_line(W))
    label = f"{store['backend']}: {store['status']}"
    print(_box_line(_status_line(label, store["ok"], store.get("target", "")), W))
    print(_empty_line(W))

    print(_section_header("Sessions", W))
    print(_empty_line(W))
    label = f"valkey: {sessions['status']}"
    print(_box_line(_status_line(label, sessions["ok"], sessions["target"]), W))
    print(_empty_line(W))
    print(_box_bottom(W))
    print()


def show_status(
    json_output: bool = typer.Option(False, "--json", help="Output status as JSON"),
) -> None:
    """Show event store and session store health."""
    data = collect_status_data()

    if json_output:
        print(json_module.dumps(data, indent=2))
    else:
        _display_status(data)

    if not (data["store"]["ok"] and data["sessions"]["ok"]):
        raise typer.Exit(1)
