# ==============================================================================
# Analytics Commands
# ==============================================================================
"""
Analytics commands for the SitePulse CLI.

Runs the aggregation engine directly against the configured event store,
without going through the HTTP API.
"""

import json
from contextlib import contextmanager
from typing import Annotated, Iterator, Optional

import psycopg2
import typer
from rich.console import Console
from rich.table import Table

from sitepulse.cli.shared import (
    BOX_WIDTH,
    C,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    format_epoch,
)
from sitepulse.core import AggregationEngine, SitePulseError
from sitepulse.utils.config import get_settings

SiteOption = Annotated[str, typer.Option("--site-id", "-s", help="Site to query")]
PathOption = Annotated[str, typer.Option("--path", "-p", help="Page path")]
FromOption = Annotated[
    Optional[int], typer.Option("--from", help="Start of range (epoch seconds, inclusive)")
]
ToOption = Annotated[
    Optional[int], typer.Option("--to", help="End of range (epoch seconds, inclusive)")
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON for scripting")]


@contextmanager
def _engine() -> Iterator[AggregationEngine]:
    """Connect to the configured store and yield an engine over it."""
    from sitepulse.infrastructure.factory import create_event_repository

    repository = create_event_repository(get_settings())
    try:
        repository.connect()
        yield AggregationEngine(repository)
    except SitePulseError as e:
        print(f"\n{C.BRIGHT_RED}{I.CROSS} {e}{C.RESET}\n")
        raise typer.Exit(1)
    except psycopg2.Error as e:
        print(f"\n{C.BRIGHT_RED}{I.CROSS} Event store unavailable: {e}{C.RESET}\n")
        raise typer.Exit(1)
    finally:
        repository.close()


# ==============================================================================
# Commands
# ==============================================================================


def analytics_overview(
    site_id: SiteOption,
    start: FromOption = None,
    end: ToOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show page views, sessions and average session duration for a site.

    Examples:
        sitepulse analytics overview --site-id site-1
        sitepulse analytics overview -s site-1 --from 1700000000 --json
    """
    with _engine() as engine:
        metrics = engine.overview(site_id, start, end)

    if json_output:
        print(json.dumps(metrics.model_dump(), indent=2))
        return

    W = BOX_WIDTH
    print()
    print(_box_header(f"OVERVIEW: {site_id}", W))
    print(_empty_line(W))
    print(_box_line(f"  {'Page views':<26}{C.WHITE}{metrics.page_views:>12,}{C.RESET}", W))
    print(_box_line(f"  {'Unique sessions':<26}{C.WHITE}{metrics.unique_sessions:>12,}{C.RESET}", W))
    avg = f"{metrics.avg_session_duration}s"
    print(_box_line(f"  {'Avg session duration':<26}{C.WHITE}{avg:>12}{C.RESET}", W))
    print(_empty_line(W))
    print(_box_line(f"  {'First page view':<26}{C.DIM}{format_epoch(metrics.first_event)}{C.RESET}", W))
    print(_box_line(f"  {'Last page view':<26}{C.DIM}{format_epoch(metrics.last_event)}{C.RESET}", W))
    print(_empty_line(W))
    print(_box_bottom(W))
    print()


def analytics_pages(
    site_id: SiteOption,
    start: FromOption = None,
    end: ToOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show per-page views, most viewed first.

    Examples:
        sitepulse analytics pages --site-id site-1
    """
    with _engine() as engine:
        pages = engine.pages(site_id, start, end)

    if json_output:
        print(json.dumps([page.model_dump() for page in pages], indent=2))
        return

    table = Table(title=f"Pages: {site_id}", show_header=True, header_style="bold")
    table.add_column("Path")
    table.add_column("Views", justify="right")
    table.add_column("Sessions", justify="right")
    table.add_column("First view")
    table.add_column("Last view")
    for page in pages:
        table.add_row(
            page.path,
            f"{page.views:,}",
            f"{page.unique_sessions:,}",
            format_epoch(page.first_view),
            format_epoch(page.last_view),
        )

    print()
    Console().print(table)
    print()


def analytics_clicks(
    site_id: SiteOption,
    path: PathOption,
    start: FromOption = None,
    end: ToOption = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Bins to display")] = 20,
    json_output: JsonOption = False,
) -> None:
    """Show click heatmap bins for a page, hottest first.

    Coordinates are fractions of the viewport (0.5 = middle).

    Examples:
        sitepulse analytics clicks --site-id site-1 --path /pricing
    """
    with _engine() as engine:
        points = engine.click_heatmap(site_id, path, start, end)

    if json_output:
        print(json.dumps({"points": [point.model_dump() for point in points]}, indent=2))
        return

    table = Table(title=f"Clicks: {site_id} {path}", show_header=True, header_style="bold")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Clicks", justify="right")
    for point in points[:limit]:
        table.add_row(f"{point.x:.2f}", f"{point.y:.2f}", f"{point.count:,}")

    print()
    Console().print(table)
    if len(points) > limit:
        print(f"  {C.DIM}{len(points) - limit} more bins not shown{C.RESET}")
    print()


def analytics_scroll(
    site_id: SiteOption,
    path: PathOption,
    start: FromOption = None,
    end: ToOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show how many sessions reached 25/50/75% scroll depth on a page.

    Examples:
        sitepulse analytics scroll --site-id site-1 --path /blog/launch
    """
    with _engine() as engine:
        depth = engine.scroll_depth(site_id, path, start, end)

    if json_output:
        print(json.dumps({"depth": [row.model_dump() for row in depth]}, indent=2))
        return

    if not depth:
        print(f"\n  {C.DIM}No scroll events recorded for {path}{C.RESET}\n")
        return

    table = Table(title=f"Scroll depth: {site_id} {path}", show_header=True, header_style="bold")
    table.add_column("Depth", justify="right")
    table.add_column("Sessions", justify="right")
    for row in depth:
        table.add_row(f"{row.percent}%", f"{row.users:,}")

    print()
    Console().print(table)
    print()
