# ==============================================================================
# Simulate Command
# ==============================================================================
"""
Generates synthetic visitor traffic and sends it through EventCollector.

Each simulated session views a page, clicks a few times around a handful of
hot spots and scrolls part of the way down, then closes its collector so the
buffered batch is delivered.
"""

import logging
import random
from typing import Annotated, Optional

import typer

from sitepulse.cli.shared import C, I, configure_logging
from sitepulse.collector import EventCollector
from sitepulse.core.models import Viewport

logger = logging.getLogger(__name__)

VIEWPORTS = (Viewport(w=1920, h=1080), Viewport(w=1280, h=800), Viewport(w=390, h=844))

# Relative (x, y) positions that attract most clicks
HOT_SPOTS = ((0.5, 0.1), (0.25, 0.4), (0.75, 0.6))


def simulate_session(
    collector: EventCollector, path: str, rng: random.Random, max_clicks: int = 5
) -> int:
    """Record one synthetic visit; returns the number of events buffered."""
    viewport = rng.choice(VIEWPORTS)
    collector.page_view(path, url=f"https://example.test{path}", referrer=None)
    count = 1

    for _ in range(rng.randint(0, max_clicks)):
        hx, hy = rng.choice(HOT_SPOTS)
        x = int(max(0, min(viewport.w - 1, rng.gauss(hx * viewport.w, viewport.w * 0.03))))
        y = int(max(0, min(viewport.h - 1, rng.gauss(hy * viewport.h, viewport.h * 0.03))))
        collector.click(path, x, y, viewport)
        count += 1

    # Scroll samples up to a random depth of the page
    page_height = viewport.h * rng.uniform(1.5, 5.0)
    deepest = rng.uniform(0, page_height - viewport.h)
    scroll_y = 0.0
    while scroll_y < deepest:
        scroll_y = min(deepest, scroll_y + viewport.h / 2)
        collector.scroll(path, round(scroll_y), viewport)
        count += 1

    return count


def simulate(
    site_id: Annotated[str, typer.Option("--site-id", "-s", help="Site to emit events for")],
    api_base: Annotated[
        str, typer.Option("--api-base", "-a", help="SitePulse API base URL")
    ] = "http://localhost:3000",
    sessions: Annotated[int, typer.Option("--sessions", "-n", help="Sessions to simulate")] = 10,
    path: Annotated[
        Optional[list[str]], typer.Option("--path", "-p", help="Page path (repeatable)")
    ] = None,
    seed: Annotated[Optional[int], typer.Option("--seed", help="Random seed")] = None,
) -> None:
    """Send synthetic page views, clicks and scrolls to a running API.

    Examples:
        sitepulse simulate --site-id site-1
        sitepulse simulate -s site-1 -n 100 -p / -p /pricing --seed 42
    """
    configure_logging()
    rng = random.Random(seed)
    paths = path or ["/"]

    print()
    print(f"  Simulating {C.WHITE}{sessions}{C.RESET} sessions against {C.WHITE}{api_base}{C.RESET}")

    total_events = 0
    failed = 0
    for _ in range(sessions):
        collector = EventCollector(api_base, site_id)
        total_events += simulate_session(collector, rng.choice(paths), rng)
        if not collector.close():
            failed += 1

    if failed:
        print(f"{C.BRIGHT_RED}{I.CROSS} {failed} of {sessions} batches were dropped{C.RESET}")
        print()
        raise typer.Exit(1)

    print(f"{C.BRIGHT_GREEN}{I.CHECK} Sent {total_events:,} events in {sessions} batches{C.RESET}")
    print()
