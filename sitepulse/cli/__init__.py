# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for SitePulse.

Commands are organized into separate modules:
- shared.py: Common utilities, constants, and helpers
- serve.py: Run the HTTP API
- db.py: Schema initialization and reset
- analytics.py: Aggregation queries against the event store
- config.py: Show effective configuration
- status.py: Store connectivity
- simulate.py: Synthetic traffic through the Python collector
"""

from sitepulse.cli.shared import (
    BOX_WIDTH,
    B,
    Box,
    C,
    Colors,
    I,
    Icons,
    configure_logging,
    format_epoch,
)

__all__ = [
    "BOX_WIDTH",
    "B",
    "Box",
    "C",
    "Colors",
    "I",
    "Icons",
    "configure_logging",
    "format_epoch",
]
