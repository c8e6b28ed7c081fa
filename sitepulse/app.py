# ==============================================================================
# SitePulse CLI
# ==============================================================================
"""
Command-line interface for the SitePulse analytics service.

Usage:
    sitepulse --help
    sitepulse serve
    sitepulse status
    sitepulse config show
    sitepulse db init
    sitepulse db reset -y
    sitepulse analytics overview --site-id site-1
    sitepulse analytics clicks --site-id site-1 --path /pricing
    sitepulse simulate --site-id site-1 --sessions 50
"""

# ==============================================================================
# App Configuration
# ==============================================================================
# Set consistent terminal width for help output formatting
import os

import typer

if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="sitepulse",
    help="SitePulse web interaction analytics CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Serve command is imported from sitepulse.cli.serve
from sitepulse.cli.serve import serve

app.command("serve")(serve)

db_app = typer.Typer(
    help="Event store schema operations",
    no_args_is_help=True,
)
app.add_typer(db_app, name="db")

# Register db commands from cli.db module
from sitepulse.cli.db import db_init, db_reset

db_app.command("init")(db_init)
db_app.command("reset")(db_reset)

analytics_app = typer.Typer(
    help="Query aggregated analytics",
    no_args_is_help=True,
)
app.add_typer(analytics_app, name="analytics")

# Register analytics commands from cli.analytics module
from sitepulse.cli.analytics import (
    analytics_clicks,
    analytics_overview,
    analytics_pages,
    analytics_scroll,
)

analytics_app.command("overview")(analytics_overview)
analytics_app.command("pages")(analytics_pages)
analytics_app.command("clicks")(analytics_clicks)
analytics_app.command("scroll")(analytics_scroll)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

# Register config commands from cli.config module
from sitepulse.cli.config import config_show

config_app.command("show")(config_show)

# Status command is imported from sitepulse.cli.status
from sitepulse.cli.status import show_status

app.command("status")(show_status)

# Simulate command is imported from sitepulse.cli.simulate
from sitepulse.cli.simulate import simulate

app.command("simulate")(simulate)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
