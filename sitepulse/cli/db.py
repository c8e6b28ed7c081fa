# ==============================================================================
# Database Commands
# ==============================================================================
"""
Schema management commands for the PostgreSQL event store.
"""

from typing import Annotated

import typer

from sitepulse.cli.shared import C, I
from sitepulse.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def db_init() -> None:
    """Create the database and event schema if they do not exist.

    Safe to run repeatedly: existing data is left untouched.

    Examples:
        sitepulse db init
    """
    from sitepulse.utils.db import ensure_schema

    settings = get_settings()
    schema = settings.postgres.schema_name

    print()
    print(f"  Initializing PostgreSQL schema '{C.WHITE}{schema}{C.RESET}'...")
    try:
        ensure_schema(settings)
    except Exception as e:
        print(f"{C.BRIGHT_RED}{I.CROSS} Failed to initialize schema: {e}{C.RESET}")
        raise typer.Exit(1)
    print(f"{C.BRIGHT_GREEN}{I.CHECK} Schema ready{C.RESET}")
    print()


def db_reset(
    confirm: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
) -> None:
    """Drop and recreate the event schema, deleting all stored events.

    Examples:
        sitepulse db reset       # With confirmation prompt
        sitepulse db reset -y    # Skip confirmation
    """
    from sitepulse.infrastructure.repositories import check_postgresql_connection
    from sitepulse.utils.db import reset_schema

    settings = get_settings()
    schema = settings.postgres.schema_name

    print()
    if not confirm:
        typer.confirm(
            f"This will DELETE all events in schema '{schema}'. Are you sure?",
            abort=True,
        )
        print()

    print(f"  Resetting PostgreSQL schema '{C.WHITE}{schema}{C.RESET}'...")
    if not check_postgresql_connection(settings):
        print(f"{C.BRIGHT_RED}{I.CROSS} Cannot connect to PostgreSQL{C.RESET}")
        raise typer.Exit(1)

    try:
        reset_schema(settings)
    except Exception as e:
        print(f"{C.BRIGHT_RED}{I.CROSS} Failed to reset PostgreSQL: {e}{C.RESET}")
        raise typer.Exit(1)
    print(f"{C.BRIGHT_GREEN}{I.CHECK} PostgreSQL reset{C.RESET}")
    print()
