# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration management commands for the SitePulse CLI.
"""

import json
from typing import Annotated

import typer

from sitepulse.cli.shared import C
from sitepulse.utils.config import get_settings


def _mask(secret: str | None) -> str:
    if not secret:
        return "(not set)"
    return "*" * 8


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()

    # JSON output mode
    if json_output:
        config = {
            "api": {
                "host": settings.api.host,
                "port": settings.api.port,
            },
            "store": {
                "backend": settings.store.backend,
            },
            "postgresql": {
                "host": settings.postgres.host,
                "port": settings.postgres.port,
                "database": settings.postgres.database,
                "schema": settings.postgres.schema_name,
                "user": settings.postgres.user,
                "password": settings.postgres.password,
                "sslmode": settings.postgres.sslmode,
                "pool_min": settings.postgres.pool_min,
                "pool_max": settings.postgres.pool_max,
            },
            "valkey": {
                "host": settings.valkey.host,
                "port": settings.valkey.port,
                "db": settings.valkey.db,
                "ssl_enabled": settings.valkey.ssl,
                "password": settings.valkey.password,
            },
            "session": {
                "ttl_seconds": settings.session.ttl_seconds,
            },
            "ingest": {
                "max_batch_events": settings.ingest.max_batch_events,
            },
            "auth": {
                "algorithm": settings.auth.algorithm,
                "secret_key": settings.auth.secret_key,
            },
            "log_level": settings.log_level,
            "debug": settings.debug,
        }
        print(json.dumps(config, indent=2))
        return

    # Human-readable output
    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    print(f"{C.CYAN}API{C.RESET}")
    print(f"  Bind:       {C.WHITE}{settings.api.host}:{settings.api.port}{C.RESET}")
    print(f"  Log level:  {C.WHITE}{settings.log_level}{C.RESET}")
    print()

    print(f"{C.CYAN}Event Store{C.RESET}")
    print(f"  Backend:    {C.WHITE}{settings.store.backend}{C.RESET}")
    print(f"  Max batch:  {C.WHITE}{settings.ingest.max_batch_events:,} events{C.RESET}")
    print()

    print(f"{C.CYAN}PostgreSQL{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.postgres.host}{C.RESET}")
    print(f"  Port:       {C.WHITE}{settings.postgres.port}{C.RESET}")
    print(f"  Database:   {C.WHITE}{settings.postgres.database}{C.RESET}")
    print(f"  Schema:     {C.WHITE}{settings.postgres.schema_name}{C.RESET}")
    print(f"  User:       {C.WHITE}{settings.postgres.user}{C.RESET}")
    print(f"  SSL:        {C.WHITE}{settings.postgres.sslmode}{C.RESET}")
    pool = f"{settings.postgres.pool_min}-{settings.postgres.pool_max} connections"
    print(f"  Pool:       {C.WHITE}{pool}{C.RESET}")
    print()

    print(f"{C.CYAN}Valkey{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.valkey.host}{C.RESET}")
    print(f"  Port:       {C.WHITE}{settings.valkey.port}{C.RESET}")
    valkey_ssl = "enabled" if settings.valkey.ssl else "disabled"
    print(f"  SSL:        {C.WHITE}{valkey_ssl}{C.RESET}")
    print(f"  Session TTL:{C.WHITE} {settings.session.ttl_seconds}s{C.RESET}")
    print()

    print(f"{C.CYAN}Auth{C.RESET}")
    print(f"  Algorithm:  {C.WHITE}{settings.auth.algorithm}{C.RESET}")
    print(f"  Secret:     {C.WHITE}{_mask(settings.auth.secret_key)}{C.RESET}")
    print()
