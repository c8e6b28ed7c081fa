# ==============================================================================
# Serve Command
# ==============================================================================
"""
Runs the SitePulse HTTP API with uvicorn.
"""

import logging
from typing import Annotated, Optional

import typer

from sitepulse.cli.shared import configure_logging
from sitepulse.utils.config import get_settings

logger = logging.getLogger(__name__)


def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Bind port")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
) -> None:
    """Start the HTTP API (ingestion, sessions, analytics).

    Examples:
        sitepulse serve
        sitepulse serve --port 8080 --reload
    """
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)

    bind_host = host or settings.api.host
    bind_port = port or settings.api.port
    logger.info("Serving SitePulse API on %s:%d", bind_host, bind_port)

    uvicorn.run(
        "sitepulse.api.main:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )
