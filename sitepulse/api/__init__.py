# ==============================================================================
# HTTP API
# ==============================================================================
"""
FastAPI surface: ingestion, session issuance, analytics and heatmap queries.

Usage:
    from sitepulse.api import create_app
    app = create_app()
"""

from sitepulse.api.main import API_PREFIX, create_app

__all__ = ["API_PREFIX", "create_app"]
