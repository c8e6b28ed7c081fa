# ==============================================================================
# Core Domain Layer
# ==============================================================================
"""
Pure domain logic: event models, batch ingestion, server sessions and
analytics aggregation. Depends only on the base/ interfaces and Pydantic.
"""

from sitepulse.core.aggregation import AggregationEngine
from sitepulse.core.errors import (
    IngestionError,
    InvalidRequestError,
    SitePulseError,
    StoreError,
)
from sitepulse.core.ingestion import IngestionValidator
from sitepulse.core.models import (
    SESSION_TTL_SECONDS,
    ClickEvent,
    EventType,
    HeatmapPoint,
    OverviewMetrics,
    PageMetrics,
    PageViewEvent,
    ScrollDepth,
    ScrollEvent,
    ServerSession,
    SessionGrant,
    Viewport,
)
from sitepulse.core.session_tracker import SessionTracker

__all__ = [
    # Services
    "AggregationEngine",
    "IngestionValidator",
    "SessionTracker",
    # Errors
    "IngestionError",
    "InvalidRequestError",
    "SitePulseError",
    "StoreError",
    # Models
    "SESSION_TTL_SECONDS",
    "ClickEvent",
    "EventType",
    "HeatmapPoint",
    "OverviewMetrics",
    "PageMetrics",
    "PageViewEvent",
    "ScrollDepth",
    "ScrollEvent",
    "ServerSession",
    "SessionGrant",
    "Viewport",
]
