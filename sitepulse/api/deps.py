# ==============================================================================
# API Dependencies
# ==============================================================================
"""
FastAPI dependencies wiring the core services to the stores held on app.state.

The stores are created once per application (see api/main.py); the services
are thin and built per request with their configuration passed in explicitly.
"""

from fastapi import Request

from sitepulse.base import EventRepository, SessionRepository
from sitepulse.core import AggregationEngine, IngestionValidator, SessionTracker
from sitepulse.utils.config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_event_repository(request: Request) -> EventRepository:
    return request.app.state.event_repository


def get_session_repository(request: Request) -> SessionRepository:
    return request.app.state.session_repository


def get_ingestion_validator(request: Request) -> IngestionValidator:
    settings = get_app_settings(request)
    return IngestionValidator(
        get_event_repository(request),
        max_batch_events=settings.ingest.max_batch_events,
    )


def get_session_tracker(request: Request) -> SessionTracker:
    settings = get_app_settings(request)
    return SessionTracker(
        get_session_repository(request),
        ttl_seconds=settings.session.ttl_seconds,
    )


def get_aggregation_engine(request: Request) -> AggregationEngine:
    return AggregationEngine(get_event_repository(request))
