# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes defining the ports of the ports-and-adapters architecture.

The core (ingestion, sessions, aggregation) only talks to these interfaces;
infrastructure/ provides the PostgreSQL, Valkey and in-memory adapters.
"""

from sitepulse.base.cache import Cache
from sitepulse.base.repositories import EventRepository, SessionRepository

__all__ = [
    "Cache",
    "EventRepository",
    "SessionRepository",
]
