# ==============================================================================
# Infrastructure Adapters
# ==============================================================================
"""
Adapters for external services (ports-and-adapters architecture).

This module contains concrete implementations of the base/ interfaces:
- cache/ - Cache adapters (Valkey/Redis)
- repositories/ - Event store adapters (PostgreSQL, in-memory)
- session_store.py - Server session persistence (Valkey)
"""

from sitepulse.infrastructure.cache import ValkeyCache, check_valkey_connection
from sitepulse.infrastructure.repositories import (
    InMemoryEventRepository,
    PostgreSQLEventRepository,
    check_postgresql_connection,
)
from sitepulse.infrastructure.session_store import ValkeySessionRepository

__all__ = [
    # Cache
    "ValkeyCache",
    "check_valkey_connection",
    # Event store
    "InMemoryEventRepository",
    "PostgreSQLEventRepository",
    "check_postgresql_connection",
    # Sessions
    "ValkeySessionRepository",
]
