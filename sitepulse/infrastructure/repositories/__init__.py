# ==============================================================================
# Event Store Adapters
# ==============================================================================
"""
Event store adapters implementing EventRepository from base/repositories.py.

Currently supported:
- PostgreSQL (postgresql.py)
- In-memory (memory.py) for development and tests
"""

from sitepulse.infrastructure.repositories.memory import InMemoryEventRepository
from sitepulse.infrastructure.repositories.postgresql import (
    PostgreSQLEventRepository,
    check_postgresql_connection,
)

__all__ = [
    "InMemoryEventRepository",
    "PostgreSQLEventRepository",
    "check_postgresql_connection",
]
