# ==============================================================================
# Expiring Key-Value Store Port
# ==============================================================================
"""
Port for a key-value store whose entries expire on their own.

Server sessions are written once and never read back on the request path, so
the session repository only needs a write with a TTL plus health and shutdown
hooks. Expiry is left entirely to the backing store.
"""

from abc import ABC, abstractmethod


class Cache(ABC):
    """Write-only JSON store with per-key expiry."""

    @abstractmethod
    def set(self, key: str, value: dict, ttl_seconds: int) -> None:
        """
        Store ``value`` under ``key`` for ``ttl_seconds``.

        Overwrites any previous value and restarts its expiry.
        """
        ...

    @abstractmethod
    def ping(self) -> bool:
        """True if the backing store answers."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the connection."""
        ...
