# ==============================================================================
# SitePulse Utilities
# ==============================================================================
"""
Shared utilities: configuration, retry policies, paths and schema management.
"""

from sitepulse.utils.config import (
    ApiSettings,
    AuthSettings,
    IngestSettings,
    PostgresSettings,
    SessionSettings,
    Settings,
    StoreSettings,
    ValkeySettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "AuthSettings",
    "IngestSettings",
    "PostgresSettings",
    "SessionSettings",
    "Settings",
    "StoreSettings",
    "ValkeySettings",
    "get_settings",
]
