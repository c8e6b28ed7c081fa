# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv. Components never read these globals directly:
the API and CLI build them from Settings and pass values into constructors.
"""

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sitepulse.core.models import SESSION_TTL_SECONDS

# Load .env file before any settings are instantiated
load_dotenv()


class PostgresSettings(BaseSettings):
    """PostgreSQL connection settings for the event store."""

    model_config = SettingsConfigDict(env_prefix="PG_")

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL username")
    password: str = Field(default="postgres", description="PostgreSQL password")
    database: str = Field(default="sitepulse", description="Database name")
    schema_name: str = Field(default="sitepulse", description="Schema name")
    sslmode: str = Field(default="prefer", description="SSL mode")

    # Connection pool sizing (one connection per in-flight request)
    pool_min: int = Field(default=1, description="Minimum pooled connections")
    pool_max: int = Field(default=10, description="Maximum pooled connections")

    @property
    def connection_string(self) -> str:
        """Build PostgreSQL connection string."""
        return (
            f"postgresql://{self.user}:{self.password}@"
            f"{self.host}:{self.port}/{self.database}?sslmode={self.sslmode}"
        )


class ValkeySettings(BaseSettings):
    """Valkey (Redis-compatible) connection settings for server sessions."""

    model_config = SettingsConfigDict(env_prefix="VALKEY_")

    host: str = Field(default="localhost", description="Valkey host")
    port: int = Field(default=6379, description="Valkey port")
    password: Optional[str] = Field(default=None, description="Valkey password")
    db: int = Field(default=0, description="Valkey database number")
    ssl: bool = Field(default=False, description="Use SSL/TLS connection")

    @property
    def url(self) -> str:
        """Build Valkey connection URL."""
        scheme = "rediss" if self.ssl else "redis"
        if self.password:
            return f"{scheme}://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"{scheme}://{self.host}:{self.port}/{self.db}"


class StoreSettings(BaseSettings):
    """Event store backend selection."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    backend: Literal["postgresql", "memory"] = Field(
        default="postgresql",
        description="Event store implementation (postgresql, memory)",
    )


class SessionSettings(BaseSettings):
    """Server-issued session settings."""

    model_config = SettingsConfigDict(env_prefix="SESSION_")

    ttl_seconds: int = Field(
        default=SESSION_TTL_SECONDS,
        description="Lifetime of a server-issued session in seconds",
    )


class IngestSettings(BaseSettings):
    """Event ingestion settings."""

    model_config = SettingsConfigDict(env_prefix="INGEST_")

    max_batch_events: int = Field(
        default=1000,
        description="Largest batch accepted in one ingestion call",
    )


class AuthSettings(BaseSettings):
    """Bearer token verification for the analytics endpoints."""

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    secret_key: str = Field(
        default="change-me-in-production", description="Shared JWT signing secret"
    )
    algorithm: str = Field(default="HS256", description="JWT signing algorithm")


class ApiSettings(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, description="Bind port")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    valkey: ValkeySettings = Field(default_factory=ValkeySettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    ingest: IngestSettings = Field(default_factory=IngestSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
