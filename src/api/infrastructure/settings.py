"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        IDENTITY_DB_HOST: Database host (default: localhost)
        IDENTITY_DB_PORT: Database port (default: 5432)
        IDENTITY_DB_DATABASE: Database name (default: identity)
        IDENTITY_DB_USERNAME: Database user (default: identity)
        IDENTITY_DB_PASSWORD: Database password (required in production)
        IDENTITY_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        IDENTITY_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="IDENTITY_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="identity", description="Database name")
    username: str = Field(default="identity", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class OutboxSettings(BaseSettings):
    """Outbox delivery, retry and retention settings.

    Environment variables:
        IDENTITY_OUTBOX_BATCH_SIZE: Max records fetched per poll cycle (default: 50)
        IDENTITY_OUTBOX_POLL_INTERVAL_SECONDS: Delay between cycles (default: 5)
        IDENTITY_OUTBOX_FAILURE_THRESHOLD: Consecutive failures to open breaker (default: 5)
        IDENTITY_OUTBOX_COOLDOWN_SECONDS: Breaker open duration (default: 60)
        IDENTITY_OUTBOX_MAX_RETRIES: Failures before PERMANENTLY_FAILED (default: 5)
        IDENTITY_OUTBOX_RETENTION_DAYS: Age before DELIVERED records are purged (default: 30)
        IDENTITY_OUTBOX_CLEANUP_INTERVAL_SECONDS: Delay between cleanup runs (default: 86400)
        IDENTITY_OUTBOX_DELIVERY_TIMEOUT_SECONDS: Upper bound for one delivery attempt (default: 10)
        IDENTITY_OUTBOX_WORKER_ENABLED: Run the delivery worker in this process (default: true)
        IDENTITY_OUTBOX_CLEANUP_ENABLED: Run the cleanup job in this process (default: true)
    """

    model_config = SettingsConfigDict(
        env_prefix="IDENTITY_OUTBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    batch_size: int = Field(
        default=50, ge=1, le=1000, description="Max records per poll cycle"
    )
    poll_interval_seconds: float = Field(
        default=5.0, gt=0, description="Delay between poll cycles"
    )
    failure_threshold: int = Field(
        default=5, ge=1, description="Consecutive failures that open the breaker"
    )
    cooldown_seconds: float = Field(
        default=60.0, ge=0, description="How long the breaker stays open"
    )
    max_retries: int = Field(
        default=5, ge=1, description="Failures before a record is permanently failed"
    )
    retention_days: int = Field(
        default=30, ge=1, description="Age before delivered records are purged"
    )
    cleanup_interval_seconds: float = Field(
        default=86400.0, gt=0, description="Delay between cleanup runs"
    )
    delivery_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for a single delivery attempt"
    )
    worker_enabled: bool = Field(
        default=True, description="Run the delivery worker in this process"
    )
    cleanup_enabled: bool = Field(
        default=True, description="Run the cleanup job in this process"
    )


class DownstreamSettings(BaseSettings):
    """Settings for the downstream event consumer.

    Environment variables:
        IDENTITY_DOWNSTREAM_BASE_URL: Base URL of the consumer (default: http://localhost:8081)
        IDENTITY_DOWNSTREAM_API_KEY: API key sent as X-API-Key
        IDENTITY_DOWNSTREAM_TIMEOUT_SECONDS: HTTP timeout (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="IDENTITY_DOWNSTREAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:8081", description="Downstream service base URL"
    )
    api_key: SecretStr = Field(
        default=SecretStr(""), description="API key for the downstream service"
    )
    timeout_seconds: float = Field(default=10.0, gt=0, description="HTTP timeout")


class InternalApiSettings(BaseSettings):
    """Settings for the internal (service-to-service and operator) routes.

    Environment variables:
        IDENTITY_INTERNAL_API_KEY: Key expected in the X-API-Key header of
            /internal/* requests. When empty, every such request is rejected.
    """

    model_config = SettingsConfigDict(
        env_prefix="IDENTITY_INTERNAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: SecretStr = Field(
        default=SecretStr(""), description="API key required on internal routes"
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Identity Service", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def outbox(self) -> OutboxSettings:
        """Get outbox settings."""
        return get_outbox_settings()

    @property
    def downstream(self) -> DownstreamSettings:
        """Get downstream consumer settings."""
        return get_downstream_settings()

    @property
    def internal_api(self) -> InternalApiSettings:
        """Get internal route settings."""
        return get_internal_api_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_outbox_settings() -> OutboxSettings:
    """Get cached outbox settings."""
    return OutboxSettings()


@lru_cache
def get_downstream_settings() -> DownstreamSettings:
    """Get cached downstream consumer settings."""
    return DownstreamSettings()


@lru_cache
def get_internal_api_settings() -> InternalApiSettings:
    """Get cached internal route settings."""
    return InternalApiSettings()
