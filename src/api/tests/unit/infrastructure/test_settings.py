"""Unit tests for infrastructure settings."""

import pytest
from pydantic import ValidationError

from infrastructure.settings import (
    DatabaseSettings,
    DownstreamSettings,
    InternalApiSettings,
    OutboxSettings,
    Settings,
    get_outbox_settings,
)


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        """Should have sensible pool defaults."""
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections
        assert settings.pool_max_connections <= 20

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        """Should validate max >= min."""
        with pytest.raises(ValidationError) as exc_info:
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

        error_str = str(exc_info.value)
        assert "pool_max_connections" in error_str or "greater" in error_str.lower()

    def test_pool_max_equal_to_min_is_valid(self):
        """Should allow max == min."""
        settings = DatabaseSettings(pool_min_connections=5, pool_max_connections=5)
        assert settings.pool_min_connections == 5
        assert settings.pool_max_connections == 5

    def test_pool_min_must_be_positive(self):
        """Pool min connections must be >= 1."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_min_connections=0)

    def test_connection_string_omits_password(self):
        settings = DatabaseSettings(
            host="db", port=5433, database="identity", username="svc", password="secret"
        )

        assert settings.connection_string == "postgresql://svc@db:5433/identity"
        assert "secret" not in settings.connection_string


class TestOutboxSettings:
    """Tests for outbox delivery settings."""

    def test_defaults(self):
        settings = OutboxSettings()

        assert settings.batch_size == 50
        assert settings.poll_interval_seconds == 5.0
        assert settings.failure_threshold == 5
        assert settings.cooldown_seconds == 60.0
        assert settings.max_retries == 5
        assert settings.retention_days == 30
        assert settings.cleanup_interval_seconds == 86400.0
        assert settings.delivery_timeout_seconds == 10.0
        assert settings.worker_enabled is True
        assert settings.cleanup_enabled is True

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("IDENTITY_OUTBOX_BATCH_SIZE", "10")
        monkeypatch.setenv("IDENTITY_OUTBOX_WORKER_ENABLED", "false")

        settings = OutboxSettings()

        assert settings.batch_size == 10
        assert settings.worker_enabled is False

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("batch_size", 0),
            ("batch_size", 1001),
            ("poll_interval_seconds", 0),
            ("failure_threshold", 0),
            ("cooldown_seconds", -1),
            ("max_retries", 0),
            ("retention_days", 0),
            ("delivery_timeout_seconds", 0),
        ],
    )
    def test_rejects_out_of_range_values(self, field, value):
        with pytest.raises(ValidationError):
            OutboxSettings(**{field: value})

    def test_getter_is_cached(self):
        assert get_outbox_settings() is get_outbox_settings()


class TestDownstreamSettings:
    def test_api_key_is_secret(self):
        settings = DownstreamSettings(api_key="top-secret")

        assert settings.api_key.get_secret_value() == "top-secret"
        assert "top-secret" not in repr(settings)

    def test_defaults(self):
        settings = DownstreamSettings()

        assert settings.base_url == "http://localhost:8081"
        assert settings.timeout_seconds == 10.0


class TestInternalApiSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("IDENTITY_INTERNAL_API_KEY", "ops-key")

        settings = InternalApiSettings()

        assert settings.api_key.get_secret_value() == "ops-key"


class TestSettings:
    def test_sections_are_available(self):
        settings = Settings()

        assert isinstance(settings.database, DatabaseSettings)
        assert isinstance(settings.outbox, OutboxSettings)
        assert isinstance(settings.downstream, DownstreamSettings)
        assert isinstance(settings.internal_api, InternalApiSettings)
