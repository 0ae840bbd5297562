"""Unit tests for infrastructure settings."""

import pytest
from pydantic import ValidationError

from infrastructure.settings import (
    AWSSettings,
    DatabaseSettings,
    ProvisioningSettings,
    Settings,
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

        assert "pool_max_connections" in str(exc_info.value)

    def test_pool_max_equal_to_min_is_valid(self):
        """Should allow max == min."""
        settings = DatabaseSettings(pool_min_connections=5, pool_max_connections=5)
        assert settings.pool_min_connections == 5
        assert settings.pool_max_connections == 5

    def test_pool_min_must_be_positive(self):
        """Pool min connections must be >= 1."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_min_connections=0)

    def test_pool_max_respects_upper_limit(self):
        """Pool max should not exceed reasonable limit."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)


class TestAWSSettings:
    """Tests for cross-account and shared store configuration."""

    def test_defaults(self, monkeypatch):
        """Should default to the well-known role and shared table."""
        monkeypatch.delenv("PROVISIONER_AWS_CROSS_ACCOUNT_ROLE_NAME", raising=False)
        monkeypatch.delenv("PROVISIONER_AWS_ASSUME_ROLE_DURATION_SECONDS", raising=False)
        settings = AWSSettings()
        assert settings.cross_account_role_name == "CrossAccountTenantRole"
        assert settings.assume_role_duration_seconds == 3600
        assert settings.shared_tenant_table_name == "TENANT_PUBLIC"
        assert settings.credential_max_retries == 3

    def test_reads_environment(self, monkeypatch):
        """Should read values from PROVISIONER_AWS_* variables."""
        monkeypatch.setenv("PROVISIONER_AWS_REGION", "eu-west-1")
        monkeypatch.setenv("PROVISIONER_AWS_CROSS_ACCOUNT_ROLE_NAME", "TenantAdmin")
        settings = AWSSettings()
        assert settings.region == "eu-west-1"
        assert settings.cross_account_role_name == "TenantAdmin"

    @pytest.mark.parametrize("duration", [899, 43201])
    def test_credential_ttl_is_bounded(self, duration):
        """Credential TTL must stay within the STS limits."""
        with pytest.raises(ValidationError):
            AWSSettings(assume_role_duration_seconds=duration)


class TestProvisioningSettings:
    """Tests for poll budget configuration."""

    def test_default_poll_budget(self, monkeypatch):
        """Should default to 30 attempts at a 30 second cadence."""
        monkeypatch.delenv("PROVISIONER_MAX_POLL_ATTEMPTS", raising=False)
        monkeypatch.delenv("PROVISIONER_POLL_INTERVAL_SECONDS", raising=False)
        settings = ProvisioningSettings()
        assert settings.max_poll_attempts == 30
        assert settings.poll_interval_seconds == 30
        assert settings.max_wait_seconds == 900

    def test_poll_budget_must_be_positive(self):
        """Zero attempts would time out every operation before it is observed."""
        with pytest.raises(ValidationError):
            ProvisioningSettings(max_poll_attempts=0)


class TestSettingsAggregation:
    """Tests for the aggregated Settings object."""

    def test_exposes_sections(self):
        """Settings should expose every configuration section."""
        settings = Settings()
        assert isinstance(settings.database, DatabaseSettings)
        assert isinstance(settings.aws, AWSSettings)
        assert isinstance(settings.provisioning, ProvisioningSettings)
