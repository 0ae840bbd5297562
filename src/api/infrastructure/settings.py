"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Tenant registry database connection settings.

    Environment variables:
        PROVISIONER_DB_HOST: Database host (default: localhost)
        PROVISIONER_DB_PORT: Database port (default: 5432)
        PROVISIONER_DB_DATABASE: Database name (default: provisioner)
        PROVISIONER_DB_USERNAME: Database user (default: provisioner)
        PROVISIONER_DB_PASSWORD: Database password (required in production)
        PROVISIONER_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        PROVISIONER_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="PROVISIONER_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="provisioner", description="Database name")
    username: str = Field(default="provisioner", description="Database username")
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


class AWSSettings(BaseSettings):
    """Cloud account and cross-account access settings.

    Environment variables:
        PROVISIONER_AWS_REGION: Region for STS, CloudFormation and DynamoDB (default: us-east-1)
        PROVISIONER_AWS_CROSS_ACCOUNT_ROLE_NAME: Role assumed in every tenant account
        PROVISIONER_AWS_ASSUME_ROLE_DURATION_SECONDS: Delegated credential TTL (default: 3600)
        PROVISIONER_AWS_CREDENTIAL_MAX_RETRIES: Retries for throttled assume-role calls (default: 3)
        PROVISIONER_AWS_CREDENTIAL_RETRY_BASE_DELAY: Base backoff delay in seconds (default: 0.5)
        PROVISIONER_AWS_SHARED_TENANT_TABLE_NAME: Shared tenant table (default: TENANT_PUBLIC)
        PROVISIONER_AWS_ENVIRONMENT: Environment tag applied to stacks (default: development)
    """

    model_config = SettingsConfigDict(
        env_prefix="PROVISIONER_AWS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    region: str = Field(default="us-east-1", description="AWS region")
    cross_account_role_name: str = Field(
        default="CrossAccountTenantRole",
        description="Well-known role name assumed in tenant accounts",
        min_length=1,
    )
    assume_role_duration_seconds: int = Field(
        default=3600,
        description="Lifetime of delegated credentials",
        ge=900,
        le=43200,
    )
    credential_max_retries: int = Field(
        default=3,
        description="Retry bound for transient credential failures",
        ge=0,
        le=10,
    )
    credential_retry_base_delay: float = Field(
        default=0.5,
        description="Base delay in seconds for credential retry backoff",
        gt=0.0,
    )
    shared_tenant_table_name: str = Field(
        default="TENANT_PUBLIC",
        description="DynamoDB table holding shared-tier tenant rows",
    )
    environment: str = Field(
        default="development",
        description="Environment tag applied to provisioned stacks",
    )


class ProvisioningSettings(BaseSettings):
    """Lifecycle orchestration settings.

    Environment variables:
        PROVISIONER_MAX_POLL_ATTEMPTS: Poll budget before timing out (default: 30)
        PROVISIONER_POLL_INTERVAL_SECONDS: Driver poll cadence (default: 30)
        PROVISIONER_STACK_NAME_PREFIX: Prefix for dedicated stack names (default: tenant)
        PROVISIONER_STACK_MAX_RETRIES: Retries for throttled stack calls (default: 3)
        PROVISIONER_STACK_RETRY_BASE_DELAY: Base backoff delay in seconds (default: 0.5)
        PROVISIONER_DEFAULT_TEMPLATE_REF: Template used when none is given (default: dedicated-table)
    """

    model_config = SettingsConfigDict(
        env_prefix="PROVISIONER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_poll_attempts: int = Field(
        default=30,
        description="Maximum poll attempts before a dedicated operation times out",
        ge=1,
    )
    poll_interval_seconds: int = Field(
        default=30,
        description="Interval at which the lifecycle driver re-invokes the poll worker",
        ge=1,
    )
    stack_name_prefix: str = Field(
        default="tenant",
        description="Prefix for deterministic dedicated stack names",
        min_length=1,
    )
    stack_max_retries: int = Field(
        default=3,
        description="Retry bound for transient stack service failures",
        ge=0,
        le=10,
    )
    stack_retry_base_delay: float = Field(
        default=0.5,
        description="Base delay in seconds for stack call retry backoff",
        gt=0.0,
    )
    default_template_ref: str = Field(
        default="dedicated-table",
        description="Stack template reference used when a request omits one",
    )

    @property
    def max_wait_seconds(self) -> int:
        """Upper bound on wall-clock wait implied by the poll budget."""
        return self.max_poll_attempts * self.poll_interval_seconds


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(
        default="Tenant Infrastructure Provisioner", description="Application name"
    )
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def aws(self) -> AWSSettings:
        """Get AWS settings."""
        return get_aws_settings()

    @property
    def provisioning(self) -> ProvisioningSettings:
        """Get provisioning settings."""
        return get_provisioning_settings()


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
def get_aws_settings() -> AWSSettings:
    """Get cached AWS settings."""
    return AWSSettings()


@lru_cache
def get_provisioning_settings() -> ProvisioningSettings:
    """Get cached provisioning settings."""
    return ProvisioningSettings()
