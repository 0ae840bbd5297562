"""Pydantic models for worker requests and responses.

Field names are camelCase on the wire, matching the events the lifecycle
driver sends; snake_case names are accepted as well.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from provisioning.application.value_objects import (
    CreateInfrastructureRequest,
    WorkerResult,
)
from provisioning.domain.aggregates import TenantInfrastructure
from provisioning.domain.value_objects import TenancyTier, TenantId


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateInfrastructureEvent(_CamelModel):
    """Request model for the create worker."""

    tenant_id: str = Field(..., description="Tenant ID", min_length=1, max_length=100)
    tier: TenancyTier = Field(..., description="Tenancy tier (SHARED or DEDICATED)")
    target_account_id: str | None = Field(
        default=None, description="Account owning a dedicated tenant's stack"
    )
    template_ref: str | None = Field(
        default=None, description="Stack template reference for dedicated tenants"
    )

    @model_validator(mode="after")
    def validate_dedicated_target(self) -> CreateInfrastructureEvent:
        """Dedicated tenants must name their target account."""
        if self.tier == TenancyTier.DEDICATED and not self.target_account_id:
            raise ValueError("targetAccountId is required for DEDICATED tenants")
        return self

    def to_request(self) -> CreateInfrastructureRequest:
        """Convert to the application-layer request.

        Raises:
            ValueError: If the tenant ID is invalid
        """
        return CreateInfrastructureRequest(
            tenant_id=TenantId.from_string(self.tenant_id),
            tier=self.tier,
            target_account_id=self.target_account_id,
            template_ref=self.template_ref,
        )


class TenantEvent(_CamelModel):
    """Request model for the delete and poll workers."""

    tenant_id: str = Field(..., description="Tenant ID", min_length=1, max_length=100)

    def to_tenant_id(self) -> TenantId:
        """Convert to the domain TenantId.

        Raises:
            ValueError: If the tenant ID is invalid
        """
        return TenantId.from_string(self.tenant_id)


class WorkerResultResponse(_CamelModel):
    """Response model for a worker invocation."""

    tenant_id: str = Field(..., description="Tenant ID")
    provisioning_state: str = Field(..., description="Provisioning state")
    done: bool = Field(..., description="Whether the driver should stop polling")
    error_detail: str | None = Field(default=None, description="Failure detail")

    @classmethod
    def from_result(cls, result: WorkerResult) -> WorkerResultResponse:
        """Convert an application WorkerResult to the wire model."""
        return cls(
            tenant_id=result.tenant_id,
            provisioning_state=result.provisioning_state.value,
            done=result.done,
            error_detail=result.error_detail,
        )


class TenantInfrastructureResponse(_CamelModel):
    """Response model for a tenant registry record."""

    tenant_id: str
    tier: str
    provisioning_state: str
    operation: str
    target_account_id: str | None = None
    template_ref: str | None = None
    stack_name: str | None = None
    stack_id: str | None = None
    poll_attempts: int = 0
    last_polled_at: datetime | None = None
    operation_started_at: datetime | None = None
    error_detail: str | None = None
    stack_outputs: dict[str, str] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime
    version: int

    @classmethod
    def from_domain(cls, record: TenantInfrastructure) -> TenantInfrastructureResponse:
        """Convert domain TenantInfrastructure aggregate to API response."""
        return cls(
            tenant_id=record.tenant_id.value,
            tier=record.tier.value,
            provisioning_state=record.provisioning_state.value,
            operation=record.operation.value,
            target_account_id=record.target_account_id,
            template_ref=record.template_ref,
            stack_name=record.stack_name,
            stack_id=record.stack_id,
            poll_attempts=record.poll_attempts,
            last_polled_at=record.last_polled_at,
            operation_started_at=record.operation_started_at,
            error_detail=record.error_detail,
            stack_outputs=dict(record.stack_outputs),
            created_at=record.created_at,
            updated_at=record.updated_at,
            version=record.version,
        )
