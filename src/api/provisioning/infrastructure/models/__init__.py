"""SQLAlchemy ORM models for the provisioning bounded context."""

from provisioning.infrastructure.models.tenant_infrastructure import (
    TenantInfrastructureModel,
)

__all__ = ["TenantInfrastructureModel"]
