"""Domain-Oriented Observability for provisioning infrastructure."""

from provisioning.infrastructure.observability.registry_probe import (
    DefaultTenantRegistryProbe,
    TenantRegistryProbe,
)

__all__ = [
    "DefaultTenantRegistryProbe",
    "TenantRegistryProbe",
]
