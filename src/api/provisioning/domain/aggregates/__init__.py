"""Domain aggregates for the provisioning context.

The tenant infrastructure record is the only aggregate: every worker loads
it, applies one transition and writes it back conditionally.
"""

from provisioning.domain.aggregates.tenant_infrastructure import (
    PERMISSION_DENIED_DETAIL,
    PROVISIONING_TIMEOUT_DETAIL,
    SUBMISSION_INTERRUPTED_DETAIL,
    TenantInfrastructure,
)

__all__ = [
    "PERMISSION_DENIED_DETAIL",
    "PROVISIONING_TIMEOUT_DETAIL",
    "SUBMISSION_INTERRUPTED_DETAIL",
    "TenantInfrastructure",
]
