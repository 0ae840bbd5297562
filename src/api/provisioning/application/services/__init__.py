"""Application services for the provisioning bounded context.

The three lifecycle workers invoked by the external driver.
"""

from provisioning.application.services.create_infrastructure_worker import (
    CreateInfrastructureWorker,
)
from provisioning.application.services.delete_infrastructure_worker import (
    DeleteInfrastructureWorker,
)
from provisioning.application.services.poll_infrastructure_worker import (
    PollInfrastructureWorker,
)

__all__ = [
    "CreateInfrastructureWorker",
    "DeleteInfrastructureWorker",
    "PollInfrastructureWorker",
]
