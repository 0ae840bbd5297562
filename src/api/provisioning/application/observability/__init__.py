"""Domain-Oriented Observability for the provisioning application layer.

One probe per worker plus one for delegated credential requests.
"""

from provisioning.application.observability.create_worker_probe import (
    CreateWorkerProbe,
    DefaultCreateWorkerProbe,
)
from provisioning.application.observability.cross_account_probe import (
    CrossAccountProbe,
    DefaultCrossAccountProbe,
)
from provisioning.application.observability.delete_worker_probe import (
    DefaultDeleteWorkerProbe,
    DeleteWorkerProbe,
)
from provisioning.application.observability.poll_worker_probe import (
    DefaultPollWorkerProbe,
    PollWorkerProbe,
)

__all__ = [
    "CreateWorkerProbe",
    "DefaultCreateWorkerProbe",
    "CrossAccountProbe",
    "DefaultCrossAccountProbe",
    "DeleteWorkerProbe",
    "DefaultDeleteWorkerProbe",
    "PollWorkerProbe",
    "DefaultPollWorkerProbe",
]
