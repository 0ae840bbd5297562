"""Domain probes for process-level events.

Business code never logs directly; it calls a probe whose methods are named
after what happened.
See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from infrastructure.observability.probes import (
    ConnectionProbe,
    DefaultConnectionProbe,
    DefaultServiceLifecycleProbe,
    ServiceLifecycleProbe,
)

__all__ = [
    "ConnectionProbe",
    "DefaultConnectionProbe",
    "DefaultServiceLifecycleProbe",
    "ServiceLifecycleProbe",
]
