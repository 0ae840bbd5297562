"""Domain exceptions for the provisioning bounded context."""


class ProvisioningError(Exception):
    """Base exception for every provisioning lifecycle failure."""

    pass


class ConflictError(ProvisioningError):
    """Raised when a tenant already has an operation in flight.

    Also raised when a conditional registry write loses a race against
    another worker. Workers never retry a conflict themselves.
    """

    pass


class InvalidStateTransitionError(ProvisioningError):
    """Raised when a lifecycle transition is not allowed from the current state.

    Guards the monotonic-state rule: a record can never be moved backward
    within a single operation.
    """

    pass
