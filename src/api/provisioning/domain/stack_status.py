"""Classification of declarative stack statuses.

Maps raw stack service statuses onto the three outcomes the lifecycle
state machine branches on, relative to the operation in flight.
"""

from __future__ import annotations

from enum import StrEnum

from provisioning.domain.value_objects import InfrastructureOperation


class StackOutcome(StrEnum):
    """Outcome of an observed stack status for the operation in flight."""

    COMPLETE = "COMPLETE"
    FAILED = "FAILED"
    IN_PROGRESS = "IN_PROGRESS"


CREATE_COMPLETE = "CREATE_COMPLETE"
CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
CREATE_FAILED = "CREATE_FAILED"
DELETE_COMPLETE = "DELETE_COMPLETE"
DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
DELETE_FAILED = "DELETE_FAILED"

# A stack that starts rolling back will never reach CREATE_COMPLETE.
_CREATE_FAILURE_PREFIXES = ("ROLLBACK_",)
_CREATE_FAILURE_STATUSES = frozenset({CREATE_FAILED, DELETE_COMPLETE})


def classify(operation: InfrastructureOperation, status: str) -> StackOutcome:
    """Classify a stack status for the given operation.

    Statuses that are neither a success nor a known failure for the
    operation are treated as still in progress; the poll budget bounds them.

    Args:
        operation: The operation currently in flight (CREATE or DELETE)
        status: Raw stack status reported by the stack service

    Returns:
        The outcome the state machine should apply

    Raises:
        ValueError: If no operation is in flight
    """
    if operation == InfrastructureOperation.CREATE:
        if status == CREATE_COMPLETE:
            return StackOutcome.COMPLETE
        if status in _CREATE_FAILURE_STATUSES or status.startswith(
            _CREATE_FAILURE_PREFIXES
        ):
            return StackOutcome.FAILED
        return StackOutcome.IN_PROGRESS

    if operation == InfrastructureOperation.DELETE:
        if status == DELETE_COMPLETE:
            return StackOutcome.COMPLETE
        if status == DELETE_FAILED:
            return StackOutcome.FAILED
        return StackOutcome.IN_PROGRESS

    raise ValueError(f"Cannot classify stack status without an operation: {status}")
