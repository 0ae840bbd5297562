"""Translation of AWS SDK failures into the provisioning error taxonomy."""

from __future__ import annotations

from botocore.exceptions import (
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from provisioning.ports.exceptions import (
    ProvisioningError,
    ProvisioningPermissionError,
    StackAlreadyExistsError,
    StackNotFoundError,
    StackOperationError,
    TransientInfraError,
)

PERMISSION_ERROR_CODES = frozenset(
    {
        "AccessDenied",
        "AccessDeniedException",
        "UnauthorizedOperation",
        "InvalidClientTokenId",
        "ExpiredToken",
        "ExpiredTokenException",
        "UnrecognizedClientException",
        "RegionDisabledException",
    }
)

TRANSIENT_ERROR_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "ProvisionedThroughputExceededException",
        "RequestTimeout",
        "ServiceUnavailable",
        "InternalFailure",
        "InternalError",
    }
)

# Network-level failures raised by botocore before any response is received.
TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    EndpointConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
    ConnectionClosedError,
)


def error_code(exc: ClientError) -> str:
    """Return the AWS error code carried by a ClientError."""
    return str(exc.response.get("Error", {}).get("Code", ""))


def error_message(exc: ClientError) -> str:
    """Return the AWS error message carried by a ClientError."""
    return str(exc.response.get("Error", {}).get("Message", "")) or str(exc)


def translate_client_error(exc: ClientError, action: str) -> ProvisioningError:
    """Map a ClientError raised while performing ``action`` to a provisioning error.

    Args:
        exc: The SDK error
        action: Short description of the attempted call, used in the message

    Returns:
        The provisioning error to raise in place of ``exc``
    """
    code = error_code(exc)
    message = error_message(exc)

    if code in PERMISSION_ERROR_CODES:
        return ProvisioningPermissionError(f"{action}: {message}")
    if code in TRANSIENT_ERROR_CODES:
        return TransientInfraError(f"{action}: {code}: {message}")
    if code == "AlreadyExistsException":
        return StackAlreadyExistsError(f"{action}: {message}")
    if code == "ValidationError" and "does not exist" in message:
        return StackNotFoundError(f"{action}: {message}")
    return StackOperationError(f"{action}: {code}: {message}")


def translate_transport_error(exc: Exception, action: str) -> TransientInfraError:
    """Wrap a network-level SDK failure as a transient error."""
    return TransientInfraError(f"{action}: {exc}")
