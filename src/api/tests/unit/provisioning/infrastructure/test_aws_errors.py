"""Unit tests for AWS error translation."""

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from provisioning.infrastructure.aws.errors import (
    translate_client_error,
    translate_transport_error,
)
from provisioning.ports.exceptions import (
    ProvisioningPermissionError,
    StackAlreadyExistsError,
    StackNotFoundError,
    StackOperationError,
    TransientInfraError,
)


def client_error(code: str, message: str = "boom") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "Operation")


@pytest.mark.parametrize(
    ("code", "message", "expected"),
    [
        ("AccessDenied", "not authorized", ProvisioningPermissionError),
        ("ExpiredToken", "token expired", ProvisioningPermissionError),
        ("Throttling", "Rate exceeded", TransientInfraError),
        ("RequestLimitExceeded", "slow down", TransientInfraError),
        ("AlreadyExistsException", "Stack exists", StackAlreadyExistsError),
        ("ValidationError", "Stack with id x does not exist", StackNotFoundError),
        ("ValidationError", "Template format error", StackOperationError),
        ("LimitExceededException", "too many stacks", StackOperationError),
    ],
)
def test_translate_client_error(code, message, expected):
    error = translate_client_error(client_error(code, message), "describe stack x")

    assert type(error) is expected
    assert str(error).startswith("describe stack x: ")
    assert message in str(error)


def test_permission_error_is_builtin_permission_error():
    error = translate_client_error(client_error("AccessDenied"), "assume role")

    assert isinstance(error, PermissionError)


def test_translate_transport_error():
    error = translate_transport_error(
        EndpointConnectionError(endpoint_url="https://sts.amazonaws.com"), "assume role"
    )

    assert isinstance(error, TransientInfraError)
    assert "sts.amazonaws.com" in str(error)
