"""Unit tests for the AWS adapters with mocked boto3 clients."""

import json
from datetime import UTC, datetime
from unittest.mock import MagicMock, Mock

import boto3
import pytest
from botocore.exceptions import ClientError

from provisioning.domain.value_objects import DelegatedCredentials, StackTag, TenantId
from provisioning.infrastructure.aws import (
    BotoClientFactory,
    CloudFormationStackService,
    DynamoDBSharedTenantStore,
    StsCredentialIssuer,
)
from provisioning.ports.exceptions import (
    ProvisioningPermissionError,
    StackNotFoundError,
    StackOperationError,
    TransientInfraError,
)
from shared_kernel.retry import RetryConfig

EXPIRY = datetime(2026, 1, 1, 13, 0, tzinfo=UTC)
CREDENTIALS = DelegatedCredentials(
    access_key_id="AKIA1",
    secret_access_key="secret",
    session_token="token",
    expiration=EXPIRY,
)
RETRY = RetryConfig(max_retries=2, base_delay=0.01, jitter=False)
TAGS = [
    StackTag(key="TenantId", value="tenant-b"),
    StackTag(key="TenantTier", value="DEDICATED"),
]


def client_error(code: str, message: str = "boom") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "Operation")


async def no_sleep(_delay: float) -> None:
    return None


@pytest.fixture
def mock_client():
    return MagicMock()


@pytest.fixture
def clients(mock_client):
    factory = Mock(spec=BotoClientFactory)
    factory.client.return_value = mock_client
    factory.resource.return_value.Table.return_value = mock_client
    return factory


class TestBotoClientFactory:
    def test_delegated_credentials_build_scoped_session(self, monkeypatch):
        session_cls = MagicMock()
        monkeypatch.setattr(boto3.session, "Session", session_cls)
        factory = BotoClientFactory(region="eu-west-1")

        factory.client("cloudformation", CREDENTIALS)

        session_cls.assert_called_once_with(
            aws_access_key_id="AKIA1",
            aws_secret_access_key="secret",
            aws_session_token="token",
            region_name="eu-west-1",
        )
        config = session_cls.return_value.client.call_args.kwargs["config"]
        assert config.retries == {"total_max_attempts": 1, "mode": "standard"}

    def test_default_chain_without_credentials(self, monkeypatch):
        session_cls = MagicMock()
        monkeypatch.setattr(boto3.session, "Session", session_cls)

        BotoClientFactory(region="eu-west-1").resource("dynamodb")

        session_cls.assert_called_once_with(region_name="eu-west-1")


class TestStsCredentialIssuer:
    @pytest.mark.asyncio
    async def test_returns_credentials(self, clients, mock_client):
        mock_client.assume_role.return_value = {
            "Credentials": {
                "AccessKeyId": "AKIA2",
                "SecretAccessKey": "s",
                "SessionToken": "t",
                "Expiration": EXPIRY,
            }
        }

        credentials = await StsCredentialIssuer(clients).assume_role(
            "arn:aws:iam::999:role/CrossAccountTenantRole", "tenant-infra-b", 3600
        )

        assert credentials.access_key_id == "AKIA2"
        assert credentials.expiration == EXPIRY
        clients.client.assert_called_once_with("sts")
        mock_client.assume_role.assert_called_once_with(
            RoleArn="arn:aws:iam::999:role/CrossAccountTenantRole",
            RoleSessionName="tenant-infra-b",
            DurationSeconds=3600,
        )

    @pytest.mark.asyncio
    async def test_untrusted_role_is_permission_error(self, clients, mock_client):
        mock_client.assume_role.side_effect = client_error(
            "AccessDenied", "not authorized to perform sts:AssumeRole"
        )

        with pytest.raises(ProvisioningPermissionError, match="sts:AssumeRole"):
            await StsCredentialIssuer(clients).assume_role("arn", "s", 900)

    @pytest.mark.asyncio
    async def test_unexpected_error_is_permission_error(self, clients, mock_client):
        mock_client.assume_role.side_effect = client_error("MalformedPolicyDocument")

        with pytest.raises(ProvisioningPermissionError):
            await StsCredentialIssuer(clients).assume_role("arn", "s", 900)

    @pytest.mark.asyncio
    async def test_throttling_is_transient(self, clients, mock_client):
        mock_client.assume_role.side_effect = client_error("Throttling")

        with pytest.raises(TransientInfraError):
            await StsCredentialIssuer(clients).assume_role("arn", "s", 900)


class TestCloudFormationStackService:
    @pytest.fixture
    def service(self, clients):
        return CloudFormationStackService(clients, RETRY, sleep=no_sleep)

    @pytest.mark.asyncio
    async def test_create_stack_submits_rendered_template(
        self, service, clients, mock_client
    ):
        mock_client.create_stack.return_value = {"StackId": "stack-1"}

        stack_id = await service.create_stack(
            "tenant-tenant-b-infra", "dedicated-table", TAGS, CREDENTIALS
        )

        assert stack_id == "stack-1"
        clients.client.assert_called_with("cloudformation", CREDENTIALS)
        kwargs = mock_client.create_stack.call_args.kwargs
        assert kwargs["StackName"] == "tenant-tenant-b-infra"
        assert kwargs["OnFailure"] == "ROLLBACK"
        assert kwargs["Tags"] == [
            {"Key": "TenantId", "Value": "tenant-b"},
            {"Key": "TenantTier", "Value": "DEDICATED"},
        ]
        template = json.loads(kwargs["TemplateBody"])
        table = template["Resources"]["TenantTable"]["Properties"]
        assert table["TableName"] == "TENANT_tenant-b"

    @pytest.mark.asyncio
    async def test_unknown_template_is_rejected(self, service, mock_client):
        with pytest.raises(StackOperationError, match="Unknown stack template"):
            await service.create_stack("s", "no-such-template", TAGS, CREDENTIALS)

        mock_client.create_stack.assert_not_called()

    @pytest.mark.asyncio
    async def test_throttled_call_is_retried(self, service, mock_client):
        mock_client.delete_stack.side_effect = [client_error("Throttling"), {}]

        await service.delete_stack("stack-1", CREDENTIALS)

        assert mock_client.delete_stack.call_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_transient(self, service, mock_client):
        mock_client.delete_stack.side_effect = client_error("Throttling")

        with pytest.raises(TransientInfraError):
            await service.delete_stack("stack-1", CREDENTIALS)

        assert mock_client.delete_stack.call_count == 3

    @pytest.mark.asyncio
    async def test_permission_error_is_not_retried(self, service, mock_client):
        mock_client.describe_stacks.side_effect = client_error("AccessDenied")

        with pytest.raises(ProvisioningPermissionError):
            await service.describe_stack("stack-1", CREDENTIALS)

        assert mock_client.describe_stacks.call_count == 1

    @pytest.mark.asyncio
    async def test_describe_maps_status_reason_and_outputs(self, service, mock_client):
        mock_client.describe_stacks.return_value = {
            "Stacks": [
                {
                    "StackId": "stack-1",
                    "StackName": "tenant-tenant-b-infra",
                    "StackStatus": "CREATE_COMPLETE",
                    "StackStatusReason": "done",
                    "Outputs": [
                        {"OutputKey": "TenantTableName", "OutputValue": "TENANT_tenant-b"}
                    ],
                }
            ]
        }

        description = await service.describe_stack("stack-1", CREDENTIALS)

        assert description.status == "CREATE_COMPLETE"
        assert description.reason == "done"
        assert description.outputs == {"TenantTableName": "TENANT_tenant-b"}

    @pytest.mark.asyncio
    async def test_describe_missing_stack(self, service, mock_client):
        mock_client.describe_stacks.side_effect = client_error(
            "ValidationError", "Stack with id stack-1 does not exist"
        )

        with pytest.raises(StackNotFoundError):
            await service.describe_stack("stack-1", CREDENTIALS)


class TestDynamoDBSharedTenantStore:
    @pytest.fixture
    def store(self, clients):
        return DynamoDBSharedTenantStore(clients, "TENANT_PUBLIC", RETRY, sleep=no_sleep)

    @pytest.mark.asyncio
    async def test_put_tenant_writes_init_row(self, store, clients, mock_client):
        await store.put_tenant(TenantId.from_string("tenant-a"))

        clients.resource.assert_called_with("dynamodb")
        clients.resource.return_value.Table.assert_called_with("TENANT_PUBLIC")
        item = mock_client.put_item.call_args.kwargs["Item"]
        assert item["pk"] == "TENANT#tenant-a"
        assert item["sk"] == "init"
        assert item["tenantId"] == "tenant-a"

    @pytest.mark.asyncio
    async def test_delete_tenant_removes_every_page(self, store, mock_client):
        mock_client.query.side_effect = [
            {
                "Items": [{"pk": "TENANT#tenant-a", "sk": "init"}],
                "LastEvaluatedKey": {"pk": "TENANT#tenant-a", "sk": "init"},
            },
            {"Items": [{"pk": "TENANT#tenant-a", "sk": "order#1"}]},
        ]
        batch = mock_client.batch_writer.return_value.__enter__.return_value

        removed = await store.delete_tenant(TenantId.from_string("tenant-a"))

        assert removed == 2
        assert mock_client.query.call_count == 2
        assert "ExclusiveStartKey" in mock_client.query.call_args_list[1].kwargs
        assert batch.delete_item.call_count == 2

    @pytest.mark.asyncio
    async def test_delete_tenant_with_no_rows(self, store, mock_client):
        mock_client.query.return_value = {"Items": []}

        assert await store.delete_tenant(TenantId.from_string("tenant-a")) == 0
