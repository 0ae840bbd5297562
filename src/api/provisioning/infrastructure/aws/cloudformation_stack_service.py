"""CloudFormation implementation of IStackService."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from botocore.exceptions import ClientError

from provisioning.domain.value_objects import (
    DelegatedCredentials,
    StackDescription,
    StackTag,
)
from provisioning.infrastructure.aws.clients import BotoClientFactory
from provisioning.infrastructure.aws.errors import (
    TRANSPORT_ERRORS,
    translate_client_error,
    translate_transport_error,
)
from provisioning.infrastructure.aws.stack_template import StackTemplateCatalog
from provisioning.ports.cloud import IStackService
from provisioning.ports.exceptions import StackNotFoundError, TransientInfraError
from shared_kernel.retry import RetryConfig, retry_async

T = TypeVar("T")


class CloudFormationStackService(IStackService):
    """Drives CloudFormation stacks in tenant accounts.

    Transient failures are retried in-call; everything else is translated
    and raised on the first attempt. A create that is retried after its
    response was lost surfaces as StackAlreadyExistsError, which the create
    worker resolves by adopting the stack.
    """

    def __init__(
        self,
        clients: BotoClientFactory,
        retry_config: RetryConfig,
        templates: StackTemplateCatalog | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._clients = clients
        self._retry_config = retry_config
        self._templates = templates or StackTemplateCatalog()
        self._sleep = sleep

    async def create_stack(
        self,
        name: str,
        template_ref: str,
        tags: list[StackTag],
        credentials: DelegatedCredentials,
    ) -> str:
        """Submit a stack creation and return the new stack id."""
        template = self._templates.render(
            template_ref, {tag.key: tag.value for tag in tags}
        )
        response = await self._call(
            credentials,
            f"create stack {name}",
            lambda cloudformation: cloudformation.create_stack(
                StackName=name,
                TemplateBody=json.dumps(template),
                Tags=[{"Key": tag.key, "Value": tag.value} for tag in tags],
                OnFailure="ROLLBACK",
                EnableTerminationProtection=False,
            ),
        )
        return response["StackId"]

    async def delete_stack(
        self, stack_id: str, credentials: DelegatedCredentials
    ) -> None:
        """Submit a stack deletion."""
        await self._call(
            credentials,
            f"delete stack {stack_id}",
            lambda cloudformation: cloudformation.delete_stack(StackName=stack_id),
        )

    async def describe_stack(
        self, stack_id: str, credentials: DelegatedCredentials
    ) -> StackDescription:
        """Describe the current status of a stack."""
        response = await self._call(
            credentials,
            f"describe stack {stack_id}",
            lambda cloudformation: cloudformation.describe_stacks(StackName=stack_id),
        )
        stacks = response.get("Stacks") or []
        if not stacks:
            raise StackNotFoundError(f"describe stack {stack_id}: no stack returned")

        stack = stacks[0]
        return StackDescription(
            stack_id=stack["StackId"],
            stack_name=stack["StackName"],
            status=stack["StackStatus"],
            reason=stack.get("StackStatusReason"),
            outputs={
                output["OutputKey"]: output["OutputValue"]
                for output in stack.get("Outputs", [])
            },
        )

    async def _call(
        self,
        credentials: DelegatedCredentials,
        action: str,
        operation: Callable[[Any], T],
    ) -> T:
        def invoke() -> T:
            cloudformation = self._clients.client("cloudformation", credentials)
            try:
                return operation(cloudformation)
            except ClientError as exc:
                raise translate_client_error(exc, action) from exc
            except TRANSPORT_ERRORS as exc:
                raise translate_transport_error(exc, action) from exc

        return await retry_async(
            lambda: asyncio.to_thread(invoke),
            config=self._retry_config,
            retryable_exceptions=(TransientInfraError,),
            sleep=self._sleep,
        )
