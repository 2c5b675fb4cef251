"""
AWS cloud provider implementation backed by CloudFormation and STS.
"""
import logging
from typing import Dict, List, Any, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from rosa_network.cloud.provider import CloudProvider
from rosa_network.errors import ProviderError
from rosa_network.network.models import StackRequest, StackState, StackStatus

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-west-2"

# Every status except DELETE_COMPLETE, for listing live stacks.
LIVE_STACK_STATUSES = [status.value for status in StackStatus if status is not StackStatus.DELETE_COMPLETE]


def _provider_error(e: Exception) -> ProviderError:
    """Wrap a botocore error, keeping the provider's message verbatim."""
    if isinstance(e, ClientError):
        error = e.response.get("Error", {})
        return ProviderError(error.get("Message") or str(e), code=error.get("Code"))
    return ProviderError(str(e))


class AWSProvider(CloudProvider):
    """AWS cloud provider implementation."""

    def __init__(self, config: Dict[str, Any]):
        """Initialize AWS cloud provider.

        Args:
            config: AWS configuration. Recognised keys: ``region``, ``profile``,
                ``connect_timeout`` and ``read_timeout``.
        """
        super().__init__(config)
        self.region = config.get("region") or DEFAULT_REGION
        self.profile = config.get("profile")
        self.client_config = BotoConfig(
            connect_timeout=config.get("connect_timeout", 10),
            read_timeout=config.get("read_timeout", 30),
        )
        try:
            self.session = boto3.session.Session(profile_name=self.profile, region_name=self.region)
            self.sts_client = self._get_client("sts")
        except BotoCoreError as e:
            raise _provider_error(e) from e

        # CloudFormation clients per region; a request may target another region.
        self._cloudformation_clients = {}

    def _get_client(self, service_name: str, region: Optional[str] = None):
        """Get an AWS client for the specified service.

        Args:
            service_name: AWS service name.
            region: Region of the client. Defaults to the provider region.

        Returns:
            AWS client.
        """
        return self.session.client(service_name, region_name=region or self.region, config=self.client_config)

    def cloudformation(self, region: Optional[str] = None):
        """Get the CloudFormation client for a region."""
        region = region or self.region
        if region not in self._cloudformation_clients:
            self._cloudformation_clients[region] = self._get_client("cloudformation", region)
        return self._cloudformation_clients[region]

    def get_account_id(self) -> str:
        """Get the AWS account ID of the current credentials.

        Returns:
            Account ID.
        """
        try:
            return self.sts_client.get_caller_identity()["Account"]
        except (ClientError, BotoCoreError) as e:
            raise _provider_error(e) from e

    def create_stack(self, request: StackRequest) -> str:
        """Create a CloudFormation stack.

        Args:
            request: Stack request.

        Returns:
            Stack ID.

        Raises:
            ProviderError: If CloudFormation rejects the request or is unreachable.
        """
        kwargs = {
            "StackName": request.stack_name,
            "TemplateBody": request.template_body,
            "Parameters": request.api_parameters(),
        }
        if request.tags:
            kwargs["Tags"] = request.api_tags()

        try:
            response = self.cloudformation(request.region).create_stack(**kwargs)
        except (ClientError, BotoCoreError) as e:
            self.logger.debug(f"Error creating stack {request.stack_name}: {e}")
            raise _provider_error(e) from e
        return response.get("StackId", "")

    def describe_stack(self, stack_name: str, region: Optional[str] = None) -> StackState:
        """Get the current state of a CloudFormation stack.

        Args:
            stack_name: Stack name or ID.
            region: Region of the stack. Defaults to the provider region.

        Returns:
            Stack state.
        """
        try:
            response = self.cloudformation(region).describe_stacks(StackName=stack_name)
        except (ClientError, BotoCoreError) as e:
            raise _provider_error(e) from e

        stacks = response.get("Stacks", [])
        if not stacks:
            raise ProviderError(f"Stack with id {stack_name} does not exist")
        stack = stacks[0]
        reasons = [stack["StackStatusReason"]] if stack.get("StackStatusReason") else []
        return StackState(
            stack_name=stack.get("StackName", stack_name),
            status=StackStatus(stack["StackStatus"]),
            reasons=reasons,
            stack_id=stack.get("StackId"),
        )

    def get_stack_failure_reasons(self, stack_name: str, region: Optional[str] = None) -> List[str]:
        """Get the status reasons of a stack's failed and rollback events.

        Args:
            stack_name: Stack name or ID.
            region: Region of the stack. Defaults to the provider region.

        Returns:
            Distinct status reasons, oldest first.
        """
        events = []
        try:
            paginator = self.cloudformation(region).get_paginator("describe_stack_events")
            for page in paginator.paginate(StackName=stack_name):
                events.extend(page.get("StackEvents", []))
        except (ClientError, BotoCoreError) as e:
            raise _provider_error(e) from e

        reasons = []
        # Events are returned newest first.
        for event in reversed(events):
            status = event.get("ResourceStatus", "")
            reason = event.get("ResourceStatusReason")
            if not reason or not (status.endswith("_FAILED") or "ROLLBACK" in status):
                continue
            line = f"{status}: {reason}"
            if line not in reasons:
                reasons.append(line)
        return reasons

    def delete_stack(self, stack_name: str, region: Optional[str] = None) -> None:
        """Request deletion of a CloudFormation stack.

        Args:
            stack_name: Stack name or ID.
            region: Region of the stack. Defaults to the provider region.
        """
        self.logger.info(f"Deleting stack {stack_name}")
        try:
            self.cloudformation(region).delete_stack(StackName=stack_name)
        except (ClientError, BotoCoreError) as e:
            raise _provider_error(e) from e

    def list_stacks(self, name_prefix: Optional[str] = None, region: Optional[str] = None) -> List[Dict[str, Any]]:
        """List live CloudFormation stacks.

        Args:
            name_prefix: Only return stacks whose name starts with this prefix.
            region: Region to list. Defaults to the provider region.

        Returns:
            List of stack summaries.
        """
        summaries = []
        try:
            paginator = self.cloudformation(region).get_paginator("list_stacks")
            for page in paginator.paginate(StackStatusFilter=LIVE_STACK_STATUSES):
                summaries.extend(page.get("StackSummaries", []))
        except (ClientError, BotoCoreError) as e:
            raise _provider_error(e) from e

        if name_prefix:
            summaries = [s for s in summaries if s.get("StackName", "").startswith(name_prefix)]
        return summaries
