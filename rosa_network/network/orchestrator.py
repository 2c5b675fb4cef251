"""
Stack orchestration: render a resolved parameter set once, then either
create the stack through the cloud provider or print the equivalent
AWS CLI command.
"""
import logging
import shlex
from typing import Union

from rosa_network.cloud.provider import CloudProvider
from rosa_network.errors import ValidationError
from rosa_network.network.models import ResolvedParameterSet, StackRequest, SubmissionMode, SubmissionResult

logger = logging.getLogger(__name__)


def render(resolved: ResolvedParameterSet) -> StackRequest:
    """Build the canonical create-stack request for a resolved parameter set."""
    return StackRequest(
        stack_name=resolved.stack_name,
        region=resolved.region,
        template_path=resolved.template.path,
        template_body=resolved.template.body,
        parameters=tuple(resolved.values.items()),
        tags=resolved.tags,
    )


def parse_mode(mode: Union[str, SubmissionMode]) -> SubmissionMode:
    if isinstance(mode, SubmissionMode):
        return mode
    try:
        return SubmissionMode(mode)
    except ValueError:
        raise ValidationError(f"invalid mode '{mode}', expected one of: auto, manual")


class ManualFormatter:
    """Formats a stack request as an ``aws cloudformation create-stack`` command."""

    def format(self, request: StackRequest) -> str:
        q = shlex.quote
        parts = [
            "aws cloudformation create-stack",
            f"--stack-name {q(request.stack_name)}",
            f"--template-body {q('file://' + str(request.template_path))}",
        ]
        if request.parameters:
            parameters = " ".join(
                q(f"ParameterKey={key},ParameterValue={value}") for key, value in request.parameters
            )
            parts.append(f"--parameters {parameters}")
        if request.tags:
            tags = " ".join(q(f"Key={tag.key},Value={tag.value}") for tag in request.tags)
            parts.append(f"--tags {tags}")
        parts.append(f"--region {q(request.region)}")
        return " ".join(parts)

    def submit(self, request: StackRequest) -> SubmissionResult:
        command = self.format(request)
        return SubmissionResult(
            mode=SubmissionMode.MANUAL,
            stack_name=request.stack_name,
            message="Run the following command to create the stack manually:",
            command=command,
        )


class AutoApplier:
    """Creates the stack through the cloud provider."""

    def __init__(self, provider: CloudProvider):
        self.provider = provider
        self.logger = logging.getLogger(f"{__name__}.AutoApplier")

    def submit(self, request: StackRequest) -> SubmissionResult:
        self.logger.info(f"Creating stack {request.stack_name} in region {request.region}")
        stack_id = self.provider.create_stack(request)
        message = f"Stack {request.stack_name} created"
        self.logger.info(message)
        return SubmissionResult(
            mode=SubmissionMode.AUTO,
            stack_name=request.stack_name,
            message=message,
            stack_id=stack_id,
        )


class StackOrchestrator:
    """Submits resolved parameter sets in auto or manual mode."""

    def __init__(self, provider: CloudProvider = None):
        """Initialize the orchestrator.

        Args:
            provider: Cloud provider used in auto mode. Not needed for manual mode.
        """
        self.provider = provider
        self.formatter = ManualFormatter()

    def submit(
        self, resolved: ResolvedParameterSet, mode: Union[str, SubmissionMode] = SubmissionMode.AUTO
    ) -> SubmissionResult:
        """Submit a resolved parameter set.

        Args:
            resolved: Resolved parameter set.
            mode: ``auto`` to create the stack, ``manual`` to only print the command.

        Returns:
            Submission result.

        Raises:
            ValidationError: If the mode is unknown.
            ProviderError: If the provider rejects the create request.
        """
        mode = parse_mode(mode)
        request = render(resolved)

        if mode is SubmissionMode.MANUAL:
            return self.formatter.submit(request)

        if self.provider is None:
            raise ValueError("auto mode requires a cloud provider")
        return AutoApplier(self.provider).submit(request)
