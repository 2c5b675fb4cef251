"""
Tests for the stack orchestrator.
"""
import shlex

import pytest

from rosa_network.errors import ProviderError, ValidationError
from rosa_network.network.models import SubmissionMode, Tag
from rosa_network.network.orchestrator import ManualFormatter, StackOrchestrator, parse_mode, render
from rosa_network.network.resolver import ParameterResolver


@pytest.fixture
def resolved(single_vpc):
    resolver = ParameterResolver("123456789012", "us-west-2")
    return resolver.resolve(
        single_vpc,
        [
            "Name=ocp-77140-ab",
            "Region=us-west-2",
            "AvailabilityZoneCount=3",
            "Tags=Key1=Value1,Key2=Value2",
        ],
    )


def test_render_builds_canonical_request(resolved, single_vpc):
    """Test that the request carries every resolved value and tag."""
    request = render(resolved)

    assert request.stack_name == "ocp-77140-ab"
    assert request.region == "us-west-2"
    assert request.template_path == single_vpc.path
    assert request.template_body == single_vpc.body
    assert request.parameters == (
        ("AvailabilityZoneCount", "3"),
        ("Name", "ocp-77140-ab"),
        ("Region", "us-west-2"),
        ("VpcCidr", "10.0.0.0/16"),
    )
    assert request.tags == (Tag("Key1", "Value1"), Tag("Key2", "Value2"))
    assert request.api_tags() == [{"Key": "Key1", "Value": "Value1"}, {"Key": "Key2", "Value": "Value2"}]
    assert request.api_parameters()[0] == {"ParameterKey": "AvailabilityZoneCount", "ParameterValue": "3"}


def test_manual_mode_prints_command(resolved, single_vpc):
    """Test the exact manual command line."""
    result = StackOrchestrator().submit(resolved, "manual")

    assert result.mode is SubmissionMode.MANUAL
    assert result.stack_name == "ocp-77140-ab"
    assert result.stack_id is None
    assert result.command == (
        "aws cloudformation create-stack --stack-name ocp-77140-ab "
        f"--template-body file://{single_vpc.path} "
        "--parameters ParameterKey=AvailabilityZoneCount,ParameterValue=3 "
        "ParameterKey=Name,ParameterValue=ocp-77140-ab "
        "ParameterKey=Region,ParameterValue=us-west-2 "
        "ParameterKey=VpcCidr,ParameterValue=10.0.0.0/16 "
        "--tags Key=Key1,Value=Value1 Key=Key2,Value=Value2 "
        "--region us-west-2"
    )


def test_manual_mode_is_reproducible(resolved):
    first = StackOrchestrator().submit(resolved, SubmissionMode.MANUAL).command
    second = StackOrchestrator().submit(resolved, SubmissionMode.MANUAL).command
    assert first == second


def test_manual_mode_does_not_call_provider(resolved, fake_provider):
    provider = fake_provider()
    StackOrchestrator(provider).submit(resolved, "manual")
    assert provider.created == []


def test_manual_and_auto_submit_the_same_content(resolved, fake_provider):
    """Test that the manual command encodes exactly what auto mode sends."""
    provider = fake_provider()
    StackOrchestrator(provider).submit(resolved, "auto")
    sent = provider.created[0]

    tokens = shlex.split(StackOrchestrator().submit(resolved, "manual").command)
    parameters = tokens[tokens.index("--parameters") + 1 : tokens.index("--tags")]
    tags = tokens[tokens.index("--tags") + 1 : tokens.index("--region")]

    assert tokens[tokens.index("--stack-name") + 1] == sent.stack_name
    assert tokens[tokens.index("--region") + 1] == sent.region
    assert tokens[tokens.index("--template-body") + 1] == f"file://{sent.template_path}"
    assert parameters == [
        f"ParameterKey={p['ParameterKey']},ParameterValue={p['ParameterValue']}" for p in sent.api_parameters()
    ]
    assert tags == [f"Key={t['Key']},Value={t['Value']}" for t in sent.api_tags()]


def test_manual_command_quotes_shell_metacharacters(single_vpc):
    resolver = ParameterResolver("123456789012", "us-west-2")
    resolved = resolver.resolve(single_vpc, ["Name=my stack", "Tags=Team=net ops"])

    command = ManualFormatter().format(render(resolved))

    assert "--stack-name 'my stack'" in command
    assert "'Key=Team,Value=net ops'" in command
    assert shlex.split(command)[4] == "my stack"


def test_manual_command_without_tags(single_vpc):
    resolver = ParameterResolver("123456789012", "us-west-2")
    command = ManualFormatter().format(render(resolver.resolve(single_vpc, ["Name=plain"])))
    assert "--tags" not in command
    assert command.endswith("--region us-west-2")


def test_auto_mode_creates_stack(resolved, fake_provider, caplog):
    """Test that auto mode creates the stack and reports it."""
    provider = fake_provider()

    with caplog.at_level("INFO"):
        result = StackOrchestrator(provider).submit(resolved, "auto")

    assert result.mode is SubmissionMode.AUTO
    assert result.message == "Stack ocp-77140-ab created"
    assert result.stack_id.endswith("stack/ocp-77140-ab/1")
    assert result.command is None
    assert provider.created == [render(resolved)]
    assert "Stack ocp-77140-ab created" in caplog.text


def test_auto_mode_propagates_provider_error(resolved, fake_provider):
    """Test that the provider's message reaches the caller unmodified."""
    message = (
        "Value '$#aaraj' at 'stackName' failed to satisfy constraint: "
        "Member must satisfy regular expression pattern: [a-zA-Z][-a-zA-Z0-9]*"
    )
    provider = fake_provider(create_error=ProviderError(message, code="ValidationError"))

    with pytest.raises(ProviderError) as excinfo:
        StackOrchestrator(provider).submit(resolved, "auto")

    assert str(excinfo.value) == message


def test_auto_mode_requires_provider(resolved):
    with pytest.raises(ValueError):
        StackOrchestrator().submit(resolved, "auto")


def test_parse_mode():
    assert parse_mode("auto") is SubmissionMode.AUTO
    assert parse_mode(SubmissionMode.MANUAL) is SubmissionMode.MANUAL
    with pytest.raises(ValidationError, match="invalid mode 'dry-run'"):
        parse_mode("dry-run")
