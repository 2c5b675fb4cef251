"""
Pytest configuration file for all tests.
"""
import os

import pytest

from rosa_network.cloud.provider import CloudProvider
from rosa_network.network.catalog import TEMPLATE_FILENAME, TemplateCatalog
from rosa_network.network.models import StackState, StackStatus

ACCOUNT_ID = "123456789012"

SINGLE_VPC_TEMPLATE = """\
AWSTemplateFormatVersion: '2010-09-09'
Description: Single VPC
Parameters:
  AvailabilityZoneCount:
    Type: Number
    Default: 1
    MinValue: 1
    MaxValue: 3
  Region:
    Type: String
  Name:
    Type: String
  VpcCidr:
    Type: String
    Default: 10.0.0.0/16
Resources:
  VPC:
    Type: AWS::EC2::VPC
    Properties:
      CidrBlock: !Ref VpcCidr
      Tags:
        - Key: Name
          Value: !Sub '${Name}-vpc'
"""

WITHOUT_REGION_TEMPLATE = """\
Parameters:
  Name:
    Type: String
  VpcCidr:
    Type: String
    Default: 10.0.0.0/16
Resources:
  VPC:
    Type: AWS::EC2::VPC
    Properties:
      CidrBlock: !Ref VpcCidr
"""

WITHOUT_NAME_TEMPLATE = """\
Parameters:
  Region:
    Type: String
  VpcCidr:
    Type: String
    Default: 10.0.0.0/16
Resources:
  VPC:
    Type: AWS::EC2::VPC
    Properties:
      CidrBlock: !Ref VpcCidr
"""

WITHOUT_VPC_CIDR_TEMPLATE = """\
Parameters:
  Region:
    Type: String
  Name:
    Type: String
  VpcCidr:
    Type: String
Resources:
  VPC:
    Type: AWS::EC2::VPC
    Properties:
      CidrBlock: !Ref VpcCidr
"""


class FakeProvider(CloudProvider):
    """In-memory cloud provider that replays a scripted list of stack statuses."""

    def __init__(self, config=None, statuses=None, reasons=None, create_error=None):
        super().__init__(config or {"region": "us-west-2"})
        self.statuses = list(statuses or [StackStatus.CREATE_COMPLETE])
        self.reasons = list(reasons or [])
        self.create_error = create_error
        self.created = []
        self.deleted = []
        self.describe_calls = 0

    def get_account_id(self):
        return ACCOUNT_ID

    def create_stack(self, request):
        if self.create_error is not None:
            raise self.create_error
        self.created.append(request)
        return f"arn:aws:cloudformation:{request.region}:{ACCOUNT_ID}:stack/{request.stack_name}/1"

    def describe_stack(self, stack_name):
        self.describe_calls += 1
        # The last scripted status repeats forever.
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(status, Exception):
            raise status
        return StackState(stack_name=stack_name, status=status)

    def get_stack_failure_reasons(self, stack_name):
        return list(self.reasons)

    def delete_stack(self, stack_name):
        self.deleted.append(stack_name)

    def list_stacks(self, name_prefix=None):
        return [{"StackName": request.stack_name} for request in self.created]

    def with_region(self, region):
        return self


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the caller's environment and config file out of every test."""
    for name in ("OCM_TEMPLATE_DIR", "AWS_REGION", "AWS_PROFILE"):
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("ROSA_NETWORK_PARAM_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr("rosa_network.config.config.DEFAULT_CONFIG_PATH", tmp_path / "missing" / "config.yaml")


@pytest.fixture
def template_dir(tmp_path):
    """Create a template catalog root with the test templates in it."""
    root = tmp_path / "templates"
    templates = {
        "single-vpc": SINGLE_VPC_TEMPLATE,
        "without-region": WITHOUT_REGION_TEMPLATE,
        "without-name": WITHOUT_NAME_TEMPLATE,
        "without-vpccidr": WITHOUT_VPC_CIDR_TEMPLATE,
    }
    for name, body in templates.items():
        directory = root / name
        directory.mkdir(parents=True)
        (directory / TEMPLATE_FILENAME).write_text(body)
    return root


@pytest.fixture
def catalog(template_dir):
    return TemplateCatalog(template_dir)


@pytest.fixture
def single_vpc(catalog):
    return catalog.resolve("single-vpc")


@pytest.fixture
def fake_provider():
    """Build a fresh fake provider per test."""

    def _build(**kwargs):
        return FakeProvider(**kwargs)

    return _build
