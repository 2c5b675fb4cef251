"""
Data model for network resource stacks.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class StackStatus(Enum):
    """CloudFormation stack statuses."""

    CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
    CREATE_COMPLETE = "CREATE_COMPLETE"
    CREATE_FAILED = "CREATE_FAILED"
    ROLLBACK_IN_PROGRESS = "ROLLBACK_IN_PROGRESS"
    ROLLBACK_COMPLETE = "ROLLBACK_COMPLETE"
    ROLLBACK_FAILED = "ROLLBACK_FAILED"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
    DELETE_COMPLETE = "DELETE_COMPLETE"
    DELETE_FAILED = "DELETE_FAILED"
    UPDATE_IN_PROGRESS = "UPDATE_IN_PROGRESS"
    UPDATE_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_COMPLETE = "UPDATE_COMPLETE"
    UPDATE_FAILED = "UPDATE_FAILED"
    UPDATE_ROLLBACK_IN_PROGRESS = "UPDATE_ROLLBACK_IN_PROGRESS"
    UPDATE_ROLLBACK_FAILED = "UPDATE_ROLLBACK_FAILED"
    UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_ROLLBACK_COMPLETE = "UPDATE_ROLLBACK_COMPLETE"
    REVIEW_IN_PROGRESS = "REVIEW_IN_PROGRESS"
    IMPORT_IN_PROGRESS = "IMPORT_IN_PROGRESS"
    IMPORT_COMPLETE = "IMPORT_COMPLETE"
    IMPORT_ROLLBACK_IN_PROGRESS = "IMPORT_ROLLBACK_IN_PROGRESS"
    IMPORT_ROLLBACK_FAILED = "IMPORT_ROLLBACK_FAILED"
    IMPORT_ROLLBACK_COMPLETE = "IMPORT_ROLLBACK_COMPLETE"

    @property
    def is_rollback(self) -> bool:
        return "ROLLBACK" in self.value

    @property
    def is_failure(self) -> bool:
        return self.value.endswith("_FAILED") or self.is_rollback


# A rollback in progress already means the create failed, so it ends the wait.
DEFAULT_TERMINAL_STATES = frozenset(
    status
    for status in StackStatus
    if not status.value.endswith("_IN_PROGRESS") or status is StackStatus.ROLLBACK_IN_PROGRESS
)


class SubmissionMode(Enum):
    """How a rendered stack request is applied."""

    AUTO = "auto"
    MANUAL = "manual"


@dataclass(frozen=True)
class ParameterDeclaration:
    """A parameter declared in a template's Parameters section."""

    name: str
    type: str = "String"
    default: Optional[str] = None
    description: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    allowed_values: Tuple[str, ...] = ()
    allowed_pattern: Optional[str] = None

    @property
    def is_number(self) -> bool:
        return self.type == "Number"

    @property
    def is_list(self) -> bool:
        return self.type == "CommaDelimitedList" or self.type.startswith("List<")

    @property
    def required(self) -> bool:
        return self.default is None


@dataclass(frozen=True)
class Template:
    """A CloudFormation template loaded from the catalog."""

    name: str
    path: Path
    body: str
    document: Dict[str, Any] = field(repr=False, compare=False)
    parameters: Tuple[ParameterDeclaration, ...] = ()

    @property
    def parameter_names(self) -> List[str]:
        return [p.name for p in self.parameters]

    def get_parameter(self, name: str) -> Optional[ParameterDeclaration]:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None


@dataclass(frozen=True)
class Tag:
    key: str
    value: str


@dataclass(frozen=True)
class ResolvedParameterSet:
    """Final parameter values for one submission, keyed by parameter name."""

    template: Template
    values: Dict[str, str]
    tags: Tuple[Tag, ...] = ()

    @property
    def stack_name(self) -> str:
        return self.values["Name"]

    @property
    def region(self) -> str:
        return self.values["Region"]


@dataclass(frozen=True)
class StackRequest:
    """Canonical description of a create-stack call.

    Both the API call and the manual command are produced from this value.
    """

    stack_name: str
    region: str
    template_path: Path
    template_body: str = field(repr=False)
    parameters: Tuple[Tuple[str, str], ...] = ()
    tags: Tuple[Tag, ...] = ()

    def api_parameters(self) -> List[Dict[str, str]]:
        return [{"ParameterKey": key, "ParameterValue": value} for key, value in self.parameters]

    def api_tags(self) -> List[Dict[str, str]]:
        return [{"Key": tag.key, "Value": tag.value} for tag in self.tags]


@dataclass
class SubmissionResult:
    """Outcome of submitting a stack request."""

    mode: SubmissionMode
    stack_name: str
    message: str
    stack_id: Optional[str] = None
    command: Optional[str] = None


@dataclass
class StackState:
    """A snapshot of a stack's status as reported by the provider."""

    stack_name: str
    status: StackStatus
    reasons: List[str] = field(default_factory=list)
    stack_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return not self.status.is_failure
