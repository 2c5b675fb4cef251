"""
Parameter resolution and validation for network resource templates.
"""
import logging
import math
import os
import re
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from rosa_network.errors import ValidationError
from rosa_network.network.catalog import BUNDLED_TEMPLATE_DIR
from rosa_network.network.models import ParameterDeclaration, ResolvedParameterSet, Tag, Template

logger = logging.getLogger(__name__)

TEMPLATE_DIR_ENV = "OCM_TEMPLATE_DIR"
PARAM_ENV_PREFIX = "ROSA_NETWORK_PARAM_"
DEFAULT_NAME_PREFIX = "rosa-network-stack"
TAGS_PARAMETER = "Tags"


def resolve_template_dir(
    flag_value: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    default: Union[str, Path, None] = None,
) -> Path:
    """Pick the template catalog root.

    The explicit flag wins over the OCM_TEMPLATE_DIR environment variable,
    which wins over the default (the bundled templates).
    """
    environ = os.environ if environ is None else environ
    if flag_value:
        return Path(flag_value)
    if environ.get(TEMPLATE_DIR_ENV):
        return Path(environ[TEMPLATE_DIR_ENV])
    return Path(default) if default is not None else BUNDLED_TEMPLATE_DIR


def parameter_overrides_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collect ``ROSA_NETWORK_PARAM_<Name>=<value>`` variables as parameter overrides."""
    environ = os.environ if environ is None else environ
    return {
        key[len(PARAM_ENV_PREFIX) :]: value
        for key, value in sorted(environ.items())
        if key.startswith(PARAM_ENV_PREFIX) and len(key) > len(PARAM_ENV_PREFIX)
    }


def default_stack_name(account_id: str, prefix: str = DEFAULT_NAME_PREFIX) -> str:
    return f"{prefix}-{account_id}"


def parse_param_flags(entries: Iterable[str]) -> List[Tuple[str, str]]:
    """Split ``key=value`` entries, keeping their order.

    Raises:
        ValidationError: If an entry has no ``=`` or an empty key.
    """
    pairs = []
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key.strip():
            raise ValidationError("invalid parameter format")
        pairs.append((key.strip(), value))
    return pairs


def parse_tags(value: str) -> Tuple[Tag, ...]:
    """Parse ``Key1=Value1,Key2=Value2`` into tags.

    Raises:
        ValidationError: On a malformed pair or a key repeated in any letter case.
    """
    tags = []
    seen = set()
    for pair in value.split(","):
        pair = pair.strip()
        if not pair:
            continue
        key, sep, tag_value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValidationError(f"invalid tag format '{pair}'")
        if key.casefold() in seen:
            raise ValidationError(f"duplicate tag key {key}")
        seen.add(key.casefold())
        tags.append(Tag(key=key, value=tag_value.strip()))
    return tuple(tags)


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def validate_value(declaration: ParameterDeclaration, value: str) -> None:
    """Check a value against its declared constraints.

    Raises:
        ValidationError: Naming the parameter and the violated constraint.
    """
    name = declaration.name

    if declaration.is_number:
        try:
            number = float(value)
        except ValueError:
            raise ValidationError(f"Parameter '{name}' must be a number")
        if not math.isfinite(number):
            raise ValidationError(f"Parameter '{name}' must be a number")
        if declaration.max_value is not None and number > declaration.max_value:
            raise ValidationError(
                f"Parameter '{name}' must be a number not greater than {_format_number(declaration.max_value)}"
            )
        if declaration.min_value is not None and number < declaration.min_value:
            raise ValidationError(
                f"Parameter '{name}' must be a number not less than {_format_number(declaration.min_value)}"
            )

    items = [item.strip() for item in value.split(",")] if declaration.is_list else [value]

    if declaration.allowed_values:
        for item in items:
            if item not in declaration.allowed_values:
                allowed = ", ".join(declaration.allowed_values)
                raise ValidationError(f"Parameter '{name}' must be one of [{allowed}]")

    if declaration.allowed_pattern:
        for item in items:
            if not re.fullmatch(declaration.allowed_pattern, item):
                raise ValidationError(f"Parameter '{name}' must match pattern {declaration.allowed_pattern}")

    if declaration.min_length is not None and len(value) < declaration.min_length:
        raise ValidationError(f"Parameter '{name}' must be at least {declaration.min_length} characters")
    if declaration.max_length is not None and len(value) > declaration.max_length:
        raise ValidationError(f"Parameter '{name}' must be at most {declaration.max_length} characters")


class ParameterResolver:
    """Merges defaults, overrides and user parameters for a template."""

    def __init__(
        self,
        account_id: Union[str, Callable[[], str], None],
        default_region: str,
        name_prefix: str = DEFAULT_NAME_PREFIX,
    ):
        """Initialize the resolver.

        Args:
            account_id: Caller's cloud account ID, or a callable returning it, used to
                derive the default stack name. A callable is only invoked when the
                name has to be derived and every supplied value is valid.
            default_region: Region used when no Region parameter is supplied.
            name_prefix: Prefix of the derived default stack name.
        """
        self.account_id = account_id
        self.default_region = default_region
        self.name_prefix = name_prefix
        self.logger = logging.getLogger(f"{__name__}.ParameterResolver")

    def _lookup_account_id(self) -> Optional[str]:
        if callable(self.account_id):
            return self.account_id()
        return self.account_id

    def resolve(
        self,
        template: Template,
        user_params: Iterable[str] = (),
        env_overrides: Optional[Mapping[str, str]] = None,
    ) -> ResolvedParameterSet:
        """Resolve the final parameter set for a template.

        Args:
            template: Template to resolve against.
            user_params: Raw ``key=value`` entries from the command line.
            env_overrides: Environment-derived values; beat template defaults, lose to user params.

        Returns:
            The resolved parameter set.

        Raises:
            ValidationError: If any entry is malformed, unknown, out of range or missing.
        """
        values: Dict[str, str] = {}
        # Keys in the order they were introduced, so error messages are stable.
        supplied: List[str] = []

        for declaration in template.parameters:
            if declaration.default is not None:
                values[declaration.name] = declaration.default

        for key, value in (env_overrides or {}).items():
            values[key] = value
            if key not in supplied:
                supplied.append(key)

        tag_entries: List[str] = []
        for key, value in parse_param_flags(user_params):
            if key == TAGS_PARAMETER:
                tag_entries.append(value)
                continue
            values[key] = value
            if key not in supplied:
                supplied.append(key)

        # Repeated Tags entries form one tag set.
        tags = parse_tags(",".join(tag_entries))

        derive_name = "Name" not in supplied
        if derive_name:
            supplied.append("Name")
        if "Region" not in supplied:
            self.logger.info(f"Region not provided, using default region {self.default_region}")
            values["Region"] = self.default_region
            supplied.append("Region")

        declared = set(template.parameter_names)
        unknown = [key for key in supplied if key not in declared]
        if unknown:
            raise ValidationError(f"Parameters: [{', '.join(unknown)}] do not exist in the template")

        for declaration in template.parameters:
            if declaration.name in values and not (derive_name and declaration.name == "Name"):
                validate_value(declaration, values[declaration.name])

        # Everything local is checked before the account ID is looked up.
        if derive_name:
            account_id = self._lookup_account_id()
            if not account_id:
                raise ValidationError("Name not provided and the account ID is unknown")
            name = default_stack_name(account_id, self.name_prefix)
            self.logger.info(f"Name not provided, using default name {name}")
            values["Name"] = name
            validate_value(template.get_parameter("Name"), name)

        missing = [d.name for d in template.parameters if d.name not in values]
        if missing:
            raise ValidationError(f"Parameters: [{', '.join(missing)}] are required but not provided")

        resolved = ResolvedParameterSet(
            template=template,
            values={key: values[key] for key in sorted(values)},
            tags=tags,
        )
        self.logger.debug(f"Resolved parameters for template {template.name}: {resolved.values}")
        return resolved
