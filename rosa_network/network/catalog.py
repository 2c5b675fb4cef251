"""
Template catalog for network resource stacks.

Templates live on disk as ``<root>/<template-name>/cloudformation.yaml``.
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from cfn_tools import load_yaml

from rosa_network.errors import NotFoundError, TemplateReadError, ValidationError
from rosa_network.network.models import ParameterDeclaration, Template

logger = logging.getLogger(__name__)

TEMPLATE_FILENAME = "cloudformation.yaml"
DEFAULT_TEMPLATE = "rosa-quickstart-default-vpc"
BUNDLED_TEMPLATE_DIR = Path(__file__).parent / "templates"


def _to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    return str(value)


def _to_number(name: str, key: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Parameter '{name}' has a non-numeric {key}: {value}")


def _to_int(name: str, key: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Parameter '{name}' has a non-integer {key}: {value}")


def parse_parameters(document: Dict[str, Any]) -> List[ParameterDeclaration]:
    """Build parameter declarations from a template document.

    Args:
        document: Parsed CloudFormation document.

    Returns:
        Declarations in document order.
    """
    section = document.get("Parameters") or {}
    if not isinstance(section, dict):
        raise ValidationError("template Parameters section must be a mapping")

    declarations = []
    for name, props in section.items():
        props = props or {}
        if not isinstance(props, dict):
            raise ValidationError(f"Parameter '{name}' declaration must be a mapping")
        declarations.append(
            ParameterDeclaration(
                name=str(name),
                type=str(props.get("Type", "String")),
                default=_to_str(props.get("Default")),
                description=props.get("Description"),
                min_value=_to_number(name, "MinValue", props.get("MinValue")),
                max_value=_to_number(name, "MaxValue", props.get("MaxValue")),
                min_length=_to_int(name, "MinLength", props.get("MinLength")),
                max_length=_to_int(name, "MaxLength", props.get("MaxLength")),
                allowed_values=tuple(_to_str(v) for v in props.get("AllowedValues") or ()),
                allowed_pattern=props.get("AllowedPattern"),
            )
        )
    return declarations


class TemplateCatalog:
    """Resolves template names to templates stored under a catalog root."""

    def __init__(self, root: Union[str, Path, None] = None):
        """Initialize the catalog.

        Args:
            root: Catalog root directory. Defaults to the bundled templates.
        """
        self.root = Path(root) if root is not None else BUNDLED_TEMPLATE_DIR
        self.logger = logging.getLogger(f"{__name__}.TemplateCatalog")

    def template_path(self, name: str) -> Path:
        return self.root / name / TEMPLATE_FILENAME

    def names(self) -> List[str]:
        """List template names available under the catalog root."""
        if not self.root.is_dir():
            return []
        return sorted(entry.name for entry in self.root.iterdir() if (entry / TEMPLATE_FILENAME).is_file())

    def resolve(self, name: str) -> Template:
        """Load a template by name.

        Args:
            name: Template name.

        Returns:
            The loaded template.

        Raises:
            NotFoundError: If no template directory matches the name.
            TemplateReadError: If the template body cannot be read.
            ValidationError: If the template body is not a valid document.
        """
        path = self.template_path(name)
        if not path.parent.is_dir():
            raise NotFoundError(
                f"failed to read template file: open {path}: no such file or directory", path=str(path)
            )

        try:
            with open(path, "r") as f:
                body = f.read()
        except OSError as e:
            reason = os.strerror(e.errno).lower() if e.errno else str(e)
            raise TemplateReadError(f"failed to read template file: open {path}: {reason}", path=str(path)) from e

        try:
            # Short-form intrinsic tags (!Ref, !Sub, ...) load as their long-form mappings.
            document = load_yaml(body)
        except yaml.YAMLError as e:
            raise ValidationError(f"failed to parse template file {path}: {e}") from e
        if not isinstance(document, dict):
            raise ValidationError(f"template file {path} does not contain a mapping")

        template = Template(
            name=name,
            path=path,
            body=body,
            document=document,
            parameters=tuple(parse_parameters(document)),
        )
        self.logger.debug(f"Loaded template {name} from {path} with parameters {template.parameter_names}")
        return template
