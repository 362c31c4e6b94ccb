"""
Jinx Definition

Parse, validate, and represent jinx definitions from YAML.

A jinx is a named, ordered list of steps. Each step names the engine that
interprets its ``code``:

```yaml
jinx_name: tile.db_tool
description: Opens Database Tool pane
inputs:
  - query
  - label: "DB Tool"
steps:
  - name: render
    engine: jinja
    code: |
      {% macro component(props) %}
        <button>{{ props.label }}</button>
      {% endmacro %}
```
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ValidationError

logger = logging.getLogger(__name__)

# A bare identifier (required) or a mapping of name -> default (optional)
InputDeclaration = Union[str, Dict[str, Any]]


@dataclass
class StepDefinition:
    """Jinx step definition."""

    name: str
    engine: str
    code: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepDefinition":
        """
        Create from dictionary.

        Args:
            data: Step definition dictionary

        Returns:
            StepDefinition instance

        Raises:
            ValidationError: If the step is not a mapping
        """
        if not isinstance(data, dict):
            raise ValidationError(
                f"Step must be a mapping, got {type(data).__name__}"
            )

        return cls(
            name=_as_text(data.get("name")),
            engine=_as_text(data.get("engine")),
            code=_as_text(data.get("code")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"name": self.name, "engine": self.engine, "code": self.code}


@dataclass
class JinxDefinition:
    """
    Jinx definition.

    Represents a complete jinx parsed from YAML. An instance with an empty
    name can never be constructed.
    """

    jinx_name: str
    description: str = ""
    inputs: List[InputDeclaration] = field(default_factory=list)
    steps: List[StepDefinition] = field(default_factory=list)
    source_path: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.jinx_name, str) or not self.jinx_name.strip():
            raise ValidationError("Missing 'jinx_name' in jinx definition")

    @property
    def name(self) -> str:
        """Alias for ``jinx_name``."""
        return self.jinx_name

    @classmethod
    def from_yaml(cls, yaml_str: str, source_path: Optional[str] = None) -> "JinxDefinition":
        """
        Parse jinx from YAML string.

        Args:
            yaml_str: YAML jinx definition
            source_path: Optional origin of the text, for diagnostics only

        Returns:
            JinxDefinition instance

        Raises:
            ValidationError: If YAML is invalid or the definition is malformed
        """
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML: {e}") from e

        return cls.from_dict(data, source_path=source_path)

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], source_path: Optional[str] = None
    ) -> "JinxDefinition":
        """
        Create from an already-parsed dictionary.

        Args:
            data: Jinx definition dictionary
            source_path: Optional origin, overrides a ``_source_path`` key

        Returns:
            JinxDefinition instance

        Raises:
            ValidationError: If the definition is malformed
        """
        if not isinstance(data, dict):
            raise ValidationError(
                f"Jinx definition must be a mapping, got {type(data).__name__}"
            )

        name = data.get("jinx_name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Missing 'jinx_name' in jinx definition")

        raw_inputs = data.get("inputs") or []
        raw_steps = data.get("steps") or []
        if not isinstance(raw_inputs, list):
            raise ValidationError(f"Jinx '{name}': 'inputs' must be a list")
        if not isinstance(raw_steps, list):
            raise ValidationError(f"Jinx '{name}': 'steps' must be a list")

        inputs = [_normalize_input(name, inp) for inp in raw_inputs]
        steps = [StepDefinition.from_dict(s) for s in raw_steps]

        seen = set()
        for step in steps:
            if step.name in seen:
                logger.warning(
                    f"Jinx '{name}' has more than one step named '{step.name}'"
                )
            seen.add(step.name)

        return cls(
            jinx_name=name,
            description=_as_text(data.get("description")),
            inputs=inputs,
            steps=steps,
            source_path=source_path or data.get("_source_path"),
        )

    def get_default_inputs(self) -> Dict[str, Any]:
        """Get default input values from the inputs definition."""
        return default_inputs(self)

    def get_required_inputs(self) -> List[str]:
        """Get the names of inputs declared without a default."""
        return required_inputs(self)

    def get_step(self, name: str) -> Optional[StepDefinition]:
        """
        Get the first step with the given name.

        Args:
            name: Step name

        Returns:
            StepDefinition or None if not found
        """
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary.

        The source path is not part of the definition and is omitted.
        """
        return {
            "jinx_name": self.jinx_name,
            "description": self.description,
            "inputs": [
                dict(inp) if isinstance(inp, dict) else inp for inp in self.inputs
            ],
            "steps": [step.to_dict() for step in self.steps],
        }

    def to_yaml(self) -> str:
        """Serialize back to YAML."""
        return to_yaml(self)

    def to_tool_descriptor(self) -> Dict[str, Any]:
        """Describe this jinx as a callable tool."""
        from .tool_descriptor import to_tool_descriptor

        return to_tool_descriptor(self)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"JinxDefinition(jinx_name='{self.jinx_name}', "
            f"inputs={len(self.inputs)}, steps={len(self.steps)})"
        )


def load_jinx(
    raw: Union[str, Dict[str, Any], JinxDefinition],
    source_path: Optional[str] = None,
) -> JinxDefinition:
    """
    Load a jinx from YAML text or an already-parsed mapping.

    Args:
        raw: YAML text, a parsed mapping, or an existing definition
        source_path: Optional origin of the definition, for diagnostics

    Returns:
        Validated JinxDefinition

    Raises:
        ValidationError: If the name is missing or the structure is malformed
    """
    if isinstance(raw, JinxDefinition):
        return JinxDefinition.from_dict(
            raw.to_dict(), source_path=source_path or raw.source_path
        )
    if isinstance(raw, str):
        return JinxDefinition.from_yaml(raw, source_path=source_path)
    return JinxDefinition.from_dict(raw, source_path=source_path)


def default_inputs(definition: JinxDefinition) -> Dict[str, Any]:
    """
    Flatten mapping declarations into a single dict of defaults.

    Bare identifiers carry no default and are skipped. Later declarations
    of the same key win. The result is a new dict on every call.
    """
    defaults: Dict[str, Any] = {}
    for inp in definition.inputs:
        if isinstance(inp, dict):
            for key, value in inp.items():
                defaults[key] = value
    return defaults


def required_inputs(definition: JinxDefinition) -> List[str]:
    """Names of bare-identifier inputs, in declaration order."""
    required: List[str] = []
    for inp in definition.inputs:
        if isinstance(inp, str) and inp not in required:
            required.append(inp)
    return required


def to_yaml(definition: JinxDefinition) -> str:
    """Serialize a definition to YAML with a stable key order."""
    return yaml.safe_dump(
        definition.to_dict(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def _normalize_input(jinx_name: str, inp: Any) -> InputDeclaration:
    if isinstance(inp, str):
        if not inp.strip():
            raise ValidationError(f"Jinx '{jinx_name}': input name cannot be empty")
        return inp
    if isinstance(inp, dict):
        if not inp:
            raise ValidationError(
                f"Jinx '{jinx_name}': input mapping must declare a name"
            )
        return {str(key): value for key, value in inp.items()}
    raise ValidationError(
        f"Jinx '{jinx_name}': input must be a name or a name/default mapping, "
        f"got {type(inp).__name__}"
    )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
