"""
Tool Descriptors

Describe a jinx as a function-style tool for agent layers that invoke
jinxes by name.
"""

from typing import Any, Dict, List

from .definition import JinxDefinition


def _parameter_description(name: str, default: Any = "") -> str:
    if default is None or default == "":
        return f"Parameter: {name}"
    return f"Parameter: {name} (default: {default})"


def to_tool_descriptor(definition: JinxDefinition) -> Dict[str, Any]:
    """
    Build the tool descriptor for a jinx.

    Every input becomes a string parameter. Bare names are required;
    name/default mappings are optional and mention their default.

    Args:
        definition: Jinx definition

    Returns:
        Dictionary with ``name``, ``description`` and ``parameters``
    """
    properties: Dict[str, Dict[str, Any]] = {}
    required: List[str] = []

    for inp in definition.inputs:
        if isinstance(inp, str):
            properties[inp] = {
                "type": "string",
                "description": _parameter_description(inp),
            }
            if inp not in required:
                required.append(inp)
        elif isinstance(inp, dict) and inp:
            # Only the first key of a mapping declares the parameter
            input_name, default_value = next(iter(inp.items()))
            properties[input_name] = {
                "type": "string",
                "description": _parameter_description(input_name, default_value),
            }

    return {
        "name": definition.jinx_name,
        "description": definition.description or f"Jinx: {definition.jinx_name}",
        "parameters": {
            "type": "object",
            "properties": properties,
            "required": required,
        },
    }


def to_function_tool(definition: JinxDefinition) -> Dict[str, Any]:
    """Wrap the descriptor in the ``{"type": "function", ...}`` envelope used by LLM APIs."""
    return {"type": "function", "function": to_tool_descriptor(definition)}
