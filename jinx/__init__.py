"""
Jinx Engine

Load declarative jinx workflows from YAML and run their steps against a
shared execution context.

This package provides:
- Jinx definition loading, validation and YAML serialization
- A step engine dispatching to render (Jinja2) and script (RestrictedPython) executors
- A shared, lazily-initialized render toolchain
- Tool descriptors for invoking jinxes from an agent layer
"""

from .batch import load_jinxes
from .context import ExecutionContext
from .definition import (
    JinxDefinition,
    StepDefinition,
    default_inputs,
    load_jinx,
    required_inputs,
    to_yaml,
)
from .engine import JinxEngine, RenderResult, format_step_error
from .errors import (
    ContextTypeError,
    JinxError,
    ScriptCompilationError,
    StepExecutionError,
    ToolchainInitializationError,
    ValidationError,
)
from .script import ScriptEngine
from .tool_descriptor import to_function_tool, to_tool_descriptor
from .toolchain import CompilerToolchain, get_default_toolchain

__all__ = [
    "load_jinxes",
    "ExecutionContext",
    "JinxDefinition",
    "StepDefinition",
    "default_inputs",
    "load_jinx",
    "required_inputs",
    "to_yaml",
    "JinxEngine",
    "RenderResult",
    "format_step_error",
    "ContextTypeError",
    "JinxError",
    "ScriptCompilationError",
    "StepExecutionError",
    "ToolchainInitializationError",
    "ValidationError",
    "ScriptEngine",
    "to_function_tool",
    "to_tool_descriptor",
    "CompilerToolchain",
    "get_default_toolchain",
]
