"""
Jinx Errors

Exception hierarchy shared by the loader, the engine and its executors.
"""

from typing import Optional


class JinxError(Exception):
    """Base class for all jinx errors."""


class ValidationError(JinxError, ValueError):
    """Raised when a jinx definition is structurally invalid."""


class StepExecutionError(JinxError):
    """
    A failure isolated to a single step.

    The string form is the message written to ``context.output`` when the
    step fails.
    """

    def __init__(self, step_name: str, original_error: Optional[BaseException] = None):
        self.step_name = step_name
        self.original_error = original_error
        super().__init__(f"Error in step '{step_name}': {original_error}")


class ScriptCompilationError(JinxError):
    """Raised when a script step cannot be compiled in restricted mode."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class ContextTypeError(JinxError, TypeError):
    """Raised by typed context accessors when a value has the wrong type."""


class ToolchainInitializationError(JinxError):
    """Raised when the render toolchain fails to load."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error
