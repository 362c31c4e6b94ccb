"""Render step executor backed by the compiler toolchain."""

import logging

from ..context import ExecutionContext
from ..definition import StepDefinition
from ..toolchain import CompilerToolchain
from .base import StepExecutor


class RenderStepExecutor(StepExecutor):
    """
    Compiles a template step into a component factory.

    The factory is stored under the step name and as the context output.
    A step that produces no factory leaves the context unchanged.
    """

    def __init__(self, toolchain: CompilerToolchain):
        self.toolchain = toolchain
        self.logger = logging.getLogger(__name__)

    async def execute(self, step: StepDefinition, context: ExecutionContext) -> None:
        component = await self.toolchain.compile_and_invoke(
            step.code, context, step_name=step.name
        )
        if component is None:
            self.logger.warning(f"Render step '{step.name}' produced no component")
            return

        context[step.name] = component
        context.output = component

    def __repr__(self) -> str:
        return f"RenderStepExecutor(toolchain={self.toolchain!r})"
