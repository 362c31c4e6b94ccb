"""Script step executor."""

from ..context import ExecutionContext
from ..definition import StepDefinition
from ..script import ScriptEngine
from .base import StepExecutor


class ScriptStepExecutor(StepExecutor):
    """Runs a step through the script engine; the script mutates the context."""

    def __init__(self, script_engine: ScriptEngine):
        self.script_engine = script_engine

    async def execute(self, step: StepDefinition, context: ExecutionContext) -> None:
        await self.script_engine.execute(step.code, context, step_name=step.name)
