"""
Jinx Engine

Execute jinx steps in order against a shared execution context.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from config.types import EngineSettings
from .context import ExecutionContext
from .definition import JinxDefinition, StepDefinition, default_inputs
from .errors import StepExecutionError
from .executors import (
    ExecutorRegistry,
    RenderStepExecutor,
    ScriptStepExecutor,
)
from .script import ScriptEngine
from .toolchain import ComponentFactory, CompilerToolchain, get_default_toolchain


@dataclass
class RenderResult:
    """Component factory produced by a render step, with the props to render it."""

    component: ComponentFactory
    props: ExecutionContext

    def render(self) -> Any:
        """Call the component with its props."""
        return self.component(self.props)


def format_step_error(step_name: str, error: BaseException) -> str:
    """Message written to ``context.output`` when a step fails."""
    return str(StepExecutionError(step_name, error))


class JinxEngine:
    """
    Jinx execution engine.

    Steps run strictly one after another in declaration order. Each step is
    routed to the executor registered for its engine name; unknown engines
    are skipped. A failing step never aborts the run: its error is logged
    and written to ``context.output`` and the next step runs.
    """

    def __init__(
        self,
        toolchain: Optional[CompilerToolchain] = None,
        script_engine: Optional[ScriptEngine] = None,
        registry: Optional[ExecutorRegistry] = None,
        settings: Optional[EngineSettings] = None,
    ):
        """
        Initialize jinx engine.

        Args:
            toolchain: Render toolchain; defaults to the process-wide one
            script_engine: Script engine; defaults to one built from settings
            registry: Executor registry; defaults to render + script executors
            settings: Engine settings; defaults to the configured ones
        """
        self.logger = logging.getLogger(__name__)

        if settings is None:
            from config.manager import SettingsManager

            settings = SettingsManager().get_engine_settings()
        self.settings = settings

        self.toolchain = toolchain or get_default_toolchain()
        self.script_engine = script_engine or ScriptEngine(
            run_in_thread=settings.script_run_in_thread
        )

        if registry is None:
            registry = ExecutorRegistry()
            registry.register(settings.render_engine, RenderStepExecutor(self.toolchain))
            registry.register(settings.script_engine, ScriptStepExecutor(self.script_engine))
        self.registry = registry

    @property
    def render_engine(self) -> str:
        return self.settings.render_engine

    @property
    def script_engine_name(self) -> str:
        return self.settings.script_engine

    def build_context(
        self,
        definition: JinxDefinition,
        input_values: Optional[Dict[str, Any]] = None,
        extra_context: Optional[Dict[str, Any]] = None,
    ) -> ExecutionContext:
        """Fresh context: defaults, then inputs, then extra context, then output=None."""
        return ExecutionContext.build(
            default_inputs(definition), input_values, extra_context
        )

    async def execute(
        self,
        definition: JinxDefinition,
        input_values: Optional[Dict[str, Any]] = None,
        extra_context: Optional[Dict[str, Any]] = None,
    ) -> ExecutionContext:
        """
        Execute all steps of a jinx.

        Args:
            definition: Jinx definition
            input_values: Input values, overriding declared defaults
            extra_context: Extra values such as callbacks, overriding inputs

        Returns:
            The final execution context
        """
        context = self.build_context(definition, input_values, extra_context)

        self.logger.info(
            f"Starting jinx '{definition.jinx_name}' ({len(definition.steps)} steps)"
        )

        for step in definition.steps:
            await self._execute_step(step, context)

        self.logger.info(f"Jinx '{definition.jinx_name}' finished")
        return context

    async def _execute_step(self, step: StepDefinition, context: ExecutionContext):
        executor = self.registry.get(step.engine)
        self.logger.debug(f"Executing step '{step.name}' with engine '{step.engine}'")

        try:
            await executor.execute(step, context)
        except Exception as e:
            self.logger.error(f"Error executing step '{step.name}': {e}", exc_info=True)
            context.output = format_step_error(step.name, e)

    async def execute_for_component(
        self,
        definition: JinxDefinition,
        input_values: Optional[Dict[str, Any]] = None,
        extra_context: Optional[Dict[str, Any]] = None,
    ) -> Optional[RenderResult]:
        """
        Compile the first render step of a jinx into a component.

        Only that step runs; script steps before or after it are not executed.

        Args:
            definition: Jinx definition
            input_values: Input values, overriding declared defaults
            extra_context: Extra values such as callbacks, overriding inputs

        Returns:
            RenderResult, or None if there is no render step or it failed
        """
        context = self.build_context(definition, input_values, extra_context)

        render_step = next(
            (s for s in definition.steps if s.engine == self.render_engine), None
        )
        if render_step is None:
            self.logger.debug(f"Jinx '{definition.jinx_name}' has no render step")
            return None

        try:
            component = await self.toolchain.compile_and_invoke(
                render_step.code, context, step_name=render_step.name
            )
        except Exception as e:
            self.logger.error(
                f"Cannot render jinx '{definition.jinx_name}': {e}", exc_info=True
            )
            return None

        if component is None:
            return None
        return RenderResult(component=component, props=context)
