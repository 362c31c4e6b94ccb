"""Base step executor and the engine-name registry."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..context import ExecutionContext
from ..definition import StepDefinition


class StepExecutor(ABC):
    """
    Base class for step executors.

    An executor interprets the ``code`` of every step whose ``engine``
    matches the name it is registered under.
    """

    @abstractmethod
    async def execute(self, step: StepDefinition, context: ExecutionContext) -> None:
        """
        Execute the step, mutating the context in place.

        Args:
            step: Step definition
            context: Execution context shared with every other step of the run

        Raises:
            Exception: Any failure; the engine isolates it to this step
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class NoOpStepExecutor(StepExecutor):
    """Executor for unregistered engines. Logs a warning and does nothing."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    async def execute(self, step: StepDefinition, context: ExecutionContext) -> None:
        self.logger.warning(f"Unknown engine '{step.engine}' in step '{step.name}'")


class ExecutorRegistry:
    """Registry mapping engine names to step executors."""

    def __init__(self, fallback: Optional[StepExecutor] = None):
        """
        Initialize executor registry.

        Args:
            fallback: Executor returned for unregistered engine names
        """
        self._executors: Dict[str, StepExecutor] = {}
        self.fallback = fallback or NoOpStepExecutor()

    def register(self, engine: str, executor: StepExecutor):
        """
        Register an executor, replacing any previous one for the engine.

        Args:
            engine: Engine name used in step definitions
            executor: Executor instance
        """
        if not engine:
            raise ValueError("Engine name cannot be empty")
        self._executors[engine] = executor

    def unregister(self, engine: str) -> Optional[StepExecutor]:
        """Remove and return the executor for an engine, if registered."""
        return self._executors.pop(engine, None)

    def get(self, engine: str) -> StepExecutor:
        """
        Get the executor for an engine.

        Returns:
            The registered executor, or the fallback for unknown engines
        """
        return self._executors.get(engine, self.fallback)

    def is_registered(self, engine: str) -> bool:
        return engine in self._executors

    def list_engines(self) -> List[str]:
        """
        List all registered engine names.

        Returns:
            List of engine names
        """
        return list(self._executors.keys())
