"""
Step Executors

Engine implementations the jinx engine dispatches steps to.
"""

from .base import StepExecutor, NoOpStepExecutor, ExecutorRegistry
from .render import RenderStepExecutor
from .script import ScriptStepExecutor

__all__ = [
    "StepExecutor",
    "NoOpStepExecutor",
    "ExecutorRegistry",
    "RenderStepExecutor",
    "ScriptStepExecutor",
]
