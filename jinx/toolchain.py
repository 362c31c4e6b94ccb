"""
Compiler Toolchain

Shared, lazily-initialized service that turns render-step source (a Jinja2
template) into a component factory: a callable that takes props and returns
rendered markup.

The toolchain loads once. Concurrent callers that arrive while the load is
in flight, from any thread or event loop, await the same future instead of
starting another load.
"""

import asyncio
import concurrent.futures
import functools
import inspect
import logging
import threading
from typing import Any, Callable, Mapping, Optional, Protocol

from jinja2 import ChainableUndefined, StrictUndefined, Template
from jinja2.sandbox import SandboxedEnvironment
from markupsafe import Markup, escape

from config.types import EngineSettings
from .errors import ToolchainInitializationError

logger = logging.getLogger(__name__)


class ComponentFactory(Protocol):
    """Anything that turns props into a renderable unit."""

    def __call__(self, props: Optional[Mapping[str, Any]] = None) -> Any: ...


class TemplateComponent:
    """
    Component factory for templates that do not export a component macro.

    Calling it renders the whole template with ``context`` and ``props``.
    """

    def __init__(self, template: Template, context: Mapping[str, Any]):
        self.template = template
        self.context = context

    def __call__(self, props: Optional[Mapping[str, Any]] = None) -> Markup:
        return Markup(self.template.render(context=self.context, props=dict(props or {})))

    def __repr__(self) -> str:
        return f"TemplateComponent(name={self.template.name!r})"


def element(tag: str, *children: Any, **attrs: Any) -> Markup:
    """Build an escaped HTML element. ``class_`` maps to ``class``."""
    rendered_attrs = attributes(
        {key.rstrip("_").replace("_", "-"): value for key, value in attrs.items()}
    )
    body = Markup("").join(escape(child) for child in children)
    return Markup(f"<{escape(tag)}{rendered_attrs}>{body}</{escape(tag)}>")


def attributes(mapping: Optional[Mapping[str, Any]]) -> Markup:
    """Render a mapping as HTML attributes. None and False values are dropped."""
    parts = []
    for key, value in (mapping or {}).items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(str(escape(key)))
        else:
            parts.append(f'{escape(key)}="{escape(value)}"')
    return Markup((" " + " ".join(parts)) if parts else "")


def build_environment(settings: EngineSettings) -> SandboxedEnvironment:
    """
    Build the sandboxed Jinja2 environment used for render steps.

    Templates only see the context they are instantiated with and the
    primitive builders registered here.
    """
    env = SandboxedEnvironment(
        autoescape=settings.render_autoescape,
        undefined=StrictUndefined if settings.render_strict_undefined else ChainableUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals.update({"element": element, "attrs": attributes})
    return env


def _copy_outcome(target: concurrent.futures.Future, task: asyncio.Future) -> None:
    """Publish a finished load task to the thread-safe future callers wait on."""
    if task.cancelled():
        target.set_exception(
            ToolchainInitializationError("Render toolchain initialization was cancelled")
        )
    elif task.exception() is not None:
        target.set_exception(task.exception())
    else:
        target.set_result(None)


class CompilerToolchain:
    """
    Render-step compiler.

    Owned by the hosting application and shared by reference with every
    engine that needs it. Immutable once initialized.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        loader: Optional[Callable[[EngineSettings], Any]] = None,
    ):
        """
        Initialize the toolchain without loading it.

        Args:
            settings: Engine settings; defaults to the configured ones
            loader: Optional callable (sync or async) returning the Jinja2
                environment. Defaults to ``build_environment``.
        """
        if settings is None:
            from config.manager import SettingsManager

            settings = SettingsManager().get_engine_settings()
        self.settings = settings
        self.logger = logging.getLogger(__name__)
        self._loader = loader or build_environment
        self._environment = None
        self._init_future: Optional[concurrent.futures.Future] = None
        self._init_task: Optional[asyncio.Future] = None
        self._lock = threading.Lock()
        self.load_count = 0

    @property
    def initialized(self) -> bool:
        return self._environment is not None

    @property
    def environment(self) -> SandboxedEnvironment:
        if self._environment is None:
            raise ToolchainInitializationError("Toolchain has not been initialized")
        return self._environment

    async def ensure_initialized(self) -> None:
        """
        Load the toolchain once.

        Callers on any thread or event loop share a single in-flight load.
        The load runs on the loop of the caller that started it.

        Raises:
            ToolchainInitializationError: If the loader fails. The failure is
                not cached; a later call retries.
        """
        if self._environment is not None:
            return

        with self._lock:
            future = self._init_future
            if future is None or (
                future.done() and (future.cancelled() or future.exception() is not None)
            ):
                future = concurrent.futures.Future()
                self._init_future = future
                self._init_task = asyncio.ensure_future(self._load())
                self._init_task.add_done_callback(
                    functools.partial(_copy_outcome, future)
                )

        await asyncio.shield(asyncio.wrap_future(future))

    async def _load(self) -> None:
        self.load_count += 1
        self.logger.info("Initializing render toolchain")
        try:
            environment = self._loader(self.settings)
            if inspect.isawaitable(environment):
                environment = await environment
        except Exception as e:
            self.logger.error(f"Render toolchain failed to initialize: {e}", exc_info=True)
            raise ToolchainInitializationError(
                f"Render toolchain failed to initialize: {e}", original_error=e
            ) from e
        self._environment = environment
        self.logger.info("Render toolchain ready")

    def compile(self, source: str) -> Template:
        """Compile template source. The toolchain must be initialized."""
        return self.environment.from_string(source)

    async def compile_and_invoke(
        self, source: str, context: Mapping[str, Any], step_name: str = ""
    ) -> Optional[ComponentFactory]:
        """
        Compile a render step and invoke it to obtain a component factory.

        The template runs with ``context`` as its only variable. If it exports
        a macro named by ``render_component_name`` that macro is the factory;
        otherwise the whole template becomes one.

        Args:
            source: Template source from the step
            context: Execution context exposed to the template
            step_name: Step name, for log messages

        Returns:
            Component factory, or None if compilation or invocation failed

        Raises:
            ToolchainInitializationError: If the toolchain cannot be loaded
        """
        await self.ensure_initialized()

        try:
            template = self.compile(source)
            module = template.make_module(vars={"context": context})
            factory = getattr(module, self.settings.render_component_name, None)
            if factory is None or not callable(factory):
                factory = TemplateComponent(template, context)
            return factory
        except Exception as e:
            self.logger.error(
                f"Render compile error in step '{step_name}': {e}", exc_info=True
            )
            return None


_default_toolchain: Optional[CompilerToolchain] = None
_default_lock = threading.Lock()


def get_default_toolchain() -> CompilerToolchain:
    """Process-wide toolchain used by engines that are not given one."""
    global _default_toolchain
    with _default_lock:
        if _default_toolchain is None:
            _default_toolchain = CompilerToolchain()
        return _default_toolchain


def reset_default_toolchain() -> None:
    """Drop the process-wide toolchain so the next caller builds a new one."""
    global _default_toolchain
    with _default_lock:
        _default_toolchain = None
