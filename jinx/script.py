"""Restricted script engine for ``python`` steps.

Step code runs through RestrictedPython as the body of a function, with the
execution context bound as ``context``. The body may mutate the context
freely, return early with ``return``, and call asynchronous callbacks via
``run_async(...)``.
"""

import ast
import asyncio
import functools
import inspect
import logging
import operator
import textwrap
from typing import Any, Callable, Dict, Mapping, Optional

from RestrictedPython import compile_restricted_exec, safe_builtins
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    guarded_unpack_sequence,
    safer_getattr,
)
from RestrictedPython.PrintCollector import PrintCollector

from .errors import ScriptCompilationError

logger = logging.getLogger(__name__)

STEP_FUNCTION = "run_step"
SCRIPT_FILENAME = "<jinx script>"

# Modules scripts may import
ALLOWED_MODULES = frozenset(
    {
        "math",
        "json",
        "re",
        "random",
        "string",
        "datetime",
        "itertools",
        "functools",
        "collections",
    }
)

_INPLACE_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "+=": operator.iadd,
    "-=": operator.isub,
    "*=": operator.imul,
    "/=": operator.itruediv,
    "//=": operator.ifloordiv,
    "%=": operator.imod,
    "**=": operator.ipow,
    "<<=": operator.ilshift,
    ">>=": operator.irshift,
    "&=": operator.iand,
    "|=": operator.ior,
    "^=": operator.ixor,
    "@=": operator.imatmul,
}


class LoggingPrintCollector(PrintCollector):
    """Print collector that also sends each printed line to the debug log."""

    def _call_print(self, *objects, **kwargs):
        super()._call_print(*objects, **kwargs)
        logger.debug("script print: %s", " ".join(str(o) for o in objects))


def _inplacevar(op: str, x: Any, y: Any) -> Any:
    try:
        return _INPLACE_OPERATORS[op](x, y)
    except KeyError:
        raise SyntaxError(f"Unsupported in-place operator: {op}") from None


def _apply(func: Callable, *args, **kwargs) -> Any:
    return func(*args, **kwargs)


def _safe_import(name, globals=None, locals=None, fromlist=(), level=0):
    if level != 0 or name.split(".")[0] not in ALLOWED_MODULES:
        raise ImportError(f"Import of '{name}' is not allowed in jinx scripts")
    return __import__(name, globals, locals, fromlist, level)


async def _await(awaitable):
    return await awaitable


@functools.lru_cache(maxsize=256)
def _compile_body(source: str):
    source = textwrap.dedent(source)
    try:
        body = ast.parse(source, filename=SCRIPT_FILENAME)
    except (SyntaxError, ValueError):
        # Let RestrictedPython report the error in its usual form
        return compile_restricted_exec(source, filename=SCRIPT_FILENAME)

    # Statements are moved into the function as parsed, so string literals
    # spanning several lines keep their exact content.
    module = ast.parse(f"def {STEP_FUNCTION}():\n    pass\n")
    if body.body:
        module.body[0].body = body.body
    ast.fix_missing_locations(module)
    return compile_restricted_exec(module, filename=SCRIPT_FILENAME)


class ScriptEngine:
    """Runs script steps in a RestrictedPython sandbox.

    Failures are not handled here: compile errors raise
    ``ScriptCompilationError`` and runtime errors propagate unchanged.
    """

    def __init__(self, run_in_thread: bool = True):
        """
        Args:
            run_in_thread: Run step bodies in a worker thread so they can block
                on async callbacks with ``run_async`` while the event loop
                keeps running.
        """
        self.run_in_thread = run_in_thread
        self._logger = logger.getChild(self.__class__.__name__)

    def _create_safe_builtins(self) -> Dict[str, Any]:
        builtins = safe_builtins.copy()
        builtins.update({
            # Collection functions
            "dict": dict,
            "list": list,
            "set": set,
            "frozenset": frozenset,
            "enumerate": enumerate,
            "reversed": reversed,
            "map": map,
            "filter": filter,
            # Aggregates
            "max": max,
            "min": min,
            "sum": sum,
            "any": any,
            "all": all,
            "__import__": _safe_import,
        })
        return builtins

    def _create_restricted_globals(
        self, context: Mapping[str, Any], loop: asyncio.AbstractEventLoop
    ) -> Dict[str, Any]:
        def run_async(value: Any) -> Any:
            """Wait for an awaitable from inside a script and return its result."""
            if not inspect.isawaitable(value):
                return value
            if not self.run_in_thread:
                raise RuntimeError(
                    "run_async needs scripts to run in a worker thread "
                    "(script_run_in_thread)"
                )
            return asyncio.run_coroutine_threadsafe(_await(value), loop).result()

        return {
            "__builtins__": self._create_safe_builtins(),
            "__name__": "jinx_script",
            "__metaclass__": type,
            "_getattr_": safer_getattr,
            "_getitem_": default_guarded_getitem,
            "_getiter_": default_guarded_getiter,
            "_write_": full_write_guard,
            "_inplacevar_": _inplacevar,
            "_apply_": _apply,
            "_iter_unpack_sequence_": guarded_iter_unpack_sequence,
            "_unpack_sequence_": guarded_unpack_sequence,
            "_print_": LoggingPrintCollector,
            "context": context,
            "run_async": run_async,
        }

    def compile(self, source: str, step_name: str = ""):
        """
        Compile step source in restricted mode.

        Args:
            source: Step body
            step_name: Step name, for error messages

        Returns:
            Code object that defines the step function

        Raises:
            ScriptCompilationError: If the source is rejected
        """
        result = _compile_body(source or "")
        if result.errors:
            self._logger.error(
                f"Compilation errors in script step '{step_name}': {result.errors}"
            )
            raise ScriptCompilationError(
                f"Invalid script in step '{step_name}': {'; '.join(result.errors)}",
                errors=result.errors,
            )
        return result.code

    async def execute(
        self, source: str, context: Mapping[str, Any], step_name: str = ""
    ) -> None:
        """
        Run a script step against the context.

        If the body returns an awaitable it is awaited on the calling loop.

        Args:
            source: Step body
            context: Execution context, bound as ``context``
            step_name: Step name, for log messages

        Raises:
            ScriptCompilationError: If the source is rejected
            Exception: Anything the script raises
        """
        code = self.compile(source, step_name)
        loop = asyncio.get_running_loop()
        script_globals = self._create_restricted_globals(context, loop)

        exec(code, script_globals)
        body = script_globals[STEP_FUNCTION]

        if self.run_in_thread:
            result = await asyncio.to_thread(body)
        else:
            result = body()

        if inspect.isawaitable(result):
            await result

        self._logger.debug(f"Script step '{step_name}' finished")
