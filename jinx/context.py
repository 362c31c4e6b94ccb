"""
Execution Context

The mutable key/value state threaded through one jinx run.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional

from .errors import ContextTypeError

OUTPUT_KEY = "output"

_MISSING = object()


class ExecutionContext(dict):
    """
    Jinx execution context.

    A plain ``dict`` that always carries the reserved ``output`` key, with
    typed accessors for steps that want to fail loudly on bad data.
    """

    # Restricted scripts may write into the context (see RestrictedPython's
    # full_write_guard).
    _guarded_writes = True

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.setdefault(OUTPUT_KEY, None)

    @classmethod
    def build(
        cls,
        defaults: Optional[Mapping[str, Any]] = None,
        input_values: Optional[Mapping[str, Any]] = None,
        extra_context: Optional[Mapping[str, Any]] = None,
    ) -> "ExecutionContext":
        """
        Build a fresh context for one invocation.

        Layers are applied left to right, so input values override defaults
        and extra context overrides both. ``output`` is always reset to None.

        Args:
            defaults: Default input values from the definition
            input_values: Caller-supplied input values
            extra_context: Application-supplied values (callbacks, handlers)

        Returns:
            New ExecutionContext
        """
        context = cls()
        for layer in (defaults, input_values, extra_context):
            if layer:
                context.update(layer)
        context[OUTPUT_KEY] = None
        return context

    @property
    def output(self) -> Any:
        return self.get(OUTPUT_KEY)

    @output.setter
    def output(self, value: Any):
        self[OUTPUT_KEY] = value

    def snapshot(self) -> Dict[str, Any]:
        """Shallow copy as a plain dict."""
        return dict(self)

    def get_str(self, key: str, default: Any = _MISSING) -> str:
        return self._get_typed(key, (str,), "str", default)

    def get_int(self, key: str, default: Any = _MISSING) -> int:
        value = self._get_typed(key, (int,), "int", default)
        if isinstance(value, bool):
            raise ContextTypeError(f"Context key '{key}' is a bool, expected int")
        return value

    def get_float(self, key: str, default: Any = _MISSING) -> float:
        value = self._get_typed(key, (int, float), "float", default)
        if isinstance(value, bool):
            raise ContextTypeError(f"Context key '{key}' is a bool, expected float")
        return float(value)

    def get_bool(self, key: str, default: Any = _MISSING) -> bool:
        return self._get_typed(key, (bool,), "bool", default)

    def get_list(self, key: str, default: Any = _MISSING) -> List[Any]:
        return self._get_typed(key, (list, tuple), "list", default)

    def get_dict(self, key: str, default: Any = _MISSING) -> Dict[str, Any]:
        return self._get_typed(key, (dict,), "dict", default)

    def get_callable(self, key: str, default: Any = _MISSING) -> Callable:
        if key not in self:
            if default is _MISSING:
                raise KeyError(key)
            return default
        value = self[key]
        if not callable(value):
            raise ContextTypeError(
                f"Context key '{key}' is {type(value).__name__}, expected callable"
            )
        return value

    def _get_typed(self, key: str, types: tuple, label: str, default: Any) -> Any:
        if key not in self:
            if default is _MISSING:
                raise KeyError(key)
            return default
        value = self[key]
        if not isinstance(value, types):
            raise ContextTypeError(
                f"Context key '{key}' is {type(value).__name__}, expected {label}"
            )
        return value

    def __repr__(self) -> str:
        return f"ExecutionContext({dict.__repr__(self)})"
