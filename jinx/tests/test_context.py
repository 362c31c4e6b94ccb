"""Tests for ExecutionContext."""

import pytest

from jinx.context import ExecutionContext
from jinx.errors import ContextTypeError


class TestBuild:
    """Layering of defaults, inputs and extra context."""

    def test_extra_context_wins(self):
        context = ExecutionContext.build({"x": 1}, {"x": 2}, {"x": 3})
        assert context["x"] == 3

    def test_inputs_win_without_extra(self):
        context = ExecutionContext.build({"x": 1}, {"x": 2}, {"y": 3})
        assert context["x"] == 2
        assert context["y"] == 3

    def test_defaults_used_when_not_overridden(self):
        context = ExecutionContext.build({"x": 1}, {}, None)
        assert context["x"] == 1

    def test_output_is_always_reset(self):
        context = ExecutionContext.build({"output": "a"}, {"output": "b"}, {"output": "c"})
        assert context.output is None
        assert "output" in context

    def test_layers_are_not_mutated(self):
        defaults = {"x": 1}
        context = ExecutionContext.build(defaults, {"x": 2})
        context["x"] = 99

        assert defaults == {"x": 1}

    def test_plain_construction_has_output(self):
        assert ExecutionContext() == {"output": None}


class TestAccessors:
    """Typed accessors."""

    @pytest.fixture
    def context(self):
        return ExecutionContext(
            name="Ada",
            count=3,
            ratio=0.5,
            enabled=True,
            items=[1, 2],
            options={"a": 1},
            callback=lambda: "called",
        )

    def test_output_property(self, context):
        context.output = "done"
        assert context["output"] == "done"
        assert context.output == "done"

    def test_typed_getters(self, context):
        assert context.get_str("name") == "Ada"
        assert context.get_int("count") == 3
        assert context.get_float("ratio") == 0.5
        assert context.get_float("count") == 3.0
        assert context.get_bool("enabled") is True
        assert context.get_list("items") == [1, 2]
        assert context.get_dict("options") == {"a": 1}
        assert context.get_callable("callback")() == "called"

    def test_type_mismatch_raises(self, context):
        with pytest.raises(ContextTypeError, match="'name' is str, expected int"):
            context.get_int("name")
        with pytest.raises(ContextTypeError):
            context.get_callable("name")

    def test_bool_is_not_an_int(self, context):
        with pytest.raises(ContextTypeError):
            context.get_int("enabled")

    def test_context_type_error_is_type_error(self, context):
        with pytest.raises(TypeError):
            context.get_dict("items")

    def test_missing_key(self, context):
        with pytest.raises(KeyError):
            context.get_str("missing")
        assert context.get_str("missing", "fallback") == "fallback"
        assert context.get_callable("missing", None) is None

    def test_snapshot_is_plain_copy(self, context):
        snap = context.snapshot()
        snap["name"] = "Grace"

        assert type(snap) is dict
        assert context["name"] == "Ada"
