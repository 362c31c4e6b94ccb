"""Jinx Tool.

Exposes jinx definitions as callable tools so an agent layer can invoke
them by name with function-style arguments.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..definition import JinxDefinition
from ..engine import JinxEngine
from ..tool_descriptor import to_function_tool, to_tool_descriptor


def _is_step_error(output: Any) -> bool:
    return isinstance(output, str) and output.startswith("Error in step '")


class JinxTool:
    """Tool wrapper around a single jinx."""

    def __init__(self, definition: JinxDefinition, engine: Optional[JinxEngine] = None):
        """Initialize the tool.

        Args:
            definition: Jinx to expose
            engine: Engine used to run it; a default engine is built lazily
        """
        self.definition = definition
        self.logger = logging.getLogger(__name__)
        self._engine = engine

    @property
    def engine(self) -> JinxEngine:
        if self._engine is None:
            self._engine = JinxEngine()
        return self._engine

    @property
    def name(self) -> str:
        """Return the tool name."""
        return self.definition.jinx_name

    @property
    def description(self) -> str:
        """Return the tool description."""
        return to_tool_descriptor(self.definition)["description"]

    @property
    def input_schema(self) -> Dict[str, Any]:
        """Get the JSON schema for the tool input."""
        return to_tool_descriptor(self.definition)["parameters"]

    def missing_arguments(self, arguments: Dict[str, Any]) -> List[str]:
        return [
            name for name in self.input_schema["required"] if name not in arguments
        ]

    async def execute_tool(
        self,
        arguments: Dict[str, Any],
        extra_context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Run the jinx with the given arguments.

        Args:
            arguments: Input values keyed by input name
            extra_context: Extra values bound into the context (callbacks etc.)

        Returns:
            Dictionary with ``success``, ``output`` and the final ``context``
        """
        missing = self.missing_arguments(arguments)
        if missing:
            return {
                "success": False,
                "error": f"Missing required arguments: {', '.join(missing)}",
            }

        self.logger.info(f"Invoking jinx tool '{self.name}'")
        context = await self.engine.execute(self.definition, arguments, extra_context)
        output = context.output
        result = {
            "success": not _is_step_error(output),
            "output": output,
            "context": context.snapshot(),
        }
        if not result["success"]:
            result["error"] = output
        return result


class JinxToolbox:
    """Name-keyed collection of jinx tools sharing one engine."""

    def __init__(
        self,
        definitions: Iterable[JinxDefinition] = (),
        engine: Optional[JinxEngine] = None,
    ):
        self._engine = engine
        self._tools: Dict[str, JinxTool] = {}
        for definition in definitions:
            self.add(definition)

    def add(self, definition: JinxDefinition) -> JinxTool:
        """Add or replace the tool for a jinx."""
        tool = JinxTool(definition, engine=self._engine)
        self._tools[definition.jinx_name] = tool
        return tool

    def get(self, name: str) -> Optional[JinxTool]:
        return self._tools.get(name)

    def list_tools(self) -> List[Dict[str, Any]]:
        """Function-tool descriptors for every jinx."""
        return [to_function_tool(tool.definition) for tool in self._tools.values()]

    async def call(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
        extra_context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Invoke a jinx by name.

        Raises:
            KeyError: If no jinx has that name
        """
        tool = self._tools.get(name)
        if tool is None:
            raise KeyError(f"Unknown jinx tool: {name}")
        return await tool.execute_tool(arguments or {}, extra_context)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
