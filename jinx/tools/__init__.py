"""Tool interfaces for invoking jinxes from an agent layer."""

from .jinx_tool import JinxTool, JinxToolbox

__all__ = ["JinxTool", "JinxToolbox"]
