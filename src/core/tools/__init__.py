# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core tool infrastructure for LLM tool calling.

Base Classes:
    BaseTool: Abstract base class for all tools
    ToolContext: Context available to tools during execution
    ToolResult: Standardized result from tool execution

Registry:
    ToolRegistry: Registry for managing and executing tool instances

Usage:
    from src.core.tools import BaseTool, ToolContext, ToolResult

    class MyTool(BaseTool):
        @property
        def name(self) -> str:
            return "my_tool"

        @property
        def definition(self) -> dict:
            return {...}

        async def execute(self, params, context) -> ToolResult:
            return ToolResult(success=True, data={"message": "Done"})
"""

from src.core.tools.base import BaseTool, SessionKind, ToolContext, ToolResult
from src.core.tools.registry import ToolRegistry

__all__ = [
    # Base classes
    "BaseTool",
    "SessionKind",
    "ToolContext",
    "ToolResult",
    # Registry
    "ToolRegistry",
]
