# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tool registry for managing and executing tool instances.

Each agent variant gets its own registry, populated from its YAML config,
so an agent can only ever call the tools it was configured with.

Example:
    from src.core.tools import ToolRegistry

    registry = ToolRegistry()
    registry.register(MarkConceptProgressTool())

    tools = registry.get_definitions()
    result = await registry.execute("mark_concept_progress", params, context)
"""

import logging
from typing import Any

from src.core.tools.base import BaseTool, ToolContext, ToolResult

logger = logging.getLogger(__name__)

UNKNOWN_TOOL_MESSAGE = (
    "The tool '{name}' is not available here. Please respond to the user "
    "directly without calling it."
)
UNEXPECTED_FAILURE_MESSAGE = (
    "I ran into a small technical hiccup while updating your progress, "
    "but our conversation can continue as normal."
)


class ToolRegistry:
    """Registry for managing tool instances.

    Provides registration, lookup, definition aggregation for the LLM and
    a failure-proof execute() used by the agent runtime.
    """

    def __init__(self) -> None:
        """Initialize an empty tool registry."""
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool in the registry.

        Args:
            tool: Tool instance to register.

        Raises:
            ValueError: If a tool with the same name already exists.
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.debug("Registered tool: %s", tool.name)

    def get(self, name: str) -> BaseTool:
        """Get a tool by name.

        Args:
            name: Name of the tool to retrieve.

        Returns:
            The tool instance.

        Raises:
            KeyError: If the tool is not registered.
        """
        if name not in self._tools:
            raise KeyError(f"Tool '{name}' is not registered")

        return self._tools[name]

    def has(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def list_names(self) -> list[str]:
        """Get names of all registered tools."""
        return list(self._tools.keys())

    def get_definitions(self) -> list[dict[str, Any]]:
        """Get OpenAI-compatible definitions for all tools.

        Returns:
            List of tool definitions in OpenAI format.
        """
        return [tool.definition for tool in self._tools.values()]

    async def execute(
        self,
        name: str,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Execute a tool by name without ever raising into the agent loop.

        Unknown tools and unexpected exceptions are converted into graceful
        results; the model sees a plain message either way.

        Args:
            name: Tool name requested by the model.
            params: Arguments from the model's tool call.
            context: Execution context for the current turn.

        Returns:
            ToolResult from the tool, or a graceful failure result.
        """
        try:
            tool = self.get(name)
        except KeyError:
            logger.warning("Model requested unknown tool: %s", name)
            return ToolResult(
                success=False,
                data={"message": UNKNOWN_TOOL_MESSAGE.format(name=name)},
                error="unknown_tool",
                stop_chaining=True,
            )

        try:
            return await tool.execute(params, context)
        except Exception:
            logger.exception("Tool %s failed unexpectedly", name)
            return ToolResult(
                success=False,
                data={"message": UNEXPECTED_FAILURE_MESSAGE},
                error="tool_failed",
            )

    def __len__(self) -> int:
        """Get number of registered tools."""
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def __repr__(self) -> str:
        return f"ToolRegistry(tools={list(self._tools.keys())})"
