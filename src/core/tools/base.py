# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Base classes for the tool system.

This module defines the foundational classes for the tool system:
- ToolContext: Context available to tools during execution
- ToolResult: Standardized result from tool execution
- BaseTool: Abstract base class for all tools

Tools are executed by the agent runtime when the model requests a domain
mutation through tool calling. A tool never trusts ids coming from the
model: it re-resolves the target item, walks up to the owning session and
checks that session against the context before touching anything.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

SessionKind = Literal["learning", "therapy"]


@dataclass
class ToolContext:
    """Context available to tools during execution.

    Identifies the session and user the current turn belongs to. Tools use
    it both to scope creation calls and to reject ids that resolve to a
    different session.

    Attributes:
        user_id: User the turn belongs to.
        session_id: Learning or therapy session the turn belongs to.
        session_kind: Which kind of session session_id refers to.
        session_factory: Factory for database sessions. Every tool call
            runs in its own transaction.
        extra: Additional context that tools might need.
    """

    user_id: str
    session_id: str
    session_kind: SessionKind
    session_factory: "async_sessionmaker[AsyncSession]"
    extra: dict[str, Any] = field(default_factory=dict)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["AsyncSession"]:
        """Open a database session with a transaction for one tool call.

        Commits when the block exits normally and rolls back on error.

        Yields:
            AsyncSession bound to an open transaction.
        """
        async with self.session_factory() as db:
            async with db.begin():
                yield db


@dataclass
class ToolResult:
    """Result from tool execution.

    Attributes:
        success: Whether the tool executed successfully.
        data: Tool-specific result data. Should include a 'message' key
            with the human-readable text returned to the model.
        error: Machine-readable error code if success is False.
        state_update: Orchestration hints for the router (e.g. that a
            structured exercise was completed).
        stop_chaining: If True, prevents further tool calls in this turn.
    """

    success: bool
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    state_update: dict[str, Any] | None = None
    stop_chaining: bool = False

    def to_llm_message(self) -> str:
        """Convert result to message for LLM.

        Failed results carry an in-character message in data when one
        exists; the model never sees a stack trace.

        Returns:
            Human-readable message describing the tool result.
        """
        message = self.data.get("message", "")
        if message:
            return message

        if not self.success:
            return f"Error: {self.error}"

        return "Operation completed successfully."


class BaseTool(ABC):
    """Abstract base class for all tools.

    The tool lifecycle:
    1. LLM receives tool definitions via `definition` property
    2. LLM calls tool with arguments
    3. Agent runtime executes tool via `execute()` method
    4. Result message is sent back to LLM for its next reasoning step

    Example:
        class MarkConceptProgressTool(BaseTool):
            @property
            def name(self) -> str:
                return "mark_concept_progress"

            @property
            def definition(self) -> dict[str, Any]:
                return {
                    "type": "function",
                    "function": {
                        "name": "mark_concept_progress",
                        "description": "Mark a concept complete or incomplete",
                        "parameters": {...},
                    },
                }

            async def execute(self, params, context) -> ToolResult:
                ...
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name matching the function name in definition."""

    @property
    @abstractmethod
    def definition(self) -> dict[str, Any]:
        """OpenAI-compatible tool definition.

        Returns:
            Dictionary with tool definition in OpenAI format.
        """

    @abstractmethod
    async def execute(
        self,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Execute the tool with given parameters.

        Implementations must not raise for missing targets or persistence
        failures; both become graceful results.

        Args:
            params: Arguments from the LLM's tool call.
            context: Execution context for the current turn.

        Returns:
            ToolResult with success status and a message for the model.
        """

    def validate_params(self, params: dict[str, Any]) -> None:
        """Validate parameters before execution.

        Override this method to add custom validation logic.

        Args:
            params: Parameters to validate.

        Raises:
            ValueError: If parameters are invalid.
        """
