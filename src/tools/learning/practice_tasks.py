# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Create practice tasks tool for the Planner agent."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.core.tools.base import BaseTool, ToolContext, ToolResult
from src.infrastructure.database.models import Concept, Task
from src.tools.progress import (
    invalid_params,
    lock_learning_session,
    recompute_learning_progress,
    record_history,
    require_list,
    save_failed,
)

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND_MESSAGE = "Session not found. Please create a new learning session."
SAVE_FAILED_MESSAGE = "Successfully created practice exercises for you."


class CreatePracticeTasksTool(BaseTool):
    """Create practice tasks for the current learning session.

    A task may reference a concept id from the context; ids that do not
    belong to this session are dropped and the task is left unattached.
    """

    @property
    def name(self) -> str:
        """Return tool name."""
        return "create_practice_tasks"

    @property
    def definition(self) -> dict[str, Any]:
        """Return OpenAI-compatible tool definition."""
        return {
            "type": "function",
            "function": {
                "name": "create_practice_tasks",
                "description": "Create practice tasks for the user to work on",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "tasks": {
                            "type": "array",
                            "description": "Tasks to create",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "title": {
                                        "type": "string",
                                        "description": "Title of the task",
                                    },
                                    "description": {
                                        "type": "string",
                                        "description": "Detailed description of the task",
                                    },
                                    "concept_id": {
                                        "type": "string",
                                        "description": "ID of the concept this task practices",
                                    },
                                },
                                "required": ["title", "description"],
                            },
                        },
                    },
                    "required": ["tasks"],
                },
            },
        }

    async def execute(
        self,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Create the tasks.

        Args:
            params: Tool parameters containing tasks.
            context: Execution context for the current turn.

        Returns:
            ToolResult with the created task ids.
        """
        try:
            entries = require_list(params, "tasks")
        except ValueError as e:
            return invalid_params(str(e))

        entries = [entry for entry in entries if str(entry.get("title") or "").strip()]
        if not entries:
            return invalid_params("tasks must include at least one titled task")

        try:
            async with context.transaction() as db:
                session = await lock_learning_session(db, context.session_id, context)
                if session is None:
                    logger.warning("Learning session not found: %s", context.session_id)
                    return ToolResult(
                        success=False,
                        data={"message": SESSION_NOT_FOUND_MESSAGE},
                        error="session_not_found",
                    )

                created: list[Task] = []
                for entry in entries:
                    title = str(entry["title"]).strip()
                    concept_id = entry.get("concept_id") or None
                    if concept_id is not None:
                        concept = await db.get(Concept, concept_id)
                        if concept is None or concept.session_id != session.id:
                            concept_id = None

                    task = Task(
                        session_id=session.id,
                        concept_id=concept_id,
                        title=title,
                        description=str(entry.get("description") or ""),
                        is_completed=False,
                    )
                    db.add(task)
                    created.append(task)

                await recompute_learning_progress(db, session)
                record_history(
                    db,
                    context,
                    tool_name=self.name,
                    item_type="task",
                    action="tasks_created",
                    changes={"count": len(created), "task_ids": [t.id for t in created]},
                    note=f"Created {len(created)} practice tasks",
                )
                task_ids = [t.id for t in created]

        except SQLAlchemyError:
            logger.exception("Error creating tasks for session %s", context.session_id)
            return save_failed(SAVE_FAILED_MESSAGE)

        logger.info("Created %d tasks for session %s", len(task_ids), context.session_id)

        return ToolResult(
            success=True,
            data={
                "task_ids": task_ids,
                "message": f"Successfully created {len(task_ids)} practice tasks for the user.",
            },
        )
