# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mark task progress tool for the Teacher agent."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.core.tools.base import BaseTool, ToolContext, ToolResult
from src.infrastructure.database.models import Task
from src.tools.progress import (
    PROGRESS_SAVE_FAILED_MESSAGE,
    invalid_params,
    lock_learning_session,
    not_found,
    recompute_learning_progress,
    record_history,
    require_bool,
    require_str,
    save_failed,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class MarkTaskProgressTool(BaseTool):
    """Mark a practice task completed or not completed.

    Tasks do not count towards the session completion rate, but the
    aggregate is still recomputed so it never goes stale.
    """

    @property
    def name(self) -> str:
        """Return tool name."""
        return "mark_task_progress"

    @property
    def definition(self) -> dict[str, Any]:
        """Return OpenAI-compatible tool definition."""
        return {
            "type": "function",
            "function": {
                "name": "mark_task_progress",
                "description": (
                    "Update the completion status of a practice task when the "
                    "student completes it."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "task_id": {
                            "type": "string",
                            "description": "Exact ID of the task, taken from the task list",
                        },
                        "is_completed": {
                            "type": "boolean",
                            "description": "Whether the task is completed",
                        },
                    },
                    "required": ["task_id", "is_completed"],
                },
            },
        }

    async def execute(
        self,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Toggle the task.

        Args:
            params: Tool parameters containing task_id and is_completed.
            context: Execution context for the current turn.

        Returns:
            ToolResult describing the change.
        """
        try:
            task_id = require_str(params, "task_id")
            is_completed = require_bool(params, "is_completed")
        except ValueError as e:
            return invalid_params(str(e))

        try:
            async with context.transaction() as db:
                task = await db.get(Task, task_id)
                if task is None:
                    logger.warning("Task not found: %s", task_id)
                    return not_found("task")

                session = await lock_learning_session(db, task.session_id, context)
                if session is None:
                    logger.warning(
                        "Task %s does not belong to session %s", task_id, context.session_id
                    )
                    return not_found("task")

                was_completed = task.is_completed
                task.set_completed(is_completed, utc_now())
                await recompute_learning_progress(db, session)

                status_text = "completed" if is_completed else "not completed"
                record_history(
                    db,
                    context,
                    tool_name=self.name,
                    item_type="task",
                    item_id=task.id,
                    action=status_text.replace(" ", "_"),
                    changes={"is_completed": {"from": was_completed, "to": is_completed}},
                    note=f"Task \"{task.title}\" marked as {status_text}",
                )
                task_title = task.title

        except SQLAlchemyError:
            logger.exception("Error updating task progress for %s", task_id)
            return save_failed(
                PROGRESS_SAVE_FAILED_MESSAGE.format(
                    praise="Excellent work on that task!",
                    closing="Keep it up!",
                )
            )

        logger.info("Task %s marked %s", task_id, status_text)

        return ToolResult(
            success=True,
            data={
                "task_id": task_id,
                "is_completed": is_completed,
                "message": (
                    f'Great work! I\'ve marked the task "{task_title}" as {status_text}. '
                    "Keep up the excellent progress! 🎯"
                ),
            },
        )
