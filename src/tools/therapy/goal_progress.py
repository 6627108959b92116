# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mark goal progress tool for the Psychotherapist agent."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.core.tools.base import BaseTool, ToolContext, ToolResult
from src.infrastructure.database.models import TherapyGoal
from src.tools.progress import (
    PROGRESS_SAVE_FAILED_MESSAGE,
    invalid_params,
    lock_therapy_session,
    not_found,
    progress_suffix,
    recompute_therapy_progress,
    record_history,
    require_bool,
    require_str,
    save_failed,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class MarkGoalProgressTool(BaseTool):
    """Mark a therapy goal achieved or not and recompute the progress level.

    Completing a parent goal does not complete its sub-goals; the progress
    level counts every goal of the session individually.
    """

    @property
    def name(self) -> str:
        """Return tool name."""
        return "mark_goal_progress"

    @property
    def definition(self) -> dict[str, Any]:
        """Return OpenAI-compatible tool definition."""
        return {
            "type": "function",
            "function": {
                "name": "mark_goal_progress",
                "description": (
                    "Update the completion status of a therapeutic goal when the user "
                    "demonstrates clear progress towards it."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "goal_id": {
                            "type": "string",
                            "description": "Exact ID of the goal, taken from the goal list",
                        },
                        "is_completed": {
                            "type": "boolean",
                            "description": "Whether the goal has been achieved",
                        },
                    },
                    "required": ["goal_id", "is_completed"],
                },
            },
        }

    async def execute(
        self,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Toggle the goal and recompute the session progress level.

        Args:
            params: Tool parameters containing goal_id and is_completed.
            context: Execution context for the current turn.

        Returns:
            ToolResult with the new progress level.
        """
        try:
            goal_id = require_str(params, "goal_id")
            is_completed = require_bool(params, "is_completed")
        except ValueError as e:
            return invalid_params(str(e))

        try:
            async with context.transaction() as db:
                goal = await db.get(TherapyGoal, goal_id)
                if goal is None:
                    logger.warning("Goal not found: %s", goal_id)
                    return not_found("goal")

                session = await lock_therapy_session(db, goal.session_id, context)
                if session is None:
                    logger.warning(
                        "Goal %s does not belong to session %s", goal_id, context.session_id
                    )
                    return not_found("goal")

                was_completed = goal.is_completed
                goal.set_completed(is_completed, utc_now())
                progress_level = await recompute_therapy_progress(db, session)

                status_text = "achieved" if is_completed else "in progress"
                record_history(
                    db,
                    context,
                    tool_name=self.name,
                    item_type="goal",
                    item_id=goal.id,
                    action="completed" if is_completed else "not_completed",
                    changes={
                        "is_completed": {"from": was_completed, "to": is_completed},
                        "progress_level": progress_level,
                    },
                    note=f"Goal \"{goal.title}\" marked as {status_text}",
                )
                goal_title = goal.title

        except SQLAlchemyError:
            logger.exception("Error updating goal progress for %s", goal_id)
            return save_failed(
                PROGRESS_SAVE_FAILED_MESSAGE.format(
                    praise="You're making wonderful progress!",
                    closing="Keep up the great therapeutic work!",
                )
            )

        logger.info(
            "Goal %s marked %s, session progress %.1f%%", goal_id, status_text, progress_level
        )

        return ToolResult(
            success=True,
            data={
                "goal_id": goal_id,
                "is_completed": is_completed,
                "progress_level": progress_level,
                "message": (
                    f'Wonderful! I\'ve marked your goal "{goal_title}" as {status_text}'
                    f"{progress_suffix(progress_level)}. That's meaningful progress. 🌱"
                ),
            },
        )
