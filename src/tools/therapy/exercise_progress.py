# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mark exercise progress tool for the Psychotherapist agent."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.core.tools.base import BaseTool, ToolContext, ToolResult
from src.infrastructure.database.models import TherapyExercise
from src.tools.progress import (
    PROGRESS_SAVE_FAILED_MESSAGE,
    invalid_params,
    lock_therapy_session,
    not_found,
    optional_str,
    recompute_therapy_progress,
    record_history,
    require_bool,
    require_str,
    save_failed,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class MarkExerciseProgressTool(BaseTool):
    """Mark a therapy exercise done or not, optionally storing user feedback."""

    @property
    def name(self) -> str:
        """Return tool name."""
        return "mark_exercise_progress"

    @property
    def definition(self) -> dict[str, Any]:
        """Return OpenAI-compatible tool definition."""
        return {
            "type": "function",
            "function": {
                "name": "mark_exercise_progress",
                "description": (
                    "Update the completion status of a therapeutic exercise when the "
                    "user reports having practiced it."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "exercise_id": {
                            "type": "string",
                            "description": "Exact ID of the exercise, taken from the exercise list",
                        },
                        "is_completed": {
                            "type": "boolean",
                            "description": "Whether the exercise is completed",
                        },
                        "feedback": {
                            "type": "string",
                            "description": "The user's reflections on the exercise",
                        },
                    },
                    "required": ["exercise_id", "is_completed"],
                },
            },
        }

    async def execute(
        self,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Toggle the exercise.

        Args:
            params: Tool parameters containing exercise_id, is_completed
                and optional feedback.
            context: Execution context for the current turn.

        Returns:
            ToolResult describing the change.
        """
        try:
            exercise_id = require_str(params, "exercise_id")
            is_completed = require_bool(params, "is_completed")
        except ValueError as e:
            return invalid_params(str(e))

        feedback = optional_str(params, "feedback")

        try:
            async with context.transaction() as db:
                exercise = await db.get(TherapyExercise, exercise_id)
                if exercise is None:
                    logger.warning("Exercise not found: %s", exercise_id)
                    return not_found("exercise")

                session = await lock_therapy_session(db, exercise.session_id, context)
                if session is None:
                    logger.warning(
                        "Exercise %s does not belong to session %s",
                        exercise_id,
                        context.session_id,
                    )
                    return not_found("exercise")

                was_completed = exercise.is_completed
                exercise.set_completed(is_completed, utc_now())
                if feedback:
                    exercise.feedback = feedback
                await recompute_therapy_progress(db, session)

                status_text = "completed" if is_completed else "not completed"
                changes: dict[str, Any] = {
                    "is_completed": {"from": was_completed, "to": is_completed},
                }
                if feedback:
                    changes["feedback"] = feedback
                record_history(
                    db,
                    context,
                    tool_name=self.name,
                    item_type="exercise",
                    item_id=exercise.id,
                    action=status_text.replace(" ", "_"),
                    changes=changes,
                    note=f"Exercise \"{exercise.title}\" marked as {status_text}",
                )
                exercise_title = exercise.title

        except SQLAlchemyError:
            logger.exception("Error updating exercise progress for %s", exercise_id)
            return save_failed(
                PROGRESS_SAVE_FAILED_MESSAGE.format(
                    praise="Excellent work on that exercise!",
                    closing="Keep practicing!",
                )
            )

        logger.info("Exercise %s marked %s", exercise_id, status_text)

        return ToolResult(
            success=True,
            data={
                "exercise_id": exercise_id,
                "is_completed": is_completed,
                "message": (
                    f'Great job! I\'ve marked the exercise "{exercise_title}" as '
                    f"{status_text}. Regular practice is what makes these skills stick. 💪"
                ),
            },
        )
