# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Create therapy exercises tool for the Assessment agent."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.core.tools.base import BaseTool, ToolContext, ToolResult
from src.infrastructure.database.models import TherapyExercise, TherapyGoal
from src.tools.progress import (
    invalid_params,
    lock_therapy_session,
    recompute_therapy_progress,
    record_history,
    require_list,
    save_failed,
)

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND_MESSAGE = "Therapy session not found. Please create a new therapy session."
SAVE_FAILED_MESSAGE = "Successfully created therapeutic exercises for you."

EXERCISE_TYPES = ("worksheet", "breathing", "mindfulness", "journaling", "behavioral")
DEFAULT_ESTIMATED_MINUTES = 10


def _bounded_int(value: Any, default: int, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return min(high, max(low, int(value)))


class CreateTherapyExercisesTool(BaseTool):
    """Create practice exercises for the current therapy session."""

    @property
    def name(self) -> str:
        """Return tool name."""
        return "create_therapy_exercises"

    @property
    def definition(self) -> dict[str, Any]:
        """Return OpenAI-compatible tool definition."""
        return {
            "type": "function",
            "function": {
                "name": "create_therapy_exercises",
                "description": (
                    "Create therapeutic exercises for the user to practice CBT techniques"
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "exercises": {
                            "type": "array",
                            "description": "Exercises to create",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "title": {
                                        "type": "string",
                                        "description": "Title of the exercise",
                                    },
                                    "description": {
                                        "type": "string",
                                        "description": "Detailed instructions for the exercise",
                                    },
                                    "exercise_type": {
                                        "type": "string",
                                        "enum": list(EXERCISE_TYPES),
                                        "description": "Type of exercise",
                                    },
                                    "difficulty": {
                                        "type": "integer",
                                        "description": "Difficulty level (1=easy, 2=medium, 3=hard)",
                                    },
                                    "estimated_minutes": {
                                        "type": "integer",
                                        "description": "Estimated time in minutes",
                                    },
                                    "goal_id": {
                                        "type": "string",
                                        "description": "ID of the goal this exercise supports",
                                    },
                                },
                                "required": ["title", "description"],
                            },
                        },
                    },
                    "required": ["exercises"],
                },
            },
        }

    async def execute(
        self,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Create the exercises.

        Args:
            params: Tool parameters containing exercises.
            context: Execution context for the current turn.

        Returns:
            ToolResult with the created exercise ids.
        """
        try:
            entries = require_list(params, "exercises")
        except ValueError as e:
            return invalid_params(str(e))

        entries = [entry for entry in entries if str(entry.get("title") or "").strip()]
        if not entries:
            return invalid_params("exercises must include at least one titled exercise")

        try:
            async with context.transaction() as db:
                session = await lock_therapy_session(db, context.session_id, context)
                if session is None:
                    logger.warning("Therapy session not found: %s", context.session_id)
                    return ToolResult(
                        success=False,
                        data={"message": SESSION_NOT_FOUND_MESSAGE},
                        error="session_not_found",
                    )

                created: list[TherapyExercise] = []
                for entry in entries:
                    goal_id = entry.get("goal_id") or None
                    if goal_id is not None:
                        goal = await db.get(TherapyGoal, goal_id)
                        if goal is None or goal.session_id != session.id:
                            goal_id = None

                    exercise_type = entry.get("exercise_type")
                    if exercise_type not in EXERCISE_TYPES:
                        exercise_type = "worksheet"

                    exercise = TherapyExercise(
                        session_id=session.id,
                        goal_id=goal_id,
                        title=str(entry["title"]).strip(),
                        description=str(entry.get("description") or ""),
                        exercise_type=exercise_type,
                        difficulty=_bounded_int(entry.get("difficulty"), 1, 1, 3),
                        estimated_minutes=_bounded_int(
                            entry.get("estimated_minutes"), DEFAULT_ESTIMATED_MINUTES, 1, 240
                        ),
                        is_completed=False,
                    )
                    db.add(exercise)
                    created.append(exercise)

                await recompute_therapy_progress(db, session)
                record_history(
                    db,
                    context,
                    tool_name=self.name,
                    item_type="exercise",
                    action="exercises_created",
                    changes={"count": len(created), "exercise_ids": [x.id for x in created]},
                    note=f"Created {len(created)} therapeutic exercises",
                )
                exercise_ids = [x.id for x in created]

        except SQLAlchemyError:
            logger.exception("Error creating therapy exercises for session %s", context.session_id)
            return save_failed(SAVE_FAILED_MESSAGE)

        logger.info("Created %d exercises for session %s", len(exercise_ids), context.session_id)

        return ToolResult(
            success=True,
            data={
                "exercise_ids": exercise_ids,
                "message": (
                    f"Successfully created {len(exercise_ids)} therapeutic exercises "
                    "for you to practice."
                ),
            },
        )
