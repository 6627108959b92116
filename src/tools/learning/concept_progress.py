# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mark concept progress tool for the Teacher agent.

The owning session is resolved from the concept itself; a concept id from
another session is indistinguishable from a missing one.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.core.tools.base import BaseTool, ToolContext, ToolResult
from src.infrastructure.database.models import Concept
from src.tools.progress import (
    PROGRESS_SAVE_FAILED_MESSAGE,
    invalid_params,
    lock_learning_session,
    not_found,
    progress_suffix,
    recompute_learning_progress,
    record_history,
    require_bool,
    require_str,
    save_failed,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class MarkConceptProgressTool(BaseTool):
    """Mark a concept completed or not completed and recompute progress."""

    @property
    def name(self) -> str:
        """Return tool name."""
        return "mark_concept_progress"

    @property
    def definition(self) -> dict[str, Any]:
        """Return OpenAI-compatible tool definition."""
        return {
            "type": "function",
            "function": {
                "name": "mark_concept_progress",
                "description": (
                    "Update the completion status of a concept when the student "
                    "demonstrates clear mastery. Session progress is recalculated "
                    "automatically."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "concept_id": {
                            "type": "string",
                            "description": "Exact ID of the concept, taken from the concept list",
                        },
                        "is_completed": {
                            "type": "boolean",
                            "description": "Whether the student has mastered the concept",
                        },
                    },
                    "required": ["concept_id", "is_completed"],
                },
            },
        }

    async def execute(
        self,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Toggle the concept and recompute the session completion rate.

        Args:
            params: Tool parameters containing concept_id and is_completed.
            context: Execution context for the current turn.

        Returns:
            ToolResult with the new completion rate.
        """
        try:
            concept_id = require_str(params, "concept_id")
            is_completed = require_bool(params, "is_completed")
        except ValueError as e:
            return invalid_params(str(e))

        try:
            async with context.transaction() as db:
                concept = await db.get(Concept, concept_id)
                if concept is None:
                    logger.warning("Concept not found: %s", concept_id)
                    return not_found("concept")

                session = await lock_learning_session(db, concept.session_id, context)
                if session is None:
                    logger.warning(
                        "Concept %s does not belong to session %s",
                        concept_id,
                        context.session_id,
                    )
                    return not_found("concept")

                was_completed = concept.is_completed
                concept.set_completed(is_completed, utc_now())
                completion_rate = await recompute_learning_progress(db, session)

                status_text = "completed" if is_completed else "not completed"
                record_history(
                    db,
                    context,
                    tool_name=self.name,
                    item_type="concept",
                    item_id=concept.id,
                    action=status_text.replace(" ", "_"),
                    changes={
                        "is_completed": {"from": was_completed, "to": is_completed},
                        "completion_rate": completion_rate,
                    },
                    note=f"Concept \"{concept.name}\" marked as {status_text}",
                )
                concept_name = concept.name

        except SQLAlchemyError:
            logger.exception("Error updating concept progress for %s", concept_id)
            return save_failed(
                PROGRESS_SAVE_FAILED_MESSAGE.format(
                    praise="Your understanding is clear!",
                    closing="Keep up the great work!",
                )
            )

        logger.info(
            "Concept %s marked %s, session completion %.1f%%",
            concept_id,
            status_text,
            completion_rate,
        )

        return ToolResult(
            success=True,
            data={
                "concept_id": concept_id,
                "is_completed": is_completed,
                "completion_rate": completion_rate,
                "message": (
                    f'Excellent! I\'ve marked "{concept_name}" as {status_text}'
                    f"{progress_suffix(completion_rate)}. Great progress! 🎉"
                ),
            },
        )
