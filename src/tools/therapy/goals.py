# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Create therapy goals tool for the Assessment agent."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.core.agents.categories import THERAPY_CATEGORIES
from src.core.tools.base import BaseTool, ToolContext, ToolResult
from src.infrastructure.database.models import TherapyGoal
from src.tools.progress import (
    invalid_params,
    lock_therapy_session,
    optional_str,
    recompute_therapy_progress,
    record_history,
    require_list,
    save_failed,
)

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND_MESSAGE = "Therapy session not found. Please create a new therapy session."
SAVE_FAILED_MESSAGE = "Successfully planned your therapeutic goals for you."

DEFAULT_PRIORITY = 2


def _priority(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_PRIORITY
    return min(3, max(1, int(value)))


class CreateTherapyGoalsTool(BaseTool):
    """Create the therapeutic goals for the current therapy session.

    Goals may nest through ``parent_index``. The session's primary
    category is recorded when the model supplies a known one.
    """

    @property
    def name(self) -> str:
        """Return tool name."""
        return "create_therapy_goals"

    @property
    def definition(self) -> dict[str, Any]:
        """Return OpenAI-compatible tool definition."""
        return {
            "type": "function",
            "function": {
                "name": "create_therapy_goals",
                "description": (
                    "Create therapeutic goals for the current CBT therapy session "
                    "based on the assessment."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "primary_category": {
                            "type": "string",
                            "description": (
                                "Primary therapeutic category (anxiety, depression, stress, "
                                "cognitive, behavioral, emotional, relational, self-concept, general)"
                            ),
                        },
                        "goals": {
                            "type": "array",
                            "description": "Therapeutic goals to create",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "title": {
                                        "type": "string",
                                        "description": "Title of the therapeutic goal",
                                    },
                                    "description": {
                                        "type": "string",
                                        "description": "Description of the therapeutic goal",
                                    },
                                    "category": {
                                        "type": "string",
                                        "description": "Specific category for this goal",
                                    },
                                    "priority": {
                                        "type": "integer",
                                        "description": "Priority level (1=high, 2=medium, 3=low)",
                                    },
                                    "parent_index": {
                                        "type": "integer",
                                        "description": (
                                            "Zero-based position of the parent goal "
                                            "in this same list, for sub-goals"
                                        ),
                                    },
                                },
                                "required": ["title"],
                            },
                        },
                    },
                    "required": ["goals"],
                },
            },
        }

    async def execute(
        self,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Create the goals.

        Args:
            params: Tool parameters containing goals and optional primary_category.
            context: Execution context for the current turn.

        Returns:
            ToolResult with the created goal ids.
        """
        try:
            entries = require_list(params, "goals")
        except ValueError as e:
            return invalid_params(str(e))

        entries = [entry for entry in entries if str(entry.get("title") or "").strip()]
        if not entries:
            return invalid_params("goals must include at least one titled goal")

        primary_category = optional_str(params, "primary_category")
        if primary_category and primary_category.lower() not in THERAPY_CATEGORIES:
            logger.warning("Unknown therapy category %s, ignoring", primary_category)
            primary_category = None

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

                if primary_category:
                    session.primary_category = primary_category.lower()

                created: list[TherapyGoal] = []
                for entry in entries:
                    parent = None
                    parent_index = entry.get("parent_index")
                    if isinstance(parent_index, int) and 0 <= parent_index < len(created):
                        parent = created[parent_index]

                    goal = TherapyGoal(
                        session_id=session.id,
                        parent_id=parent.id if parent else None,
                        title=str(entry["title"]).strip(),
                        description=str(entry.get("description") or ""),
                        category=(
                            entry.get("category")
                            or session.primary_category
                            or "general"
                        ),
                        priority=_priority(entry.get("priority")),
                        is_completed=False,
                    )
                    db.add(goal)
                    await db.flush()
                    created.append(goal)

                await recompute_therapy_progress(db, session)
                record_history(
                    db,
                    context,
                    tool_name=self.name,
                    item_type="goal",
                    action="goals_created",
                    changes={
                        "count": len(created),
                        "goal_ids": [g.id for g in created],
                        "primary_category": session.primary_category,
                    },
                    note=f"Created {len(created)} goals during assessment",
                )
                goal_ids = [g.id for g in created]

        except SQLAlchemyError:
            logger.exception("Error creating therapy goals for session %s", context.session_id)
            return save_failed(SAVE_FAILED_MESSAGE)

        category_info = f" focusing on {primary_category}" if primary_category else ""

        logger.info("Created %d goals for session %s", len(goal_ids), context.session_id)

        return ToolResult(
            success=True,
            data={
                "goal_ids": goal_ids,
                "message": (
                    f"Successfully created {len(goal_ids)} therapeutic goals for your "
                    f"therapy session{category_info}."
                ),
            },
        )
