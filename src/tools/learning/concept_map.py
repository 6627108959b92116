# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Create concept map tool for the Planner agent.

Creates the session's concept hierarchy in one call. Concepts may nest by
referring to an earlier entry of the same call through ``parent_index``.
The session is always the turn's own session; the model never supplies it.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.core.agents.categories import is_valid_subject_category
from src.core.tools.base import BaseTool, ToolContext, ToolResult
from src.infrastructure.database.models import Concept
from src.tools.progress import (
    invalid_params,
    lock_learning_session,
    optional_str,
    recompute_learning_progress,
    record_history,
    require_list,
    save_failed,
)

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND_MESSAGE = "Session not found. Please create a new learning session."
SAVE_FAILED_MESSAGE = "Successfully planned the learning structure for you."


class CreateConceptMapTool(BaseTool):
    """Create the concept hierarchy for a learning session.

    Also records the subject categorisation on the session when the model
    supplies one. Unknown category ids are stored as None.
    """

    @property
    def name(self) -> str:
        """Return tool name."""
        return "create_concept_map"

    @property
    def definition(self) -> dict[str, Any]:
        """Return OpenAI-compatible tool definition."""
        return {
            "type": "function",
            "function": {
                "name": "create_concept_map",
                "description": (
                    "Create a hierarchical concept map for the current learning "
                    "session. Call this once, before creating practice tasks."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "concepts": {
                            "type": "array",
                            "description": "Concepts to create, in teaching order",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "name": {
                                        "type": "string",
                                        "description": "Name of the concept",
                                    },
                                    "description": {
                                        "type": "string",
                                        "description": "Description of the concept",
                                    },
                                    "order_index": {
                                        "type": "integer",
                                        "description": "Order index for display",
                                    },
                                    "parent_index": {
                                        "type": "integer",
                                        "description": (
                                            "Zero-based position of the parent concept "
                                            "in this same list, for sub-concepts"
                                        ),
                                    },
                                },
                                "required": ["name"],
                            },
                        },
                        "category_id": {
                            "type": "integer",
                            "description": "Subject category ID (1-50, 50 is 'Other')",
                        },
                        "subject_name": {
                            "type": "string",
                            "description": "Specific subject name within the category",
                        },
                    },
                    "required": ["concepts"],
                },
            },
        }

    async def execute(
        self,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Create the concepts.

        Args:
            params: Tool parameters containing concepts and optional categorisation.
            context: Execution context for the current turn.

        Returns:
            ToolResult with the created concept ids.
        """
        try:
            entries = require_list(params, "concepts")
        except ValueError as e:
            return invalid_params(str(e))

        entries = [entry for entry in entries if str(entry.get("name") or "").strip()]
        if not entries:
            return invalid_params("concepts must include at least one named concept")

        category_id = params.get("category_id")
        subject_name = optional_str(params, "subject_name")

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

                if category_id is not None:
                    if is_valid_subject_category(category_id):
                        session.subject_category_id = category_id
                    else:
                        logger.warning("Unknown subject category %s, storing None", category_id)
                        session.subject_category_id = None
                if subject_name:
                    session.subject_name = subject_name

                created: list[Concept] = []
                for position, entry in enumerate(entries):
                    name = str(entry["name"]).strip()
                    parent = None
                    parent_index = entry.get("parent_index")
                    if isinstance(parent_index, int) and 0 <= parent_index < len(created):
                        parent = created[parent_index]

                    concept = Concept(
                        session_id=session.id,
                        parent_id=parent.id if parent else None,
                        name=name,
                        description=str(entry.get("description") or ""),
                        order_index=int(entry.get("order_index") or position + 1),
                        is_completed=False,
                    )
                    db.add(concept)
                    # Flush so the id exists for children in this same call
                    await db.flush()
                    created.append(concept)

                await recompute_learning_progress(db, session)
                record_history(
                    db,
                    context,
                    tool_name=self.name,
                    item_type="concept",
                    action="concept_map_created",
                    changes={
                        "count": len(created),
                        "concept_ids": [c.id for c in created],
                        "category_id": session.subject_category_id,
                    },
                    note=f"Created {len(created)} concepts for \"{session.topic}\"",
                )
                concept_ids = [c.id for c in created]

        except SQLAlchemyError:
            logger.exception("Error creating concept map for session %s", context.session_id)
            return save_failed(SAVE_FAILED_MESSAGE)

        subject_info = f' in subject "{subject_name}"' if subject_name else ""
        category_info = f" (Category ID: {category_id})" if category_id is not None else ""

        logger.info("Created %d concepts for session %s", len(concept_ids), context.session_id)

        return ToolResult(
            success=True,
            data={
                "concept_ids": concept_ids,
                "message": (
                    f"Successfully created {len(concept_ids)} concepts for the "
                    f"learning session{subject_info}{category_info}."
                ),
            },
        )
