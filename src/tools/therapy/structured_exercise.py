# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Record structured exercise tool for the Cognitive Restructuring agent.

An A-B-C-D-E record walks through:
- A: the activating event
- B: the beliefs and automatic thoughts it triggered
- C: the emotional and behavioural consequences
- D: the disputation of those beliefs
- E: the more balanced, effective beliefs

A record is ``completed`` only when both D and E are filled in. Until
then it stays ``in_progress`` and later calls in the same session fill in
the same record instead of starting a new one.
"""

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.tools.base import BaseTool, ToolContext, ToolResult
from src.infrastructure.database.models import (
    RECORD_ABANDONED,
    RECORD_COMPLETED,
    RECORD_IN_PROGRESS,
    StructuredExercise,
)
from src.tools.progress import (
    invalid_params,
    lock_therapy_session,
    optional_str,
    recompute_therapy_progress,
    record_history,
    require_str,
    save_failed,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND_MESSAGE = (
    "I couldn't find that therapy session. Your ABCDE exercise progress is "
    "still tracked in the sidebar."
)
SAVE_FAILED_MESSAGE = (
    "Wonderful work on that cognitive restructuring exercise! While I had a "
    "small technical hiccup saving it, you can see your progress in the "
    "sidebar. The important thing is the thinking work you just did, because "
    "that's what builds lasting change!"
)

# Fields the model may fill in, in A-B-C-D-E order
_RECORD_FIELDS = (
    "activating_event",
    "beliefs",
    "consequences",
    "disputation",
    "effective_beliefs",
)


async def find_in_progress_exercise(
    db: AsyncSession,
    session_id: str,
) -> StructuredExercise | None:
    """Get the most recent in-progress record of a session, if any."""
    result = await db.execute(
        select(StructuredExercise)
        .where(
            StructuredExercise.session_id == session_id,
            StructuredExercise.completion_status == RECORD_IN_PROGRESS,
        )
        .order_by(StructuredExercise.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def abandon_in_progress_exercises(db: AsyncSession, session_id: str) -> int:
    """Mark every in-progress record of a session as abandoned.

    Called when the user leaves cognitive restructuring before finishing.

    Returns:
        Number of records abandoned.
    """
    result = await db.execute(
        update(StructuredExercise)
        .where(
            StructuredExercise.session_id == session_id,
            StructuredExercise.completion_status == RECORD_IN_PROGRESS,
        )
        .values(completion_status=RECORD_ABANDONED, updated_at=utc_now())
    )
    return result.rowcount or 0


class RecordStructuredExerciseTool(BaseTool):
    """Create or continue an A-B-C-D-E record for the current session.

    The result carries ``state_update["structured_exercise_status"]`` so
    the router can leave cognitive restructuring once a record completes.
    """

    @property
    def name(self) -> str:
        """Return tool name."""
        return "record_structured_exercise"

    @property
    def definition(self) -> dict[str, Any]:
        """Return OpenAI-compatible tool definition."""
        return {
            "type": "function",
            "function": {
                "name": "record_structured_exercise",
                "description": (
                    "Save the user's ABCDE cognitive restructuring exercise. Call it as "
                    "soon as A and B are known and again as D and E are worked out; "
                    "the same in-progress exercise is updated each time."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "session_id": {
                            "type": "string",
                            "description": "The therapy session ID from the context",
                        },
                        "title": {
                            "type": "string",
                            "description": "Short descriptive title summarizing the exercise",
                        },
                        "activating_event": {
                            "type": "string",
                            "description": "The triggering situation (A), what exactly happened",
                        },
                        "beliefs": {
                            "type": "string",
                            "description": "Automatic thoughts and beliefs (B)",
                        },
                        "consequences": {
                            "type": "string",
                            "description": "Emotional and behavioral responses (C)",
                        },
                        "disputation": {
                            "type": "string",
                            "description": "Challenges to the beliefs (D)",
                        },
                        "effective_beliefs": {
                            "type": "string",
                            "description": "New, more balanced beliefs (E)",
                        },
                    },
                    "required": ["session_id", "title", "activating_event", "beliefs"],
                },
            },
        }

    async def execute(
        self,
        params: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Create or update the record.

        Args:
            params: Tool parameters with the session id and A-B-C-D-E fields.
            context: Execution context for the current turn.

        Returns:
            ToolResult with the record id and its completion status.
        """
        try:
            session_id = require_str(params, "session_id")
            title = require_str(params, "title")
        except ValueError as e:
            return invalid_params(str(e))

        values = {field: optional_str(params, field) for field in _RECORD_FIELDS}

        if session_id != context.session_id:
            logger.warning(
                "Structured exercise for session %s requested in session %s",
                session_id,
                context.session_id,
            )
            return ToolResult(
                success=False,
                data={"message": SESSION_NOT_FOUND_MESSAGE},
                error="not_found",
            )

        try:
            async with context.transaction() as db:
                session = await lock_therapy_session(db, session_id, context)
                if session is None:
                    logger.warning("Therapy session not found: %s", session_id)
                    return ToolResult(
                        success=False,
                        data={"message": SESSION_NOT_FOUND_MESSAGE},
                        error="not_found",
                    )

                record = await find_in_progress_exercise(db, session.id)
                is_new = record is None
                if record is None:
                    record = StructuredExercise(
                        session_id=session.id,
                        user_id=session.user_id,
                        title=title,
                        activating_event="",
                        beliefs="",
                        consequences="",
                        completion_status=RECORD_IN_PROGRESS,
                    )
                    db.add(record)
                else:
                    record.title = title

                for field, value in values.items():
                    if value:
                        setattr(record, field, value)

                if record.has_resolution:
                    record.completion_status = RECORD_COMPLETED
                    record.completed_at = utc_now()
                    action = "structured_exercise_completed"
                else:
                    action = (
                        "structured_exercise_started" if is_new else "structured_exercise_updated"
                    )

                await recompute_therapy_progress(db, session)
                record_history(
                    db,
                    context,
                    tool_name=self.name,
                    item_type="structured_exercise",
                    item_id=record.id,
                    action=action,
                    changes={
                        "completion_status": record.completion_status,
                        "fields": [field for field, value in values.items() if value],
                    },
                    note=(
                        f"ABCDE exercise \"{title}\": "
                        f"{(record.activating_event or '')[:100]}"
                    ),
                )
                record_id = record.id
                status = record.completion_status

        except SQLAlchemyError:
            logger.exception("Error saving structured exercise for session %s", session_id)
            return save_failed(SAVE_FAILED_MESSAGE)

        status_text = "completed" if status == RECORD_COMPLETED else "in progress"
        logger.info("Structured exercise %s saved as %s", record_id, status)

        return ToolResult(
            success=True,
            data={
                "structured_exercise_id": record_id,
                "completion_status": status,
                "message": (
                    f'Excellent work! I\'ve saved your ABCDE exercise "{title}" as '
                    f"{status_text}. This cognitive restructuring work is building your "
                    "skills for managing difficult thoughts and situations. 🧠✨"
                ),
            },
            state_update={
                "structured_exercise_status": status,
                "structured_exercise_id": record_id,
            },
        )
