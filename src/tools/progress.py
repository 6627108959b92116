# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared persistence helpers for progress tools.

Every state-changing tool follows the same shape inside one transaction:

1. Resolve the target item (or the turn's own session for creation tools)
2. Lock the owning session row and check it against the ToolContext
3. Apply the mutation
4. Recompute the session aggregate from the full current item set
5. Append one ProgressHistory row

The aggregate is never incremented in place, so the stored percentage is
always a function of the current items regardless of call order.
"""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.tools.base import ToolContext, ToolResult
from src.infrastructure.database.models import (
    Concept,
    LearningSession,
    ProgressHistory,
    TherapyGoal,
    TherapySession,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"

NOT_FOUND_MESSAGE = (
    "I couldn't find that specific {item}. Your progress tracking is still "
    "working correctly through the sidebar."
)
PROGRESS_SAVE_FAILED_MESSAGE = (
    "{praise} While I had a small technical hiccup updating the progress "
    "tracker, you can manually mark your progress in the sidebar. {closing}"
)


def not_found(item: str) -> ToolResult:
    """Build the graceful result for a missing or foreign item.

    Args:
        item: Human-readable item kind (concept, task, goal, exercise).

    Returns:
        Failed ToolResult whose message keeps the conversation going.
    """
    return ToolResult(
        success=False,
        data={"message": NOT_FOUND_MESSAGE.format(item=item)},
        error="not_found",
    )


def save_failed(message: str) -> ToolResult:
    """Build the apologetic result for a persistence failure."""
    return ToolResult(
        success=False,
        data={"message": message},
        error="persistence_failed",
    )


def invalid_params(error: str) -> ToolResult:
    """Build the result for arguments that fail validation."""
    return ToolResult(success=False, error=error)


def require_str(params: dict[str, Any], key: str) -> str:
    """Read a required non-blank string argument.

    Raises:
        ValueError: If the argument is missing or blank.
    """
    value = params.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} is required")
    return value.strip()


def optional_str(params: dict[str, Any], key: str) -> str | None:
    """Read an optional string argument, treating blanks as absent."""
    value = params.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def require_bool(params: dict[str, Any], key: str) -> bool:
    """Read a required boolean argument.

    Models occasionally send "true"/"false" strings; those are accepted.

    Raises:
        ValueError: If the argument is missing or not boolean-like.
    """
    value = params.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"{key} must be a boolean")


def require_list(params: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """Read a required non-empty list of objects.

    Raises:
        ValueError: If the argument is missing, empty or malformed.
    """
    value = params.get(key)
    if not isinstance(value, list) or not value:
        raise ValueError(f"{key} must be a non-empty list")
    if not all(isinstance(entry, dict) for entry in value):
        raise ValueError(f"every entry in {key} must be an object")
    return value


def compute_completion(completed: int, total: int) -> tuple[float, str]:
    """Compute the aggregate percentage and derived status.

    Args:
        completed: Number of completed items.
        total: Number of items.

    Returns:
        Tuple of (percentage, status). Zero items yields (0.0, "active").
    """
    if total <= 0:
        return 0.0, STATUS_ACTIVE

    percentage = 100.0 * completed / total
    status = STATUS_COMPLETED if completed == total else STATUS_ACTIVE
    return percentage, status


def owns(session: LearningSession | TherapySession, context: ToolContext) -> bool:
    """Check that a session belongs to the turn described by the context."""
    return session.id == context.session_id and session.user_id == context.user_id


async def lock_learning_session(
    db: AsyncSession,
    session_id: str,
    context: ToolContext,
) -> LearningSession | None:
    """Load and row-lock a learning session owned by the context.

    Returns:
        The session, or None if it does not exist or is not owned.
    """
    if context.session_kind != "learning":
        return None

    result = await db.execute(
        select(LearningSession)
        .where(LearningSession.id == session_id)
        .with_for_update()
    )
    session = result.scalar_one_or_none()
    if session is None or not owns(session, context):
        return None
    return session


async def lock_therapy_session(
    db: AsyncSession,
    session_id: str,
    context: ToolContext,
) -> TherapySession | None:
    """Load and row-lock a therapy session owned by the context.

    Returns:
        The session, or None if it does not exist or is not owned.
    """
    if context.session_kind != "therapy":
        return None

    result = await db.execute(
        select(TherapySession)
        .where(TherapySession.id == session_id)
        .with_for_update()
    )
    session = result.scalar_one_or_none()
    if session is None or not owns(session, context):
        return None
    return session


async def recompute_learning_progress(
    db: AsyncSession,
    session: LearningSession,
) -> float:
    """Recompute completion_rate and status over all of a session's concepts.

    Pending changes are flushed first so the counts include them.

    Returns:
        The new completion percentage.
    """
    await db.flush()

    total = await db.scalar(
        select(func.count()).select_from(Concept).where(Concept.session_id == session.id)
    )
    completed = await db.scalar(
        select(func.count())
        .select_from(Concept)
        .where(Concept.session_id == session.id, Concept.is_completed.is_(True))
    )

    percentage, status = compute_completion(completed or 0, total or 0)
    session.completion_rate = percentage
    session.status = status
    session.updated_at = utc_now()

    logger.debug(
        "Learning session %s progress: %d/%d (%.1f%%)",
        session.id,
        completed or 0,
        total or 0,
        percentage,
    )
    return percentage


async def recompute_therapy_progress(
    db: AsyncSession,
    session: TherapySession,
) -> float:
    """Recompute progress_level and status over all of a session's goals.

    Returns:
        The new progress percentage.
    """
    await db.flush()

    total = await db.scalar(
        select(func.count()).select_from(TherapyGoal).where(TherapyGoal.session_id == session.id)
    )
    completed = await db.scalar(
        select(func.count())
        .select_from(TherapyGoal)
        .where(TherapyGoal.session_id == session.id, TherapyGoal.is_completed.is_(True))
    )

    percentage, status = compute_completion(completed or 0, total or 0)
    session.progress_level = percentage
    session.status = status
    session.updated_at = utc_now()

    logger.debug(
        "Therapy session %s progress: %d/%d (%.1f%%)",
        session.id,
        completed or 0,
        total or 0,
        percentage,
    )
    return percentage


def record_history(
    db: AsyncSession,
    context: ToolContext,
    *,
    tool_name: str,
    item_type: str,
    action: str,
    item_id: str | None = None,
    changes: dict[str, Any] | None = None,
    note: str = "",
) -> ProgressHistory:
    """Append one audit row for a state-changing tool call.

    Args:
        db: Session bound to the tool call's transaction.
        context: Tool context identifying user and session.
        tool_name: Name of the tool that made the change.
        item_type: concept, task, goal, exercise or structured_exercise.
        action: Short machine-readable action, e.g. "completed".
        item_id: Affected item, if the change targets a single item.
        changes: Field-level summary of what changed.
        note: Human-readable description.

    Returns:
        The pending ProgressHistory row.
    """
    entry = ProgressHistory(
        user_id=context.user_id,
        session_kind=context.session_kind,
        session_id=context.session_id,
        item_type=item_type,
        item_id=item_id,
        action=action,
        tool_name=tool_name,
        changes=changes or {},
        note=note,
    )
    db.add(entry)
    return entry


def progress_suffix(percentage: float) -> str:
    """Format the overall-progress suffix appended to tool messages."""
    if percentage <= 0:
        return ""
    return f" ({round(percentage)}% overall progress)"
