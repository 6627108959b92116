# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-turn context assembly for agent runs.

The context is rebuilt from persisted state every time an agent runs,
never cached or diffed, so a tool call made earlier in the same turn (by
the planner, say) is visible to the next agent without any invalidation
logic. Every item carries its id and completion flag; the id lists are
the allow-list the agents are told to stick to when calling tools.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.agents.categories import detect_subject_category, detect_therapy_category
from src.infrastructure.database.models import (
    RECORD_COMPLETED,
    RECORD_IN_PROGRESS,
    Concept,
    LearningSession,
    StructuredExercise,
    Task,
    TherapyExercise,
    TherapyGoal,
    TherapySession,
)

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    """Raised when the session to assemble context for does not exist."""

    def __init__(self, session_kind: str, session_id: str):
        self.session_kind = session_kind
        self.session_id = session_id
        super().__init__(f"{session_kind} session not found: {session_id}")


def _counts(items: list[dict[str, Any]], noun: str) -> dict[str, int]:
    completed = sum(1 for item in items if item["is_completed"])
    return {
        f"total_{noun}": len(items),
        f"completed_{noun}": completed,
        f"pending_{noun}": len(items) - completed,
    }


class ContextAssembler:
    """Builds agent contexts from the domain store.

    Each call opens its own database session, so the returned snapshot
    reflects every transaction committed before the call.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def learning(self, session_id: str) -> dict[str, Any]:
        """Assemble the context for the planner and teacher agents.

        Args:
            session_id: Learning session id.

        Returns:
            Context with session fields, concepts, tasks and counts.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        async with self._session_factory() as db:
            session = await db.get(LearningSession, session_id)
            if session is None:
                raise SessionNotFoundError("learning", session_id)

            concept_rows = (
                await db.execute(
                    select(Concept)
                    .where(Concept.session_id == session_id)
                    .order_by(Concept.order_index, Concept.created_at)
                )
            ).scalars().all()
            task_rows = (
                await db.execute(
                    select(Task)
                    .where(Task.session_id == session_id)
                    .order_by(Task.created_at)
                )
            ).scalars().all()

        concepts = [
            {
                "id": c.id,
                "name": c.name,
                "description": c.description,
                "parent_id": c.parent_id,
                "is_completed": c.is_completed,
            }
            for c in concept_rows
        ]
        tasks = [
            {
                "id": t.id,
                "title": t.title,
                "description": t.description,
                "concept_id": t.concept_id,
                "is_completed": t.is_completed,
            }
            for t in task_rows
        ]

        if session.subject_category_id is not None:
            subject_category = {
                "id": session.subject_category_id,
                "name": session.subject_name,
            }
        else:
            detected = detect_subject_category(session.topic)
            subject_category = {
                "id": detected.category_id,
                "name": detected.category_name,
                "suggested": True,
            }

        return {
            "session_id": session.id,
            "topic": session.topic,
            "teaching_style": session.teaching_style,
            "response_style": session.response_style,
            "subject_category": subject_category,
            "completion_rate": round(session.completion_rate, 1),
            "status": session.status,
            "concepts": concepts,
            "tasks": tasks,
            "counts": {**_counts(concepts, "concepts"), **_counts(tasks, "tasks")},
        }

    async def therapy(self, session_id: str) -> dict[str, Any]:
        """Assemble the context for the therapy agents.

        Args:
            session_id: Therapy session id.

        Returns:
            Context with session fields, goals, exercises, A-B-C-D-E
            records and counts.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        async with self._session_factory() as db:
            session = await db.get(TherapySession, session_id)
            if session is None:
                raise SessionNotFoundError("therapy", session_id)

            goal_rows = (
                await db.execute(
                    select(TherapyGoal)
                    .where(TherapyGoal.session_id == session_id)
                    .order_by(TherapyGoal.priority, TherapyGoal.created_at)
                )
            ).scalars().all()
            exercise_rows = (
                await db.execute(
                    select(TherapyExercise)
                    .where(TherapyExercise.session_id == session_id)
                    .order_by(TherapyExercise.created_at)
                )
            ).scalars().all()
            record_rows = (
                await db.execute(
                    select(StructuredExercise)
                    .where(StructuredExercise.session_id == session_id)
                    .order_by(StructuredExercise.created_at)
                )
            ).scalars().all()

        goals = [
            {
                "id": g.id,
                "title": g.title,
                "description": g.description,
                "category": g.category,
                "priority": g.priority,
                "parent_id": g.parent_id,
                "is_completed": g.is_completed,
            }
            for g in goal_rows
        ]
        exercises = [
            {
                "id": x.id,
                "title": x.title,
                "exercise_type": x.exercise_type,
                "difficulty": x.difficulty,
                "goal_id": x.goal_id,
                "is_completed": x.is_completed,
            }
            for x in exercise_rows
        ]

        def record(r: StructuredExercise) -> dict[str, Any]:
            return {
                "id": r.id,
                "title": r.title,
                "activating_event": r.activating_event,
                "beliefs": r.beliefs,
                "consequences": r.consequences,
                "disputation": r.disputation,
                "effective_beliefs": r.effective_beliefs,
            }

        primary_category = session.primary_category or detect_therapy_category(
            session.primary_concern
        ).category

        return {
            "session_id": session.id,
            "primary_concern": session.primary_concern,
            "therapy_goal": session.therapy_goal,
            "therapy_style": session.therapy_style,
            "session_type": session.session_type,
            "primary_category": primary_category,
            "progress_level": round(session.progress_level, 1),
            "status": session.status,
            "goals": goals,
            "exercises": exercises,
            "structured_exercises": {
                "in_progress": [
                    record(r) for r in record_rows if r.completion_status == RECORD_IN_PROGRESS
                ],
                "completed": [
                    record(r) for r in record_rows if r.completion_status == RECORD_COMPLETED
                ],
            },
            "counts": {**_counts(goals, "goals"), **_counts(exercises, "exercises")},
        }
