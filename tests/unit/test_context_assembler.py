# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the agent context assembler."""

import pytest

from src.core.orchestration.context_assembler import ContextAssembler, SessionNotFoundError
from src.infrastructure.database.models import (
    RECORD_ABANDONED,
    RECORD_COMPLETED,
    Concept,
    StructuredExercise,
    Task,
    TherapyGoal,
)
from tests.conftest import USER_ID


class TestLearningContext:
    """Tests for ContextAssembler.learning."""

    @pytest.mark.asyncio
    async def test_empty_session(self, session_factory, learning_session):
        """Test the context of a session without a plan."""
        context = await ContextAssembler(session_factory).learning(learning_session.id)

        assert context["topic"] == "Graph Theory"
        assert context["response_style"] == "concise"
        assert context["concepts"] == []
        assert context["counts"]["total_concepts"] == 0
        assert context["subject_category"] == {"id": 50, "name": "Other", "suggested": True}

    @pytest.mark.asyncio
    async def test_concepts_in_plan_order_with_counts(self, session_factory, learning_session):
        """Test that concepts follow order_index and counts are split."""
        async with session_factory() as db:
            async with db.begin():
                db.add(Concept(session_id=learning_session.id, name="Paths", order_index=2))
                db.add(
                    Concept(
                        session_id=learning_session.id,
                        name="Vertices",
                        order_index=1,
                        is_completed=True,
                    )
                )
                db.add(Task(session_id=learning_session.id, title="Draw a graph"))

        context = await ContextAssembler(session_factory).learning(learning_session.id)

        assert [c["name"] for c in context["concepts"]] == ["Vertices", "Paths"]
        assert context["counts"] == {
            "total_concepts": 2,
            "completed_concepts": 1,
            "pending_concepts": 1,
            "total_tasks": 1,
            "completed_tasks": 0,
            "pending_tasks": 1,
        }

    @pytest.mark.asyncio
    async def test_stored_category_wins(self, session_factory, learning_session):
        """Test that a stored subject category is not re-detected."""
        async with session_factory() as db:
            async with db.begin():
                session = await db.get(type(learning_session), learning_session.id)
                session.subject_category_id = 9
                session.subject_name = "Computer Science"

        context = await ContextAssembler(session_factory).learning(learning_session.id)

        assert context["subject_category"] == {"id": 9, "name": "Computer Science"}

    @pytest.mark.asyncio
    async def test_missing_session(self, session_factory):
        """Test that an unknown session raises SessionNotFoundError."""
        with pytest.raises(SessionNotFoundError, match="learning session not found"):
            await ContextAssembler(session_factory).learning("missing")


class TestTherapyContext:
    """Tests for ContextAssembler.therapy."""

    @pytest.mark.asyncio
    async def test_goals_by_priority(self, session_factory, therapy_session):
        """Test that goals are ordered highest priority first."""
        async with session_factory() as db:
            async with db.begin():
                db.add(TherapyGoal(session_id=therapy_session.id, title="Sleep", priority=3))
                db.add(TherapyGoal(session_id=therapy_session.id, title="Boundaries", priority=1))

        context = await ContextAssembler(session_factory).therapy(therapy_session.id)

        assert [g["title"] for g in context["goals"]] == ["Boundaries", "Sleep"]
        assert context["primary_category"] == "stress"
        assert context["counts"]["pending_goals"] == 2

    @pytest.mark.asyncio
    async def test_records_split_by_status(self, session_factory, therapy_session):
        """Test that abandoned records are left out of the context."""
        async with session_factory() as db:
            async with db.begin():
                db.add(StructuredExercise(session_id=therapy_session.id, user_id=USER_ID, title="Open"))
                db.add(
                    StructuredExercise(
                        session_id=therapy_session.id,
                        user_id=USER_ID,
                        title="Done",
                        completion_status=RECORD_COMPLETED,
                    )
                )
                db.add(
                    StructuredExercise(
                        session_id=therapy_session.id,
                        user_id=USER_ID,
                        title="Dropped",
                        completion_status=RECORD_ABANDONED,
                    )
                )

        context = await ContextAssembler(session_factory).therapy(therapy_session.id)

        records = context["structured_exercises"]
        assert [r["title"] for r in records["in_progress"]] == ["Open"]
        assert [r["title"] for r in records["completed"]] == ["Done"]

    @pytest.mark.asyncio
    async def test_missing_session(self, session_factory):
        """Test that an unknown session raises SessionNotFoundError."""
        with pytest.raises(SessionNotFoundError):
            await ContextAssembler(session_factory).therapy("missing")
