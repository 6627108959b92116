# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for learning session tools."""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine

from src.core.tools.base import ToolContext
from src.infrastructure.database.connection import create_session_factory
from src.infrastructure.database.models import (
    Base,
    Concept,
    LearningSession,
    ProgressHistory,
    Task,
)
from src.tools.learning import (
    CreateConceptMapTool,
    CreatePracticeTasksTool,
    MarkConceptProgressTool,
    MarkTaskProgressTool,
)
from src.tools.progress import compute_completion
from tests.conftest import OTHER_USER_ID, USER_ID


async def history_rows(session_factory, session_id):
    async with session_factory() as db:
        result = await db.execute(
            select(ProgressHistory)
            .where(ProgressHistory.session_id == session_id)
            .order_by(ProgressHistory.created_at)
        )
        return list(result.scalars().all())


async def load_session(session_factory, session_id):
    async with session_factory() as db:
        return await db.get(LearningSession, session_id)


@pytest.fixture
def ctx(make_tool_context, learning_session):
    return make_tool_context(learning_session.id)


@pytest_asyncio.fixture
async def concept_ids(ctx):
    result = await CreateConceptMapTool().execute(
        {
            "concepts": [
                {"name": "Vertices", "description": "Points"},
                {"name": "Edges", "description": "Connections"},
                {"name": "Paths", "parent_index": 1},
                {"name": "Cycles"},
            ]
        },
        ctx,
    )
    assert result.success
    return result.data["concept_ids"]


class TestComputeCompletion:
    """Tests for the aggregate percentage."""

    @pytest.mark.parametrize(
        "completed,total,expected",
        [(0, 0, (0.0, "active")), (0, 4, (0.0, "active")), (1, 4, (25.0, "active")), (4, 4, (100.0, "completed"))],
    )
    def test_values(self, completed, total, expected):
        """Test percentage and status follow the counts."""
        assert compute_completion(completed, total) == expected


class TestCreateConceptMap:
    """Tests for create_concept_map."""

    @pytest.mark.asyncio
    async def test_creates_concepts_in_order(self, ctx, session_factory, learning_session, concept_ids):
        """Test concepts are created with order, parents and history."""
        async with session_factory() as db:
            result = await db.execute(
                select(Concept).where(Concept.session_id == learning_session.id).order_by(Concept.order_index)
            )
            concepts = list(result.scalars().all())

        assert [c.name for c in concepts] == ["Vertices", "Edges", "Paths", "Cycles"]
        assert [c.order_index for c in concepts] == [1, 2, 3, 4]
        assert concepts[2].parent_id == concept_ids[1]
        assert not any(c.is_completed for c in concepts)

        history = await history_rows(session_factory, learning_session.id)
        assert [h.action for h in history] == ["concept_map_created"]
        assert history[0].changes["count"] == 4

    @pytest.mark.asyncio
    async def test_stores_category(self, ctx, session_factory, learning_session):
        """Test a valid category id and subject name are stored."""
        await CreateConceptMapTool().execute(
            {"concepts": [{"name": "Vertices"}], "category_id": 9, "subject_name": "Discrete Math"},
            ctx,
        )

        session = await load_session(session_factory, learning_session.id)
        assert session.subject_category_id == 9
        assert session.subject_name == "Discrete Math"

    @pytest.mark.asyncio
    async def test_invalid_category_stored_as_none(self, ctx, session_factory, learning_session):
        """Test an out-of-range category id is not stored."""
        result = await CreateConceptMapTool().execute(
            {"concepts": [{"name": "Vertices"}], "category_id": 99},
            ctx,
        )

        assert result.success
        session = await load_session(session_factory, learning_session.id)
        assert session.subject_category_id is None

    @pytest.mark.asyncio
    async def test_rejects_empty_list(self, ctx):
        """Test an empty concept list is invalid."""
        result = await CreateConceptMapTool().execute({"concepts": []}, ctx)

        assert not result.success
        assert result.error == "concepts must be a non-empty list"

    @pytest.mark.asyncio
    async def test_foreign_session(self, make_tool_context, learning_session, session_factory):
        """Test creation for a session the user does not own fails."""
        ctx = make_tool_context(learning_session.id, user_id=OTHER_USER_ID)

        result = await CreateConceptMapTool().execute({"concepts": [{"name": "Vertices"}]}, ctx)

        assert result.error == "session_not_found"
        assert await history_rows(session_factory, learning_session.id) == []


class TestCreatePracticeTasks:
    """Tests for create_practice_tasks."""

    @pytest.mark.asyncio
    async def test_creates_tasks(self, ctx, session_factory, learning_session, concept_ids):
        """Test tasks are created and linked only to the session's own concepts."""
        result = await CreatePracticeTasksTool().execute(
            {
                "tasks": [
                    {"title": "Draw a graph", "concept_id": concept_ids[0]},
                    {"title": "Find a cycle", "concept_id": "not-a-concept"},
                    {"title": "   "},
                ]
            },
            ctx,
        )

        assert result.success
        assert len(result.data["task_ids"]) == 2
        async with session_factory() as db:
            tasks = {t.title: t for t in (await db.execute(select(Task))).scalars().all()}
        assert tasks["Draw a graph"].concept_id == concept_ids[0]
        assert tasks["Find a cycle"].concept_id is None

        history = await history_rows(session_factory, learning_session.id)
        assert history[-1].action == "tasks_created"


class TestMarkConceptProgress:
    """Tests for mark_concept_progress."""

    @pytest.mark.asyncio
    async def test_completion_rate_recomputed(self, ctx, session_factory, learning_session, concept_ids):
        """Test marking one of four concepts gives 25 percent."""
        result = await MarkConceptProgressTool().execute(
            {"concept_id": concept_ids[0], "is_completed": True},
            ctx,
        )

        assert result.success
        assert result.data["completion_rate"] == 25.0
        assert result.data["message"].startswith('Excellent! I\'ve marked "Vertices" as completed')
        assert "(25% overall progress)" in result.data["message"]

        session = await load_session(session_factory, learning_session.id)
        assert session.completion_rate == 25.0
        assert session.status == "active"

        history = await history_rows(session_factory, learning_session.id)
        assert history[-1].action == "completed"
        assert history[-1].item_id == concept_ids[0]

    @pytest.mark.asyncio
    async def test_all_completed_marks_session_completed(
        self, ctx, session_factory, learning_session, concept_ids
    ):
        """Test completing every concept completes the session."""
        tool = MarkConceptProgressTool()
        for concept_id in concept_ids:
            await tool.execute({"concept_id": concept_id, "is_completed": True}, ctx)

        session = await load_session(session_factory, learning_session.id)
        assert session.completion_rate == 100.0
        assert session.status == "completed"

    @pytest.mark.asyncio
    async def test_aggregate_independent_of_order(self, ctx, session_factory, learning_session, concept_ids):
        """Test repeated and reverted toggles leave a consistent aggregate."""
        tool = MarkConceptProgressTool()
        await tool.execute({"concept_id": concept_ids[0], "is_completed": True}, ctx)
        await tool.execute({"concept_id": concept_ids[0], "is_completed": True}, ctx)
        await tool.execute({"concept_id": concept_ids[1], "is_completed": "true"}, ctx)
        await tool.execute({"concept_id": concept_ids[0], "is_completed": False}, ctx)

        session = await load_session(session_factory, learning_session.id)
        assert session.completion_rate == 25.0

        async with session_factory() as db:
            concept = await db.get(Concept, concept_ids[0])
        assert concept.completed_at is None

    @pytest.mark.asyncio
    async def test_unknown_concept(self, ctx, session_factory, learning_session):
        """Test a missing concept is reported gracefully without history."""
        result = await MarkConceptProgressTool().execute(
            {"concept_id": "missing", "is_completed": True},
            ctx,
        )

        assert not result.success
        assert result.error == "not_found"
        assert result.to_llm_message() == (
            "I couldn't find that specific concept. Your progress tracking is still "
            "working correctly through the sidebar."
        )
        assert await history_rows(session_factory, learning_session.id) == []

    @pytest.mark.asyncio
    async def test_concept_of_another_session(
        self, make_tool_context, session_factory, learning_session, concept_ids
    ):
        """Test an id from another session is treated as not found."""
        async with session_factory() as db:
            async with db.begin():
                db.add(
                    LearningSession(
                        id="learning-2",
                        user_id=OTHER_USER_ID,
                        thread_id="learning_learning-2",
                        topic="Chemistry",
                    )
                )
        other_ctx = make_tool_context("learning-2", user_id=OTHER_USER_ID)

        result = await MarkConceptProgressTool().execute(
            {"concept_id": concept_ids[0], "is_completed": True},
            other_ctx,
        )

        assert result.error == "not_found"
        async with session_factory() as db:
            concept = await db.get(Concept, concept_ids[0])
        assert not concept.is_completed

    @pytest.mark.asyncio
    async def test_therapy_context_rejected(self, make_tool_context, learning_session, concept_ids):
        """Test a learning concept cannot be marked from a therapy turn."""
        ctx = make_tool_context(learning_session.id, session_kind="therapy")

        result = await MarkConceptProgressTool().execute(
            {"concept_id": concept_ids[0], "is_completed": True},
            ctx,
        )

        assert result.error == "not_found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{"is_completed": True}, {"concept_id": "x", "is_completed": "maybe"}])
    async def test_invalid_params(self, ctx, params):
        """Test malformed arguments are rejected before any lookup."""
        result = await MarkConceptProgressTool().execute(params, ctx)

        assert not result.success
        assert result.error in ("concept_id is required", "is_completed must be a boolean")


class TestMarkTaskProgress:
    """Tests for mark_task_progress."""

    @pytest.mark.asyncio
    async def test_task_does_not_change_completion_rate(
        self, ctx, session_factory, learning_session, concept_ids
    ):
        """Test the completion rate only counts concepts."""
        created = await CreatePracticeTasksTool().execute({"tasks": [{"title": "Draw a graph"}]}, ctx)
        task_id = created.data["task_ids"][0]

        result = await MarkTaskProgressTool().execute({"task_id": task_id, "is_completed": True}, ctx)

        assert result.success
        assert 'marked the task "Draw a graph" as completed' in result.data["message"]
        session = await load_session(session_factory, learning_session.id)
        assert session.completion_rate == 0.0

    @pytest.mark.asyncio
    async def test_unknown_task(self, ctx):
        """Test a missing task is reported gracefully."""
        result = await MarkTaskProgressTool().execute({"task_id": "missing", "is_completed": True}, ctx)

        assert result.error == "not_found"
        assert "specific task" in result.data["message"]


@pytest_asyncio.fixture
async def pooled_session_factory(tmp_path):
    """Session factory on a file database so every session has its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'progress.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield create_session_factory(engine)
    await engine.dispose()


class TestConcurrentProgress:
    """Tests for concurrent completion toggles on one session."""

    @pytest_asyncio.fixture
    async def pooled_ctx(self, pooled_session_factory):
        async with pooled_session_factory() as db:
            async with db.begin():
                db.add(
                    LearningSession(
                        id="learning-1",
                        user_id=USER_ID,
                        thread_id="learning_learning-1",
                        topic="Graph Theory",
                    )
                )
        return ToolContext(
            user_id=USER_ID,
            session_id="learning-1",
            session_kind="learning",
            session_factory=pooled_session_factory,
        )

    @pytest_asyncio.fixture
    async def pooled_concept_ids(self, pooled_ctx):
        result = await CreateConceptMapTool().execute(
            {"concepts": [{"name": name} for name in ("Vertices", "Edges", "Paths", "Cycles")]},
            pooled_ctx,
        )
        assert result.success
        return result.data["concept_ids"]

    @pytest.mark.asyncio
    async def test_concurrent_completions_keep_aggregate(
        self, pooled_ctx, pooled_session_factory, pooled_concept_ids
    ):
        """Test gathered completions on different concepts all count."""
        tool = MarkConceptProgressTool()

        results = await asyncio.gather(
            *(
                tool.execute({"concept_id": concept_id, "is_completed": True}, pooled_ctx)
                for concept_id in pooled_concept_ids[:3]
            )
        )

        assert all(result.success for result in results)
        session = await load_session(pooled_session_factory, "learning-1")
        assert session.completion_rate == 100.0 * 3 / 4
        assert session.status == "active"
        rows = await history_rows(pooled_session_factory, "learning-1")
        assert sum(1 for row in rows if row.action == "completed") == 3

    @pytest.mark.asyncio
    async def test_concurrent_completion_of_every_concept(
        self, pooled_ctx, pooled_session_factory, pooled_concept_ids
    ):
        """Test the session completes when the last toggles race each other."""
        tool = MarkConceptProgressTool()

        await asyncio.gather(
            *(
                tool.execute({"concept_id": concept_id, "is_completed": True}, pooled_ctx)
                for concept_id in pooled_concept_ids
            )
        )

        session = await load_session(pooled_session_factory, "learning-1")
        assert session.completion_rate == 100.0
        assert session.status == "completed"
