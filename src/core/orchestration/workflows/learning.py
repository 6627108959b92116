# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning conversation router using LangGraph.

Workflow Structure:
    initialize (decide phase from the concept count)
        ↓
    [conditional: needs_plan → plan, teaching → teach]
        ↓
    plan (planner agent; seeds the default plan if it created nothing)
        ↓
    teach (teacher agent on freshly assembled context)
        ↓
    finalize (persist phase and updated_at)

The graph runs once per user turn. Router state between turns lives on
the LearningSession row, not in a checkpoint; each agent keeps its own
dialogue history in the checkpoint store.
"""

import logging
from typing import Any, Literal

from langgraph.graph import END, StateGraph
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.agents.categories import detect_subject_category
from src.core.agents.fallbacks import default_concepts, default_tasks
from src.core.agents.runtime import AgentRuntime
from src.core.orchestration.context_assembler import ContextAssembler, SessionNotFoundError
from src.core.orchestration.states.learning import (
    PHASE_NEEDS_PLAN,
    AgentPart,
    LearningTurnState,
    decide_learning_phase,
)
from src.core.tools.base import ToolContext
from src.infrastructure.database.models import Concept, LearningSession
from src.tools.learning import CreateConceptMapTool, CreatePracticeTasksTool
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

TEACHER_FOLLOW_UP_MESSAGE = (
    "Okay, I've reviewed the plan. Please start by explaining the first concept."
)


async def count_concepts(db: AsyncSession, session_id: str) -> int:
    """Count the concepts of a learning session."""
    result = await db.execute(
        select(func.count()).select_from(Concept).where(Concept.session_id == session_id)
    )
    return result.scalar_one()


class LearningWorkflow:
    """LangGraph router for learning sessions.

    Attributes:
        planner: Runtime of the learning plan agent.
        teacher: Runtime of the teaching agent.

    Example:
        >>> workflow = LearningWorkflow(planner, teacher, session_factory)
        >>> state = create_initial_learning_state(session_id, user_id, thread_id, "Hi")
        >>> result = await workflow.run(state)
        >>> result["parts"]
    """

    def __init__(
        self,
        planner: AgentRuntime,
        teacher: AgentRuntime,
        session_factory: async_sessionmaker[AsyncSession],
        assembler: ContextAssembler | None = None,
    ):
        """Initialize the learning workflow.

        Args:
            planner: Runtime of the learning plan agent.
            teacher: Runtime of the teaching agent.
            session_factory: Factory for database sessions.
            assembler: Context assembler. Built from session_factory if None.
        """
        self.planner = planner
        self.teacher = teacher
        self._session_factory = session_factory
        self._assembler = assembler or ContextAssembler(session_factory)
        self._concept_map_tool = CreateConceptMapTool()
        self._practice_tasks_tool = CreatePracticeTasksTool()

        self._compiled = self._build_graph().compile()

    def _build_graph(self) -> StateGraph:
        """Build the LangGraph state graph.

        Returns:
            StateGraph configured for one learning turn.
        """
        graph = StateGraph(LearningTurnState)

        graph.add_node("initialize", self._initialize)
        graph.add_node("plan", self._plan)
        graph.add_node("teach", self._teach)
        graph.add_node("finalize", self._finalize)

        graph.set_entry_point("initialize")

        graph.add_conditional_edges(
            "initialize",
            self._route_phase,
            {
                "plan": "plan",
                "teach": "teach",
            },
        )
        graph.add_edge("plan", "teach")
        graph.add_edge("teach", "finalize")
        graph.add_edge("finalize", END)

        return graph

    async def run(self, initial_state: LearningTurnState) -> LearningTurnState:
        """Run one learning turn.

        Args:
            initial_state: State from create_initial_learning_state().

        Returns:
            Final turn state with the agent parts in order.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        return await self._compiled.ainvoke(initial_state)

    def _tool_context(self, state: LearningTurnState) -> ToolContext:
        return ToolContext(
            user_id=state["user_id"],
            session_id=state["session_id"],
            session_kind="learning",
            session_factory=self._session_factory,
        )

    # =========================================================================
    # Node Implementations
    # =========================================================================

    async def _initialize(self, state: LearningTurnState) -> dict:
        """Decide the phase this turn starts in."""
        async with self._session_factory() as db:
            if await db.get(LearningSession, state["session_id"]) is None:
                raise SessionNotFoundError("learning", state["session_id"])
            concept_count = await count_concepts(db, state["session_id"])

        phase = decide_learning_phase(concept_count)
        logger.info(
            "Learning turn started: session=%s, phase=%s, concepts=%d",
            state["session_id"],
            phase,
            concept_count,
        )
        return {"phase": phase}

    def _route_phase(self, state: LearningTurnState) -> Literal["plan", "teach"]:
        return "plan" if state["phase"] == PHASE_NEEDS_PLAN else "teach"

    async def _plan(self, state: LearningTurnState) -> dict:
        """Run the planner and make sure a plan exists afterwards."""
        context = await self._assembler.learning(state["session_id"])
        result = await self.planner.run(
            state["thread_id"],
            context,
            state["user_message"],
            self._tool_context(state),
        )

        refreshed = await self._assembler.learning(state["session_id"])
        await self._seed_default_plan(state, refreshed)

        return {
            "parts": [*state.get("parts", []), AgentPart(tag=result.agent_tag, text=result.text)],
            "planned": True,
        }

    async def _seed_default_plan(self, state: LearningTurnState, context: dict[str, Any]) -> None:
        """Create the default concepts and tasks the planner failed to create.

        Goes through the creation tools so ownership checks, history rows
        and the aggregate recompute are the same as for model calls.
        """
        topic = context["topic"]
        response_style = context["response_style"]
        tool_context = self._tool_context(state)

        if context["counts"]["total_concepts"] == 0:
            category = detect_subject_category(topic)
            logger.warning(
                "Planner created no concepts for session %s, seeding default plan",
                state["session_id"],
            )
            await self._concept_map_tool.execute(
                {
                    "concepts": default_concepts(topic, response_style),
                    "category_id": category.category_id,
                    "subject_name": category.subject_name,
                },
                tool_context,
            )

        if context["counts"]["total_tasks"] == 0:
            await self._practice_tasks_tool.execute(
                {"tasks": default_tasks(topic, response_style)},
                tool_context,
            )

    async def _teach(self, state: LearningTurnState) -> dict:
        """Run the teacher on freshly assembled context."""
        context = await self._assembler.learning(state["session_id"])
        message = TEACHER_FOLLOW_UP_MESSAGE if state.get("planned") else state["user_message"]

        result = await self.teacher.run(
            state["thread_id"],
            context,
            message,
            self._tool_context(state),
        )
        return {
            "context": context,
            "parts": [*state.get("parts", []), AgentPart(tag=result.agent_tag, text=result.text)],
        }

    async def _finalize(self, state: LearningTurnState) -> dict:
        """Persist the phase marker and touch updated_at."""
        async with self._session_factory() as db:
            async with db.begin():
                session = await db.get(LearningSession, state["session_id"])
                if session is None:
                    raise SessionNotFoundError("learning", state["session_id"])
                final_phase = decide_learning_phase(await count_concepts(db, session.id))
                session.phase = final_phase
                session.updated_at = utc_now()

        logger.info(
            "Learning turn finished: session=%s, phase=%s, parts=%d",
            state["session_id"],
            final_phase,
            len(state.get("parts", [])),
        )
        return {"final_phase": final_phase}
