# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Therapy conversation router using LangGraph.

Workflow Structure:
    initialize (detect restructuring signal, decide phase)
        ↓
    [conditional]
        assessment (no goals or plan request) → assess → counsel
        therapy (exit signal) → leave_restructuring → counsel
        therapy → counsel
        cognitive_restructuring → restructure
                                    ↓
                   [conditional: record completed → counsel, else → finalize]
        ↓
    finalize (persist phase and updated_at)

The psychotherapist answers the user's own message, except right after an
assessment, an exit from restructuring, or a completed A-B-C-D-E record,
where it receives a fixed instruction describing what just happened.
A psychotherapist reply that refers the user to an A-B-C-D-E exercise
moves the session into cognitive restructuring for the next turn.
"""

import logging
from typing import Any, Literal

from langgraph.graph import END, StateGraph
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.agents.categories import detect_therapy_category
from src.core.agents.fallbacks import default_exercises, default_goals
from src.core.agents.runtime import AgentRunResult, AgentRuntime
from src.core.orchestration.context_assembler import ContextAssembler, SessionNotFoundError
from src.core.orchestration.restructuring import (
    COMPLETION_INSTRUCTION,
    EXIT_INSTRUCTION,
    RestructuringSignal,
    RestructuringSignalClassifier,
    refers_to_restructuring,
)
from src.core.orchestration.states.learning import AgentPart
from src.core.orchestration.states.therapy import (
    PHASE_ASSESSMENT,
    PHASE_COGNITIVE_RESTRUCTURING,
    PHASE_THERAPY,
    TherapyPhase,
    TherapyTurnState,
    decide_therapy_phase,
)
from src.core.tools.base import ToolContext
from src.infrastructure.database.models import RECORD_COMPLETED, TherapyGoal, TherapySession
from src.tools.therapy import (
    CreateTherapyExercisesTool,
    CreateTherapyGoalsTool,
    abandon_in_progress_exercises,
    find_in_progress_exercise,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

THERAPY_START_MESSAGE = (
    "I've reviewed your assessment and therapy plan. Let's begin by exploring "
    "your primary concern and working together on your first therapeutic goal."
)


async def count_goals(db: AsyncSession, session_id: str) -> int:
    """Count the goals of a therapy session."""
    result = await db.execute(
        select(func.count()).select_from(TherapyGoal).where(TherapyGoal.session_id == session_id)
    )
    return result.scalar_one()


def _completed_record(result: AgentRunResult) -> bool:
    return any(
        update.get("structured_exercise_status") == RECORD_COMPLETED
        for update in result.state_updates
    )


class TherapyWorkflow:
    """LangGraph router for therapy sessions.

    Attributes:
        assessment: Runtime of the CBT assessment agent.
        psychotherapist: Runtime of the CBT psychotherapist agent.
        restructuring: Runtime of the cognitive restructuring agent.
    """

    def __init__(
        self,
        assessment: AgentRuntime,
        psychotherapist: AgentRuntime,
        restructuring: AgentRuntime,
        session_factory: async_sessionmaker[AsyncSession],
        assembler: ContextAssembler | None = None,
        classifier: RestructuringSignalClassifier | None = None,
    ):
        """Initialize the therapy workflow.

        Args:
            assessment: Runtime of the CBT assessment agent.
            psychotherapist: Runtime of the CBT psychotherapist agent.
            restructuring: Runtime of the cognitive restructuring agent.
            session_factory: Factory for database sessions.
            assembler: Context assembler. Built from session_factory if None.
            classifier: Restructuring signal classifier. Keyword based if None.
        """
        self.assessment = assessment
        self.psychotherapist = psychotherapist
        self.restructuring = restructuring
        self._session_factory = session_factory
        self._assembler = assembler or ContextAssembler(session_factory)
        self._classifier = classifier or RestructuringSignalClassifier()
        self._goals_tool = CreateTherapyGoalsTool()
        self._exercises_tool = CreateTherapyExercisesTool()

        self._compiled = self._build_graph().compile()

    def _build_graph(self) -> StateGraph:
        """Build the LangGraph state graph.

        Returns:
            StateGraph configured for one therapy turn.
        """
        graph = StateGraph(TherapyTurnState)

        graph.add_node("initialize", self._initialize)
        graph.add_node("assess", self._assess)
        graph.add_node("leave_restructuring", self._leave_restructuring)
        graph.add_node("restructure", self._restructure)
        graph.add_node("counsel", self._counsel)
        graph.add_node("finalize", self._finalize)

        graph.set_entry_point("initialize")

        graph.add_conditional_edges(
            "initialize",
            self._route_phase,
            {
                "assess": "assess",
                "leave_restructuring": "leave_restructuring",
                "restructure": "restructure",
                "counsel": "counsel",
            },
        )
        graph.add_edge("assess", "counsel")
        graph.add_edge("leave_restructuring", "counsel")
        graph.add_conditional_edges(
            "restructure",
            self._after_restructure,
            {
                "counsel": "counsel",
                "finalize": "finalize",
            },
        )
        graph.add_edge("counsel", "finalize")
        graph.add_edge("finalize", END)

        return graph

    async def run(self, initial_state: TherapyTurnState) -> TherapyTurnState:
        """Run one therapy turn.

        Args:
            initial_state: State from create_initial_therapy_state().

        Returns:
            Final turn state with the agent parts in order.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        return await self._compiled.ainvoke(initial_state)

    def _tool_context(self, state: TherapyTurnState) -> ToolContext:
        return ToolContext(
            user_id=state["user_id"],
            session_id=state["session_id"],
            session_kind="therapy",
            session_factory=self._session_factory,
        )

    def _append(self, state: TherapyTurnState, result: AgentRunResult) -> list[AgentPart]:
        return [*state.get("parts", []), AgentPart(tag=result.agent_tag, text=result.text)]

    # =========================================================================
    # Node Implementations
    # =========================================================================

    async def _initialize(self, state: TherapyTurnState) -> dict:
        """Detect the restructuring signal and decide the phase."""
        async with self._session_factory() as db:
            session = await db.get(TherapySession, state["session_id"])
            if session is None:
                raise SessionNotFoundError("therapy", state["session_id"])
            stored_phase = session.phase
            goal_count = await count_goals(db, session.id)
            in_progress = await find_in_progress_exercise(db, session.id)

        signal = self._classifier.classify(
            state["user_message"],
            has_in_progress=in_progress is not None,
        )
        # Leaving only means something when there is a flow to leave
        if signal is RestructuringSignal.EXIT and (
            stored_phase != PHASE_COGNITIVE_RESTRUCTURING and in_progress is None
        ):
            signal = RestructuringSignal.NONE

        phase = decide_therapy_phase(stored_phase, goal_count, signal)
        logger.info(
            "Therapy turn started: session=%s, stored_phase=%s, phase=%s, signal=%s",
            state["session_id"],
            stored_phase,
            phase,
            signal.value,
        )
        return {"stored_phase": stored_phase, "signal": signal, "phase": phase}

    def _route_phase(
        self, state: TherapyTurnState
    ) -> Literal["assess", "leave_restructuring", "restructure", "counsel"]:
        phase = state["phase"]
        if phase == PHASE_ASSESSMENT:
            return "assess"
        if phase == PHASE_COGNITIVE_RESTRUCTURING:
            return "restructure"
        if state.get("signal") is RestructuringSignal.EXIT:
            return "leave_restructuring"
        return "counsel"

    async def _assess(self, state: TherapyTurnState) -> dict:
        """Run the assessment agent and make sure goals exist afterwards."""
        context = await self._assembler.therapy(state["session_id"])
        result = await self.assessment.run(
            state["thread_id"],
            context,
            state["user_message"],
            self._tool_context(state),
        )

        refreshed = await self._assembler.therapy(state["session_id"])
        await self._seed_default_plan(state, refreshed)

        return {"parts": self._append(state, result)}

    async def _seed_default_plan(self, state: TherapyTurnState, context: dict[str, Any]) -> None:
        """Create the default goals and exercises the assessment failed to create."""
        concern = context["primary_concern"]
        tool_context = self._tool_context(state)

        if context["counts"]["total_goals"] == 0:
            logger.warning(
                "Assessment created no goals for session %s, seeding default plan",
                state["session_id"],
            )
            await self._goals_tool.execute(
                {
                    "goals": default_goals(concern),
                    "primary_category": detect_therapy_category(concern).category,
                },
                tool_context,
            )

        if context["counts"]["total_exercises"] == 0:
            await self._exercises_tool.execute(
                {"exercises": default_exercises(concern)},
                tool_context,
            )

    async def _leave_restructuring(self, state: TherapyTurnState) -> dict:
        """Abandon unfinished A-B-C-D-E records on an explicit exit."""
        async with self._session_factory() as db:
            async with db.begin():
                abandoned = await abandon_in_progress_exercises(db, state["session_id"])

        logger.info(
            "Left cognitive restructuring: session=%s, abandoned=%d",
            state["session_id"],
            abandoned,
        )
        return {"abandoned": abandoned}

    async def _restructure(self, state: TherapyTurnState) -> dict:
        """Run the cognitive restructuring agent."""
        context = await self._assembler.therapy(state["session_id"])
        result = await self.restructuring.run(
            state["thread_id"],
            context,
            state["user_message"],
            self._tool_context(state),
        )
        return {
            "context": context,
            "parts": self._append(state, result),
            "record_completed": _completed_record(result),
        }

    def _after_restructure(self, state: TherapyTurnState) -> Literal["counsel", "finalize"]:
        return "counsel" if state.get("record_completed") else "finalize"

    async def _counsel(self, state: TherapyTurnState) -> dict:
        """Run the psychotherapist on freshly assembled context."""
        if state["phase"] == PHASE_ASSESSMENT:
            message = THERAPY_START_MESSAGE
        elif state.get("signal") is RestructuringSignal.EXIT:
            message = EXIT_INSTRUCTION
        elif state.get("record_completed"):
            message = COMPLETION_INSTRUCTION
        else:
            message = state["user_message"]

        context = await self._assembler.therapy(state["session_id"])
        result = await self.psychotherapist.run(
            state["thread_id"],
            context,
            message,
            self._tool_context(state),
        )

        referred = message == state["user_message"] and refers_to_restructuring(result.text)
        if referred:
            logger.info(
                "Psychotherapist referred session %s to an ABCDE exercise",
                state["session_id"],
            )

        return {
            "context": context,
            "parts": self._append(state, result),
            "referred": referred,
        }

    def _final_phase(self, state: TherapyTurnState, goal_count: int) -> TherapyPhase:
        if goal_count == 0:
            return PHASE_ASSESSMENT
        if state["phase"] == PHASE_COGNITIVE_RESTRUCTURING and not state.get("record_completed"):
            return PHASE_COGNITIVE_RESTRUCTURING
        if state.get("referred"):
            return PHASE_COGNITIVE_RESTRUCTURING
        return PHASE_THERAPY

    async def _finalize(self, state: TherapyTurnState) -> dict:
        """Persist the phase marker and touch updated_at."""
        async with self._session_factory() as db:
            async with db.begin():
                session = await db.get(TherapySession, state["session_id"])
                if session is None:
                    raise SessionNotFoundError("therapy", state["session_id"])
                final_phase = self._final_phase(state, await count_goals(db, session.id))
                session.phase = final_phase
                session.updated_at = utc_now()

        logger.info(
            "Therapy turn finished: session=%s, phase=%s, parts=%d",
            state["session_id"],
            final_phase,
            len(state.get("parts", [])),
        )
        return {"final_phase": final_phase}
