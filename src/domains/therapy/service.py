# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Therapy session service.

This service manages CBT-style therapy sessions:
- Start a therapy session for a primary concern
- Answer messages through the therapy router (assessment,
  psychotherapist, cognitive restructuring)
- Side-panel reads: goals, exercises, A-B-C-D-E records, transcript,
  progress history
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.agents.categories import detect_therapy_category
from src.core.agents.factory import get_agent_factory
from src.core.agents.variants import AgentVariant
from src.core.config.settings import Settings, get_settings
from src.core.orchestration.checkpointer import create_session_thread_id
from src.core.orchestration.states.learning import AgentPart
from src.core.orchestration.states.therapy import create_initial_therapy_state
from src.core.orchestration.workflows.therapy import TherapyWorkflow
from src.domains.conversation.schemas import (
    ExerciseInfo,
    GoalInfo,
    StructuredExerciseInfo,
    TherapySessionInfo,
)
from src.domains.conversation.service import ConversationService
from src.infrastructure.database import get_session_factory
from src.infrastructure.database.models import (
    StructuredExercise,
    TherapyExercise,
    TherapyGoal,
    TherapySession,
    new_id,
)
from src.infrastructure.rate_limit import FixedWindowRateLimiter, create_rate_limiter

logger = logging.getLogger(__name__)

THERAPY_LAST_RESORT_REPLY = (
    "I apologize, but I encountered an error. Please try refreshing the page "
    "and starting a new session. If you're in crisis, please reach out to "
    "emergency services or a mental health professional immediately."
)


class TherapyService(ConversationService):
    """Service for therapy sessions.

    Attributes:
        workflow: TherapyWorkflow instance.
    """

    session_kind = "therapy"
    session_model = TherapySession
    last_resort_reply = THERAPY_LAST_RESORT_REPLY

    def __init__(
        self,
        workflow: TherapyWorkflow,
        session_factory: async_sessionmaker[AsyncSession],
        rate_limiter: FixedWindowRateLimiter,
        max_message_length: int = 1000,
    ) -> None:
        super().__init__(session_factory, rate_limiter, max_message_length)
        self.workflow = workflow

    async def start_session(
        self,
        user_id: str,
        primary_concern: str,
        therapy_goal: str = "",
        therapy_style: str = "supportive",
        session_type: str = "assessment",
    ) -> TherapySessionInfo:
        """Create a therapy session.

        The session starts with no goals; the first message runs the
        assessment agent.

        Args:
            user_id: Owning user.
            primary_concern: What the user wants support with.
            therapy_goal: What the user hopes to achieve.
            therapy_style: Therapeutic approach, e.g. "supportive".
            session_type: Session type label.

        Returns:
            The created session.

        Raises:
            ValueError: If the primary concern is blank.
        """
        primary_concern = (primary_concern or "").strip()
        if not primary_concern:
            raise ValueError("primary_concern must not be blank")

        session_id = new_id()
        session = TherapySession(
            id=session_id,
            user_id=user_id,
            thread_id=create_session_thread_id("therapy", session_id),
            primary_concern=primary_concern,
            therapy_goal=therapy_goal.strip(),
            therapy_style=therapy_style,
            session_type=session_type,
            primary_category=detect_therapy_category(primary_concern).category,
        )
        async with self._session_factory() as db:
            async with db.begin():
                db.add(session)

        logger.info(
            "Therapy session started: id=%s, user=%s, category=%s",
            session_id,
            user_id,
            session.primary_category,
        )
        return TherapySessionInfo.model_validate(session)

    async def get_session(self, session_id: str, user_id: str) -> TherapySessionInfo:
        """Get session details.

        Raises:
            SessionNotFoundError: If the session does not exist or is not the user's.
        """
        return TherapySessionInfo.model_validate(await self._require_session(session_id, user_id))

    async def _run_turn(
        self,
        session_id: str,
        user_id: str,
        thread_id: str,
        message: str,
    ) -> list[AgentPart]:
        state = create_initial_therapy_state(session_id, user_id, thread_id, message)
        result = await self.workflow.run(state)
        return result["parts"]

    async def list_goals(self, session_id: str, user_id: str) -> list[GoalInfo]:
        """List the session's goals, highest priority first."""
        await self._require_session(session_id, user_id)
        async with self._session_factory() as db:
            result = await db.execute(
                select(TherapyGoal)
                .where(TherapyGoal.session_id == session_id)
                .order_by(TherapyGoal.priority, TherapyGoal.created_at)
            )
            return [GoalInfo.model_validate(row) for row in result.scalars().all()]

    async def list_exercises(self, session_id: str, user_id: str) -> list[ExerciseInfo]:
        """List the session's exercises."""
        await self._require_session(session_id, user_id)
        async with self._session_factory() as db:
            result = await db.execute(
                select(TherapyExercise)
                .where(TherapyExercise.session_id == session_id)
                .order_by(TherapyExercise.created_at)
            )
            return [ExerciseInfo.model_validate(row) for row in result.scalars().all()]

    async def list_structured_exercises(
        self,
        session_id: str,
        user_id: str,
    ) -> list[StructuredExerciseInfo]:
        """List the session's A-B-C-D-E records, abandoned ones included."""
        await self._require_session(session_id, user_id)
        async with self._session_factory() as db:
            result = await db.execute(
                select(StructuredExercise)
                .where(StructuredExercise.session_id == session_id)
                .order_by(StructuredExercise.created_at)
            )
            return [StructuredExerciseInfo.model_validate(row) for row in result.scalars().all()]


def create_therapy_service(
    settings: Settings | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
) -> TherapyService:
    """Build a TherapyService from the process-wide singletons.

    Requires init_database() to have run.
    """
    settings = settings or get_settings()
    factory = get_agent_factory()
    session_factory = get_session_factory()

    workflow = TherapyWorkflow(
        assessment=factory.get(AgentVariant.ASSESSMENT),
        psychotherapist=factory.get(AgentVariant.PSYCHOTHERAPIST),
        restructuring=factory.get(AgentVariant.COGNITIVE_RESTRUCTURING),
        session_factory=session_factory,
    )
    return TherapyService(
        workflow=workflow,
        session_factory=session_factory,
        rate_limiter=rate_limiter or create_rate_limiter(settings),
        max_message_length=settings.orchestration.max_message_length,
    )
