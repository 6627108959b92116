# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning session service.

This service manages learning sessions:
- Start a learning session for a topic
- Answer messages through the learning router (planner, then teacher)
- Side-panel reads: concepts, tasks, transcript, progress history

Example:
    >>> service = create_learning_service()
    >>> session = await service.start_session(user_id, "Graph Theory")
    >>> reply = await service.respond(session.id, user_id, "I want to learn graph theory")
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.agents.factory import get_agent_factory
from src.core.agents.variants import AgentVariant
from src.core.config.settings import Settings, get_settings
from src.core.orchestration.checkpointer import create_session_thread_id
from src.core.orchestration.states.learning import (
    AgentPart,
    create_initial_learning_state,
)
from src.core.orchestration.workflows.learning import LearningWorkflow
from src.domains.conversation.schemas import ConceptInfo, LearningSessionInfo, TaskInfo
from src.domains.conversation.service import ConversationService
from src.infrastructure.database import get_session_factory
from src.infrastructure.database.models import Concept, LearningSession, Task, new_id
from src.infrastructure.rate_limit import FixedWindowRateLimiter, create_rate_limiter

logger = logging.getLogger(__name__)

LEARNING_LAST_RESORT_REPLY = (
    "I apologize, but I encountered an error. Please try refreshing the page "
    "and starting a new learning session."
)


class LearningService(ConversationService):
    """Service for learning sessions.

    Attributes:
        workflow: LearningWorkflow instance.
    """

    session_kind = "learning"
    session_model = LearningSession
    last_resort_reply = LEARNING_LAST_RESORT_REPLY

    def __init__(
        self,
        workflow: LearningWorkflow,
        session_factory: async_sessionmaker[AsyncSession],
        rate_limiter: FixedWindowRateLimiter,
        max_message_length: int = 1000,
    ) -> None:
        """Initialize the learning service.

        Args:
            workflow: Learning router.
            session_factory: Factory for database sessions.
            rate_limiter: Per-user request limiter.
            max_message_length: Maximum accepted message length.
        """
        super().__init__(session_factory, rate_limiter, max_message_length)
        self.workflow = workflow

    async def start_session(
        self,
        user_id: str,
        topic: str,
        teaching_style: str = "balanced",
        response_style: str = "detailed",
    ) -> LearningSessionInfo:
        """Create a learning session.

        The session starts with no concepts; the first message runs the
        planner.

        Args:
            user_id: Owning user.
            topic: What the user wants to learn.
            teaching_style: Teaching approach, e.g. "balanced".
            response_style: "concise" or "detailed".

        Returns:
            The created session.

        Raises:
            ValueError: If the topic is blank.
        """
        topic = (topic or "").strip()
        if not topic:
            raise ValueError("topic must not be blank")

        session_id = new_id()
        session = LearningSession(
            id=session_id,
            user_id=user_id,
            thread_id=create_session_thread_id("learning", session_id),
            topic=topic,
            teaching_style=teaching_style,
            response_style=response_style,
        )
        async with self._session_factory() as db:
            async with db.begin():
                db.add(session)

        logger.info(
            "Learning session started: id=%s, user=%s, topic=%s",
            session_id,
            user_id,
            topic,
        )
        return LearningSessionInfo.model_validate(session)

    async def get_session(self, session_id: str, user_id: str) -> LearningSessionInfo:
        """Get session details.

        Raises:
            SessionNotFoundError: If the session does not exist or is not the user's.
        """
        return LearningSessionInfo.model_validate(await self._require_session(session_id, user_id))

    async def _run_turn(
        self,
        session_id: str,
        user_id: str,
        thread_id: str,
        message: str,
    ) -> list[AgentPart]:
        state = create_initial_learning_state(session_id, user_id, thread_id, message)
        result = await self.workflow.run(state)
        return result["parts"]

    async def list_concepts(self, session_id: str, user_id: str) -> list[ConceptInfo]:
        """List the session's concepts in plan order.

        Raises:
            SessionNotFoundError: If the session does not exist or is not the user's.
        """
        await self._require_session(session_id, user_id)
        async with self._session_factory() as db:
            result = await db.execute(
                select(Concept)
                .where(Concept.session_id == session_id)
                .order_by(Concept.order_index, Concept.created_at)
            )
            return [ConceptInfo.model_validate(row) for row in result.scalars().all()]

    async def list_tasks(self, session_id: str, user_id: str) -> list[TaskInfo]:
        """List the session's practice tasks.

        Raises:
            SessionNotFoundError: If the session does not exist or is not the user's.
        """
        await self._require_session(session_id, user_id)
        async with self._session_factory() as db:
            result = await db.execute(
                select(Task).where(Task.session_id == session_id).order_by(Task.created_at)
            )
            return [TaskInfo.model_validate(row) for row in result.scalars().all()]


def create_learning_service(
    settings: Settings | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
) -> LearningService:
    """Build a LearningService from the process-wide singletons.

    Requires init_database() to have run.

    Args:
        settings: Application settings. Uses get_settings() if None.
        rate_limiter: Shared limiter. Created from settings if None.

    Returns:
        Configured LearningService.
    """
    settings = settings or get_settings()
    factory = get_agent_factory()
    session_factory = get_session_factory()

    workflow = LearningWorkflow(
        planner=factory.get(AgentVariant.PLANNER),
        teacher=factory.get(AgentVariant.TEACHER),
        session_factory=session_factory,
    )
    return LearningService(
        workflow=workflow,
        session_factory=session_factory,
        rate_limiter=rate_limiter or create_rate_limiter(settings),
        max_message_length=settings.orchestration.max_message_length,
    )
