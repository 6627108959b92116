# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared chat entry point for learning and therapy sessions.

Every inbound message goes through the same pipeline:

1. Rate limit (rejected before any model or tool work)
2. Input validation (non-empty, bounded length)
3. Session ownership
4. Router turn
5. Transcript save

Nothing raised by the router reaches the caller: a residual exception is
logged with its traceback and turned into a last-resort reply.

The service does NOT make LLM calls directly; all AI interactions happen
through the session kind's workflow.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.orchestration.composition import compose_reply
from src.core.orchestration.context_assembler import SessionNotFoundError
from src.core.orchestration.states.learning import AgentPart
from src.core.tools.base import SessionKind
from src.domains.conversation.schemas import ChatReply, MessageInfo, ProgressEntry
from src.infrastructure.database.models import (
    ChatMessage,
    LearningSession,
    ProgressHistory,
    TherapySession,
)
from src.infrastructure.rate_limit import RATE_LIMIT_MESSAGE, FixedWindowRateLimiter
from src.utils.logging import bound_context

logger = logging.getLogger(__name__)

EMPTY_MESSAGE_REPLY = "Please type a message so I can help you."
MESSAGE_TOO_LONG_REPLY = (
    "That message is a bit long for me to handle at once. Please keep it under "
    "{limit} characters, or split it into smaller parts."
)
SESSION_NOT_FOUND_REPLY = (
    "I couldn't find this session. Please start a new session from the sidebar."
)


class ConversationService(ABC):
    """Base service for session chat.

    Subclasses bind a session kind to its workflow and add the side-panel
    reads of that kind.

    Attributes:
        session_kind: Kind of session this service handles.
        session_model: ORM model of the session.
        last_resort_reply: Reply used when a turn fails unexpectedly.
    """

    session_kind: ClassVar[SessionKind]
    session_model: ClassVar[type[LearningSession] | type[TherapySession]]
    last_resort_reply: ClassVar[str]

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        rate_limiter: FixedWindowRateLimiter,
        max_message_length: int = 1000,
    ) -> None:
        """Initialize the service.

        Args:
            session_factory: Factory for database sessions.
            rate_limiter: Per-user request limiter.
            max_message_length: Maximum accepted message length.
        """
        self._session_factory = session_factory
        self._rate_limiter = rate_limiter
        self._max_message_length = max_message_length

    @abstractmethod
    async def _run_turn(
        self,
        session_id: str,
        user_id: str,
        thread_id: str,
        message: str,
    ) -> list[AgentPart]:
        """Run the router for one turn and return the agent parts in order."""

    async def respond(
        self,
        session_id: str,
        user_id: str,
        message: str,
        thread_id: str | None = None,
    ) -> ChatReply:
        """Answer one user message.

        Args:
            session_id: Session the message belongs to.
            user_id: Sending user.
            message: Message text.
            thread_id: Conversation thread. Defaults to the session's own.

        Returns:
            ChatReply; never raises for turn failures.
        """
        with bound_context(
            session_id=session_id,
            user_id=user_id,
            session_kind=self.session_kind,
        ):
            if not await self._rate_limiter.allow(user_id):
                logger.warning("Rate limit exceeded for user %s", user_id)
                return ChatReply(text=RATE_LIMIT_MESSAGE, success=False, error="rate_limited")

            text = (message or "").strip()
            if not text:
                return ChatReply(text=EMPTY_MESSAGE_REPLY, success=False, error="empty_message")
            if len(text) > self._max_message_length:
                return ChatReply(
                    text=MESSAGE_TOO_LONG_REPLY.format(limit=self._max_message_length),
                    success=False,
                    error="message_too_long",
                )

            session = await self._get_owned_session(session_id, user_id)
            if session is None:
                logger.warning("Session %s not found for user %s", session_id, user_id)
                return ChatReply(
                    text=SESSION_NOT_FOUND_REPLY,
                    success=False,
                    error="session_not_found",
                )

            thread = thread_id or session.thread_id

            try:
                parts = await self._run_turn(session_id, user_id, thread, text)
                reply = compose_reply(parts)
                await self._save_transcript(
                    session_id,
                    user_id,
                    thread,
                    text,
                    reply,
                    parts[-1]["tag"] if parts else None,
                )
            except Exception:
                logger.exception("Turn failed for %s session %s", self.session_kind, session_id)
                return ChatReply(
                    text=self.last_resort_reply,
                    success=False,
                    error="turn_failed",
                )

            return ChatReply(text=reply, agent_tags=[part["tag"] for part in parts])

    async def _get_owned_session(
        self,
        session_id: str,
        user_id: str,
    ) -> LearningSession | TherapySession | None:
        async with self._session_factory() as db:
            session = await db.get(self.session_model, session_id)
        if session is None or session.user_id != user_id:
            return None
        return session

    async def _require_session(self, session_id: str, user_id: str) -> Any:
        session = await self._get_owned_session(session_id, user_id)
        if session is None:
            raise SessionNotFoundError(self.session_kind, session_id)
        return session

    async def _save_transcript(
        self,
        session_id: str,
        user_id: str,
        thread_id: str,
        message: str,
        reply: str,
        agent_tag: str | None,
    ) -> None:
        async with self._session_factory() as db:
            async with db.begin():
                common = {
                    "session_kind": self.session_kind,
                    "session_id": session_id,
                    "thread_id": thread_id,
                    "user_id": user_id,
                }
                db.add(ChatMessage(role="user", content=message, **common))
                db.add(ChatMessage(role="assistant", content=reply, agent_tag=agent_tag, **common))

    async def get_history(self, session_id: str, user_id: str) -> list[MessageInfo]:
        """Get the session transcript in order.

        Raises:
            SessionNotFoundError: If the session does not exist or is not the user's.
        """
        await self._require_session(session_id, user_id)
        async with self._session_factory() as db:
            result = await db.execute(
                select(ChatMessage)
                .where(
                    ChatMessage.session_kind == self.session_kind,
                    ChatMessage.session_id == session_id,
                )
                # A turn's two rows can share a timestamp; the user row goes first
                .order_by(ChatMessage.created_at, ChatMessage.role.desc())
            )
            return [MessageInfo.model_validate(row) for row in result.scalars().all()]

    async def get_progress_history(self, session_id: str, user_id: str) -> list[ProgressEntry]:
        """Get the progress audit trail of a session in order.

        Raises:
            SessionNotFoundError: If the session does not exist or is not the user's.
        """
        await self._require_session(session_id, user_id)
        async with self._session_factory() as db:
            result = await db.execute(
                select(ProgressHistory)
                .where(
                    ProgressHistory.session_kind == self.session_kind,
                    ProgressHistory.session_id == session_id,
                )
                .order_by(ProgressHistory.created_at)
            )
            return [ProgressEntry.model_validate(row) for row in result.scalars().all()]
