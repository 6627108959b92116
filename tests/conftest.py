# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

Database-backed tests run against an in-memory SQLite database through
aiosqlite; every test gets a fresh schema. LLM calls are always mocked.
"""

from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from langgraph.checkpoint.memory import InMemorySaver
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.core.agents.context import load_agent_config
from src.core.agents.runtime import AgentRuntime
from src.core.agents.variants import AgentVariant
from src.core.intelligence.llm.client import LLMClient, LLMToolResponse, ToolCall
from src.core.orchestration.checkpoint_store import CheckpointStore
from src.core.tools.base import ToolContext
from src.infrastructure.database.connection import create_session_factory
from src.infrastructure.database.models import Base, LearningSession, TherapySession
from src.tools.loader import create_registry_from_config

AGENTS_CONFIG_DIR = Path(__file__).resolve().parents[1] / "config" / "agents"

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create an in-memory SQLite engine with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the test engine."""
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def learning_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> LearningSession:
    """Create a learning session on Graph Theory owned by USER_ID."""
    session = LearningSession(
        id="learning-1",
        user_id=USER_ID,
        thread_id="learning_learning-1",
        topic="Graph Theory",
        teaching_style="balanced",
        response_style="concise",
    )
    async with session_factory() as db:
        async with db.begin():
            db.add(session)
    return session


@pytest_asyncio.fixture
async def therapy_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> TherapySession:
    """Create a therapy session about work stress owned by USER_ID."""
    session = TherapySession(
        id="therapy-1",
        user_id=USER_ID,
        thread_id="therapy_therapy-1",
        primary_concern="work stress",
        therapy_goal="feel calmer at work",
        therapy_style="supportive",
        session_type="assessment",
        primary_category="stress",
    )
    async with session_factory() as db:
        async with db.begin():
            db.add(session)
    return session


@pytest.fixture
def make_tool_context(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., ToolContext]:
    """Build tool contexts for a session."""

    def _make(session_id: str, session_kind: str = "learning", user_id: str = USER_ID) -> ToolContext:
        return ToolContext(
            user_id=user_id,
            session_id=session_id,
            session_kind=session_kind,
            session_factory=session_factory,
        )

    return _make


# =============================================================================
# Agent Fixtures
# =============================================================================


@pytest.fixture
def checkpoint_store() -> CheckpointStore:
    """Create a checkpoint store on an in-memory saver."""
    return CheckpointStore(InMemorySaver())


def text_response(content: Any) -> LLMToolResponse:
    """Build a final model response."""
    return LLMToolResponse(content=content, model="gemini/gemini-2.0-flash")


def tool_response(*calls: tuple[str, dict[str, Any]]) -> LLMToolResponse:
    """Build a model response requesting tool calls."""
    return LLMToolResponse(
        content=None,
        model="gemini/gemini-2.0-flash",
        finish_reason="tool_calls",
        tool_calls=[
            ToolCall(id=f"call_{index}", name=name, arguments=arguments)
            for index, (name, arguments) in enumerate(calls)
        ],
    )


@pytest.fixture
def mock_llm_client() -> MagicMock:
    """Create a mock LLM client; tests set complete_with_tools side effects."""
    client = MagicMock(spec=LLMClient)
    client.model = "gemini/gemini-2.0-flash"
    client.complete_with_tools = AsyncMock()
    return client


@pytest.fixture
def make_runtime(checkpoint_store: CheckpointStore) -> Callable[..., AgentRuntime]:
    """Build a runtime for a variant from the shipped YAML configuration."""

    def _make(
        variant: AgentVariant,
        llm_client: LLMClient | None = None,
        max_steps: int = 25,
    ) -> AgentRuntime:
        config = load_agent_config(variant, AGENTS_CONFIG_DIR)
        return AgentRuntime(
            variant=variant,
            config=config,
            llm_client=llm_client,
            tool_registry=create_registry_from_config(config.tools),
            checkpoint_store=checkpoint_store,
            max_steps=max_steps,
        )

    return _make


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )
