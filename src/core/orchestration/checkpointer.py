# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LangGraph checkpointer for per-agent dialogue history.

Every agent variant participating in a session keeps its own dialogue in
a separate checkpoint thread keyed ``<thread_id>:<variant>``.

Two backends:
- InMemorySaver (default): single-process deployments and tests
- AsyncPostgresSaver: durable, shared across instances; enabled by
  calling init_checkpointer() at startup

Uses psycopg_pool.AsyncConnectionPool for persistent connections that
survive the full application lifespan (not context manager based).

Usage:
    await init_checkpointer(settings.database.url)
    saver = get_checkpointer_instance()
    store = CheckpointStore(saver)
"""

import logging
from typing import Optional

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import InMemorySaver
from langgraph.checkpoint.postgres.aio import AsyncPostgresSaver
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)

# Module-level singleton instances
_connection_pool: Optional[AsyncConnectionPool] = None
_postgres_checkpointer: Optional[AsyncPostgresSaver] = None
_memory_checkpointer: Optional[InMemorySaver] = None


async def init_checkpointer(connection_string: str) -> AsyncPostgresSaver:
    """Initialize the PostgreSQL checkpointer singleton.

    Creates an AsyncConnectionPool and AsyncPostgresSaver, then sets up
    the required checkpoint tables.

    Args:
        connection_string: PostgreSQL connection string (asyncpg format will be
            converted to psycopg format automatically).

    Returns:
        Initialized AsyncPostgresSaver instance.
    """
    global _connection_pool, _postgres_checkpointer

    if _postgres_checkpointer is not None:
        logger.warning("Checkpointer already initialized, returning existing instance")
        return _postgres_checkpointer

    logger.info("Initializing PostgreSQL checkpointer with connection pool")

    # postgresql+asyncpg://... -> postgresql://...
    psycopg_conn_string = connection_string.replace("+asyncpg", "")

    # autocommit is required for setup() to commit DDL statements;
    # dict_row is required for langgraph's dictionary-style row access
    _connection_pool = AsyncConnectionPool(
        conninfo=psycopg_conn_string,
        min_size=2,
        max_size=10,
        open=False,
        kwargs={
            "autocommit": True,
            "row_factory": dict_row,
        },
    )
    await _connection_pool.open()

    _postgres_checkpointer = AsyncPostgresSaver(conn=_connection_pool)
    await _postgres_checkpointer.setup()

    logger.info("PostgreSQL checkpointer initialized successfully")
    return _postgres_checkpointer


def get_checkpointer_instance() -> BaseCheckpointSaver:
    """Get the active checkpointer.

    Returns the PostgreSQL checkpointer when it has been initialized,
    otherwise a process-wide in-memory saver.

    Returns:
        Checkpoint saver shared by all agent runtimes.
    """
    global _memory_checkpointer

    if _postgres_checkpointer is not None:
        return _postgres_checkpointer

    if _memory_checkpointer is None:
        logger.info("Using in-memory checkpointer for agent dialogue history")
        _memory_checkpointer = InMemorySaver()

    return _memory_checkpointer


async def close_checkpointer() -> None:
    """Close the checkpointer and release resources.

    Should be called during application shutdown.
    """
    global _connection_pool, _postgres_checkpointer, _memory_checkpointer

    if _connection_pool is not None:
        logger.info("Closing PostgreSQL checkpointer connection pool")
        await _connection_pool.close()
        _connection_pool = None

    _postgres_checkpointer = None
    _memory_checkpointer = None


def create_thread_config(
    thread_id: str,
    checkpoint_ns: str = "",
) -> dict:
    """Create a LangGraph configuration dict for checkpointing.

    Args:
        thread_id: Unique identifier for the checkpoint thread.
        checkpoint_ns: Namespace for the checkpoint (optional).

    Returns:
        Config dict for use with aget_state()/aupdate_state().
    """
    return {
        "configurable": {
            "thread_id": thread_id,
            "checkpoint_ns": checkpoint_ns,
        }
    }


def create_session_thread_id(
    session_kind: str,
    session_id: str,
) -> str:
    """Create the thread ID stored on a new session.

    Args:
        session_kind: Kind of session (learning, therapy).
        session_id: Session identifier.

    Returns:
        Thread ID string, e.g. "learning_abc123".
    """
    return f"{session_kind}_{session_id}"


def create_agent_thread_id(thread_id: str, variant: str) -> str:
    """Create the checkpoint key for one agent variant within a thread.

    Args:
        thread_id: Session thread identifier.
        variant: Agent variant value (e.g. "teacher").

    Returns:
        Checkpoint key, e.g. "learning_abc123:teacher".
    """
    return f"{thread_id}:{variant}"
