# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the dialogue history store and thread keys."""

import pytest

from src.core.orchestration.checkpointer import (
    create_agent_thread_id,
    create_session_thread_id,
    create_thread_config,
)


class TestThreadKeys:
    """Tests for thread id helpers."""

    def test_session_thread_id(self):
        """Test session thread ids carry the session kind."""
        assert create_session_thread_id("learning", "abc") == "learning_abc"

    def test_agent_thread_id(self):
        """Test agent histories are scoped by variant."""
        assert create_agent_thread_id("learning_abc", "teacher") == "learning_abc:teacher"

    def test_thread_config(self):
        """Test the LangGraph config shape."""
        assert create_thread_config("t1") == {"configurable": {"thread_id": "t1", "checkpoint_ns": ""}}


class TestCheckpointStore:
    """Tests for CheckpointStore."""

    @pytest.mark.asyncio
    async def test_unknown_thread_is_empty(self, checkpoint_store):
        """Test reading a thread that was never written."""
        assert await checkpoint_store.read("learning_abc:teacher") == []

    @pytest.mark.asyncio
    async def test_append_preserves_order(self, checkpoint_store):
        """Test messages come back in insertion order."""
        messages = [
            {"role": "user", "content": "What is a graph?"},
            {"role": "assistant", "content": "A set of vertices and edges."},
            {"role": "user", "content": "And a tree?"},
        ]
        for message in messages:
            await checkpoint_store.append("learning_abc:teacher", message)

        assert await checkpoint_store.read("learning_abc:teacher") == messages

    @pytest.mark.asyncio
    async def test_threads_are_isolated(self, checkpoint_store):
        """Test each agent has its own history within a session."""
        await checkpoint_store.append("learning_abc:planner", {"role": "user", "content": "plan"})
        await checkpoint_store.append("learning_abc:teacher", {"role": "user", "content": "teach"})

        assert await checkpoint_store.read("learning_abc:planner") == [
            {"role": "user", "content": "plan"}
        ]
