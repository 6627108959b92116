# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Append-only dialogue history on top of a LangGraph checkpointer.

The orchestrator never re-sends transcripts: each turn an agent receives
its fresh context plus the new user message, and its own earlier turns
come from here.

The store compiles a one-node graph whose only state channel is a list
with an additive reducer, so aupdate_state() appends and aget_state()
reads the ordered history back from whichever saver is configured.
"""

import logging
import operator
from typing import Annotated, Any, TypedDict

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.graph import END, START, StateGraph

from src.core.orchestration.checkpointer import create_thread_config

logger = logging.getLogger(__name__)

HISTORY_NODE = "record"


class DialogueHistoryState(TypedDict):
    """Checkpointed dialogue of one agent thread."""

    messages: Annotated[list[dict[str, Any]], operator.add]


def _record(state: DialogueHistoryState) -> dict:
    return {}


class CheckpointStore:
    """Per-thread ordered message history.

    Example:
        store = CheckpointStore(get_checkpointer_instance())
        await store.append("learning_abc:teacher", {"role": "user", "content": "Hi"})
        history = await store.read("learning_abc:teacher")
    """

    def __init__(self, checkpointer: BaseCheckpointSaver) -> None:
        graph = StateGraph(DialogueHistoryState)
        graph.add_node(HISTORY_NODE, _record)
        graph.add_edge(START, HISTORY_NODE)
        graph.add_edge(HISTORY_NODE, END)
        self._graph = graph.compile(checkpointer=checkpointer)

    async def append(self, thread_key: str, message: dict[str, Any]) -> None:
        """Append one message to a thread's history.

        Args:
            thread_key: Agent-scoped thread key.
            message: Message dict with at least 'role' and 'content'.
        """
        await self._graph.aupdate_state(
            create_thread_config(thread_key),
            {"messages": [message]},
            as_node=HISTORY_NODE,
        )

    async def read(self, thread_key: str) -> list[dict[str, Any]]:
        """Read a thread's history in insertion order.

        Args:
            thread_key: Agent-scoped thread key.

        Returns:
            Messages appended so far; empty for an unknown thread.
        """
        snapshot = await self._graph.aget_state(create_thread_config(thread_key))
        return list(snapshot.values.get("messages", []))
