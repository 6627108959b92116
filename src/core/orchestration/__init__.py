# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Conversation orchestration using LangGraph.

This package provides:
- Checkpointing: per-agent dialogue history on a LangGraph checkpointer
- Context assembly: per-turn agent context rebuilt from the domain store
- Routers: one state machine per session kind (workflows/)
- Reply composition: multi-agent reply format

Architecture:
    Service -> Workflow -> AgentRuntime -> LLM + Tools
                  |              |
          Domain store      Checkpoint store

Usage:
    from src.core.orchestration.workflows import LearningWorkflow

    workflow = LearningWorkflow(planner, teacher, session_factory)
    result = await workflow.run(initial_state)
"""

from src.core.orchestration.checkpointer import (
    close_checkpointer,
    create_agent_thread_id,
    create_session_thread_id,
    create_thread_config,
    get_checkpointer_instance,
    init_checkpointer,
)
from src.core.orchestration.composition import AGENT_SEPARATOR, compose_reply, split_reply

__all__ = [
    # Checkpointer
    "init_checkpointer",
    "get_checkpointer_instance",
    "close_checkpointer",
    "create_thread_config",
    "create_session_thread_id",
    "create_agent_thread_id",
    # Composition
    "AGENT_SEPARATOR",
    "compose_reply",
    "split_reply",
]
