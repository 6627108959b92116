# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning conversation turn state.

A learning session is in one of two phases:
- needs_plan: no concepts yet; the planner runs, then the teacher
- teaching: at least one concept exists; only the teacher runs

The phase is derived from the concept count alone, so it never goes back
to needs_plan once concepts exist.
"""

from typing import Any, Literal, TypedDict

LearningPhase = Literal["needs_plan", "teaching"]

PHASE_NEEDS_PLAN: LearningPhase = "needs_plan"
PHASE_TEACHING: LearningPhase = "teaching"


class AgentPart(TypedDict):
    """One agent's contribution to a reply."""

    tag: str
    text: str


class LearningTurnState(TypedDict, total=False):
    """State of one learning turn flowing through the router graph.

    Attributes:
        session_id: Learning session id.
        user_id: User the turn belongs to.
        thread_id: Conversation thread id.
        user_message: The inbound message.
        phase: Phase decided at the start of the turn.
        context: Most recently assembled agent context.
        parts: Agent replies produced so far, in order.
        planned: Whether the planner produced or seeded a plan this turn.
        final_phase: Phase persisted at the end of the turn.
    """

    session_id: str
    user_id: str
    thread_id: str
    user_message: str
    phase: LearningPhase
    context: dict[str, Any]
    parts: list[AgentPart]
    planned: bool
    final_phase: LearningPhase


def create_initial_learning_state(
    session_id: str,
    user_id: str,
    thread_id: str,
    user_message: str,
) -> LearningTurnState:
    """Create the starting state for a learning turn."""
    return LearningTurnState(
        session_id=session_id,
        user_id=user_id,
        thread_id=thread_id,
        user_message=user_message,
        context={},
        parts=[],
        planned=False,
    )


def decide_learning_phase(concept_count: int) -> LearningPhase:
    """Decide which phase a learning turn starts in.

    Args:
        concept_count: Number of concepts the session currently has.

    Returns:
        needs_plan iff the session has no concepts.
    """
    if concept_count > 0:
        return PHASE_TEACHING
    return PHASE_NEEDS_PLAN
