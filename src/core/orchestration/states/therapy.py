# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Therapy conversation turn state.

A therapy session is in one of three phases:
- assessment: no goals yet; the assessment agent runs, then the
  psychotherapist on the same turn
- therapy: the psychotherapist runs
- cognitive_restructuring: the cognitive restructuring agent owns the
  turns until a record is completed or the user asks to go back
"""

from typing import Any, Literal, TypedDict

from src.core.orchestration.restructuring import RestructuringSignal
from src.core.orchestration.states.learning import AgentPart

TherapyPhase = Literal["assessment", "therapy", "cognitive_restructuring"]

PHASE_ASSESSMENT: TherapyPhase = "assessment"
PHASE_THERAPY: TherapyPhase = "therapy"
PHASE_COGNITIVE_RESTRUCTURING: TherapyPhase = "cognitive_restructuring"


class TherapyTurnState(TypedDict, total=False):
    """State of one therapy turn flowing through the router graph.

    Attributes:
        session_id: Therapy session id.
        user_id: User the turn belongs to.
        thread_id: Conversation thread id.
        user_message: The inbound message.
        stored_phase: Phase marker persisted on the session.
        signal: Restructuring signal detected in the user message.
        phase: Phase decided at the start of the turn.
        context: Most recently assembled agent context.
        parts: Agent replies produced so far, in order.
        record_completed: Whether an A-B-C-D-E record was completed this turn.
        abandoned: Number of in-progress records abandoned this turn.
        referred: Whether the psychotherapist referred the user to an
            A-B-C-D-E exercise this turn.
        final_phase: Phase persisted at the end of the turn.
    """

    session_id: str
    user_id: str
    thread_id: str
    user_message: str
    stored_phase: TherapyPhase
    signal: RestructuringSignal
    phase: TherapyPhase
    context: dict[str, Any]
    parts: list[AgentPart]
    record_completed: bool
    abandoned: int
    referred: bool
    final_phase: TherapyPhase


def create_initial_therapy_state(
    session_id: str,
    user_id: str,
    thread_id: str,
    user_message: str,
) -> TherapyTurnState:
    """Create the starting state for a therapy turn."""
    return TherapyTurnState(
        session_id=session_id,
        user_id=user_id,
        thread_id=thread_id,
        user_message=user_message,
        signal=RestructuringSignal.NONE,
        context={},
        parts=[],
        record_completed=False,
        abandoned=0,
        referred=False,
    )


def decide_therapy_phase(
    stored_phase: str | None,
    goal_count: int,
    signal: RestructuringSignal,
) -> TherapyPhase:
    """Decide which phase a therapy turn starts in.

    Args:
        stored_phase: Phase marker persisted on the session.
        goal_count: Number of goals the session currently has.
        signal: Restructuring signal detected for this turn.

    Returns:
        The phase whose agent handles the turn.
    """
    if goal_count == 0 or signal is RestructuringSignal.REASSESS:
        return PHASE_ASSESSMENT
    if signal is RestructuringSignal.EXIT:
        return PHASE_THERAPY
    if signal is RestructuringSignal.ENTER:
        return PHASE_COGNITIVE_RESTRUCTURING
    if stored_phase == PHASE_COGNITIVE_RESTRUCTURING:
        return PHASE_COGNITIVE_RESTRUCTURING
    return PHASE_THERAPY
