# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Router turn states and phase decisions.

Each session kind has its own TypedDict flowing through its router graph
and a pure function deciding the phase a turn starts in.
"""

from src.core.orchestration.states.learning import (
    PHASE_NEEDS_PLAN,
    PHASE_TEACHING,
    AgentPart,
    LearningPhase,
    LearningTurnState,
    create_initial_learning_state,
    decide_learning_phase,
)
from src.core.orchestration.states.therapy import (
    PHASE_ASSESSMENT,
    PHASE_COGNITIVE_RESTRUCTURING,
    PHASE_THERAPY,
    TherapyPhase,
    TherapyTurnState,
    create_initial_therapy_state,
    decide_therapy_phase,
)

__all__ = [
    "AgentPart",
    # Learning
    "LearningPhase",
    "LearningTurnState",
    "PHASE_NEEDS_PLAN",
    "PHASE_TEACHING",
    "create_initial_learning_state",
    "decide_learning_phase",
    # Therapy
    "TherapyPhase",
    "TherapyTurnState",
    "PHASE_ASSESSMENT",
    "PHASE_THERAPY",
    "PHASE_COGNITIVE_RESTRUCTURING",
    "create_initial_therapy_state",
    "decide_therapy_phase",
]
