# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""The closed set of agent variants.

Each variant has exactly one runtime per process and is only ever selected
by a router state machine, never looked up by an arbitrary name.
"""

from enum import Enum


class AgentVariant(str, Enum):
    """Agent variants participating in learning and therapy sessions."""

    PLANNER = "planner"
    TEACHER = "teacher"
    ASSESSMENT = "assessment"
    PSYCHOTHERAPIST = "psychotherapist"
    COGNITIVE_RESTRUCTURING = "cognitive_restructuring"

    @property
    def tag(self) -> str:
        """Marker used to label this variant's part of a composite reply."""
        return _TAGS[self]

    @property
    def session_kind(self) -> str:
        """Kind of session the variant works in."""
        if self in (AgentVariant.PLANNER, AgentVariant.TEACHER):
            return "learning"
        return "therapy"

    @property
    def is_planning(self) -> bool:
        """Whether the variant produces a plan and therefore a longer reply."""
        return self in (AgentVariant.PLANNER, AgentVariant.ASSESSMENT)


_TAGS: dict[AgentVariant, str] = {
    AgentVariant.PLANNER: "LEARNING_PLAN_AGENT",
    AgentVariant.TEACHER: "TEACHING_AGENT",
    AgentVariant.ASSESSMENT: "CBT_ASSESSMENT_AGENT",
    AgentVariant.PSYCHOTHERAPIST: "CBT_PSYCHOTHERAPIST",
    AgentVariant.COGNITIVE_RESTRUCTURING: "COGNITIVE_RESTRUCTURING_AGENT",
}

LEARNING_VARIANTS = (AgentVariant.PLANNER, AgentVariant.TEACHER)
THERAPY_VARIANTS = (
    AgentVariant.ASSESSMENT,
    AgentVariant.PSYCHOTHERAPIST,
    AgentVariant.COGNITIVE_RESTRUCTURING,
)
