# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Response models returned by the conversation services."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChatReply(BaseModel):
    """Reply to one inbound chat message.

    Attributes:
        text: Text to show. A composite of tagged parts when several
            agents answered the turn.
        success: False for rate-limit, validation, ownership and
            last-resort replies.
        error: Machine-readable error code when success is False.
        agent_tags: Tags of the agents that answered, in order.
    """

    text: str
    success: bool = True
    error: str | None = None
    agent_tags: list[str] = Field(default_factory=list)


class _OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class LearningSessionInfo(_OrmModel):
    """Learning session summary."""

    id: str
    user_id: str
    thread_id: str
    topic: str
    teaching_style: str
    response_style: str
    subject_category_id: int | None = None
    subject_name: str | None = None
    completion_rate: float
    status: str
    phase: str
    created_at: datetime
    updated_at: datetime


class TherapySessionInfo(_OrmModel):
    """Therapy session summary."""

    id: str
    user_id: str
    thread_id: str
    primary_concern: str
    therapy_goal: str
    therapy_style: str
    session_type: str
    primary_category: str | None = None
    progress_level: float
    status: str
    phase: str
    created_at: datetime
    updated_at: datetime


class ConceptInfo(_OrmModel):
    """Concept map entry for the side panel."""

    id: str
    parent_id: str | None = None
    name: str
    description: str
    order_index: int
    is_completed: bool
    completed_at: datetime | None = None


class TaskInfo(_OrmModel):
    """Practice task for the side panel."""

    id: str
    concept_id: str | None = None
    title: str
    description: str
    is_completed: bool
    completed_at: datetime | None = None


class GoalInfo(_OrmModel):
    """Therapeutic goal for the side panel."""

    id: str
    parent_id: str | None = None
    title: str
    description: str
    category: str | None = None
    priority: int
    is_completed: bool
    completed_at: datetime | None = None


class ExerciseInfo(_OrmModel):
    """Therapeutic exercise for the side panel."""

    id: str
    goal_id: str | None = None
    title: str
    description: str
    exercise_type: str
    difficulty: int
    estimated_minutes: int | None = None
    feedback: str | None = None
    is_completed: bool
    completed_at: datetime | None = None


class StructuredExerciseInfo(_OrmModel):
    """A-B-C-D-E record for the side panel."""

    id: str
    title: str
    activating_event: str
    beliefs: str
    consequences: str
    disputation: str | None = None
    effective_beliefs: str | None = None
    completion_status: str
    completed_at: datetime | None = None
    created_at: datetime


class MessageInfo(_OrmModel):
    """Transcript entry."""

    id: str
    role: str
    content: str
    agent_tag: str | None = None
    created_at: datetime


class ProgressEntry(_OrmModel):
    """Progress history audit row."""

    id: str
    item_type: str
    item_id: str | None = None
    action: str
    tool_name: str
    changes: dict[str, Any] = Field(default_factory=dict)
    note: str
    created_at: datetime
