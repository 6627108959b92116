# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain store models.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.base import (
    Base,
    CompletableMixin,
    TimestampMixin,
    UUIDMixin,
    new_id,
)
from src.infrastructure.database.models.conversation import ChatMessage, ProgressHistory
from src.infrastructure.database.models.learning import Concept, LearningSession, Task
from src.infrastructure.database.models.therapy import (
    RECORD_ABANDONED,
    RECORD_COMPLETED,
    RECORD_IN_PROGRESS,
    StructuredExercise,
    TherapyExercise,
    TherapyGoal,
    TherapySession,
)

__all__ = [
    "Base",
    "CompletableMixin",
    "TimestampMixin",
    "UUIDMixin",
    "new_id",
    # Learning
    "LearningSession",
    "Concept",
    "Task",
    # Therapy
    "TherapySession",
    "TherapyGoal",
    "TherapyExercise",
    "StructuredExercise",
    "RECORD_IN_PROGRESS",
    "RECORD_COMPLETED",
    "RECORD_ABANDONED",
    # Shared
    "ProgressHistory",
    "ChatMessage",
]
