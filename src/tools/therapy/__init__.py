# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Therapy session tools.

- create_therapy_goals / create_therapy_exercises: used by the Assessment agent
- mark_goal_progress / mark_exercise_progress: used by the Psychotherapist agent
- record_structured_exercise: used by the Cognitive Restructuring agent
"""

from src.tools.therapy.exercise_progress import MarkExerciseProgressTool
from src.tools.therapy.exercises import CreateTherapyExercisesTool
from src.tools.therapy.goal_progress import MarkGoalProgressTool
from src.tools.therapy.goals import CreateTherapyGoalsTool
from src.tools.therapy.structured_exercise import (
    RecordStructuredExerciseTool,
    abandon_in_progress_exercises,
    find_in_progress_exercise,
)

__all__ = [
    "CreateTherapyExercisesTool",
    "CreateTherapyGoalsTool",
    "MarkExerciseProgressTool",
    "MarkGoalProgressTool",
    "RecordStructuredExerciseTool",
    "abandon_in_progress_exercises",
    "find_in_progress_exercise",
]
