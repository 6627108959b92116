# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning session tools.

- create_concept_map / create_practice_tasks: used by the Planner agent
- mark_concept_progress / mark_task_progress: used by the Teacher agent
"""

from src.tools.learning.concept_map import CreateConceptMapTool
from src.tools.learning.concept_progress import MarkConceptProgressTool
from src.tools.learning.practice_tasks import CreatePracticeTasksTool
from src.tools.learning.task_progress import MarkTaskProgressTool

__all__ = [
    "CreateConceptMapTool",
    "CreatePracticeTasksTool",
    "MarkConceptProgressTool",
    "MarkTaskProgressTool",
]
