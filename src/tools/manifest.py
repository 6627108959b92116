# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Central tool manifest for all available tools.

This is the SINGLE source of truth for tool registrations across all agents.
Each tool entry contains metadata that helps with organization and documentation.

To add a new tool:
1. Create the tool class in the appropriate category folder (e.g., src/tools/learning/)
2. Add an entry to TOOL_MANIFEST below
3. Enable the tool in the agent's YAML config (config/agents/*.yaml)

The manifest uses a rich format with metadata:
- class_path: Fully qualified path to the tool class
- category: Functional category for organization
- description: Human-readable description
"""

from typing import TypedDict


class ToolInfo(TypedDict):
    """Information about a registered tool."""

    class_path: str  # Fully qualified class path (module.path:ClassName)
    category: str  # Tool category (learning, therapy)
    description: str  # Human-readable description


TOOL_MANIFEST: dict[str, ToolInfo] = {
    # =========================================================================
    # LEARNING TOOLS
    # Planner creates the concept map and tasks, Teacher tracks progress
    # =========================================================================
    "create_concept_map": {
        "class_path": "src.tools.learning.concept_map:CreateConceptMapTool",
        "category": "learning",
        "description": (
            "Create the hierarchical concept map for a learning session, "
            "optionally recording its subject category."
        ),
    },
    "create_practice_tasks": {
        "class_path": "src.tools.learning.practice_tasks:CreatePracticeTasksTool",
        "category": "learning",
        "description": "Create practice tasks for a learning session.",
    },
    "mark_concept_progress": {
        "class_path": "src.tools.learning.concept_progress:MarkConceptProgressTool",
        "category": "learning",
        "description": (
            "Mark a concept completed or not completed and recompute the "
            "session completion rate."
        ),
    },
    "mark_task_progress": {
        "class_path": "src.tools.learning.task_progress:MarkTaskProgressTool",
        "category": "learning",
        "description": "Mark a practice task completed or not completed.",
    },
    # =========================================================================
    # THERAPY TOOLS
    # Assessment creates goals and exercises, Psychotherapist tracks them,
    # Cognitive Restructuring records A-B-C-D-E exercises
    # =========================================================================
    "create_therapy_goals": {
        "class_path": "src.tools.therapy.goals:CreateTherapyGoalsTool",
        "category": "therapy",
        "description": "Create therapeutic goals for a therapy session.",
    },
    "create_therapy_exercises": {
        "class_path": "src.tools.therapy.exercises:CreateTherapyExercisesTool",
        "category": "therapy",
        "description": "Create practice exercises for a therapy session.",
    },
    "mark_goal_progress": {
        "class_path": "src.tools.therapy.goal_progress:MarkGoalProgressTool",
        "category": "therapy",
        "description": (
            "Mark a therapeutic goal achieved or not and recompute the "
            "session progress level."
        ),
    },
    "mark_exercise_progress": {
        "class_path": "src.tools.therapy.exercise_progress:MarkExerciseProgressTool",
        "category": "therapy",
        "description": "Mark a therapeutic exercise completed, with optional feedback.",
    },
    "record_structured_exercise": {
        "class_path": "src.tools.therapy.structured_exercise:RecordStructuredExerciseTool",
        "category": "therapy",
        "description": (
            "Create or continue an A-B-C-D-E cognitive restructuring record; "
            "completed once disputation and effective beliefs are filled in."
        ),
    },
}


def get_available_tool_names() -> list[str]:
    """Get list of all available tool names.

    Returns:
        List of tool names that can be used in YAML config.
    """
    return list(TOOL_MANIFEST.keys())


def get_tool_info(tool_name: str) -> ToolInfo | None:
    """Get information about a tool by name.

    Args:
        tool_name: Name of the tool.

    Returns:
        ToolInfo dict with class_path, category, description, or None if not found.
    """
    return TOOL_MANIFEST.get(tool_name)


def get_tools_by_category(category: str) -> list[str]:
    """Get all tool names in a specific category.

    Args:
        category: Category name (learning, therapy).

    Returns:
        List of tool names in that category.
    """
    return [
        name
        for name, info in TOOL_MANIFEST.items()
        if info["category"] == category
    ]
