# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for deterministic agent responses."""

import pytest

from src.core.agents.fallbacks import (
    create_simple_response,
    default_concepts,
    default_exercises,
    default_goals,
    default_tasks,
)
from src.core.agents.variants import AgentVariant


class TestDefaultPlans:
    """Tests for the default plan lists."""

    def test_concise_concepts(self):
        """Test concise plans have five concepts."""
        concepts = default_concepts("Graph Theory", "concise")

        assert len(concepts) == 5
        assert concepts[0]["name"] == "Graph Theory Basics"
        assert [c["order_index"] for c in concepts] == [1, 2, 3, 4, 5]

    def test_detailed_concepts(self):
        """Test detailed plans have seven concepts."""
        concepts = default_concepts("Graph Theory", "detailed")

        assert len(concepts) == 7
        assert concepts[0]["name"] == "Graph Theory Fundamentals"

    @pytest.mark.parametrize("style,count", [("concise", 4), ("detailed", 6)])
    def test_task_counts(self, style, count):
        """Test task count follows the response style."""
        tasks = default_tasks("Graph Theory", style)

        assert len(tasks) == count
        assert all("(Graph Theory)" in t["description"] for t in tasks)

    def test_goals(self):
        """Test default goals carry category and priority."""
        goals = default_goals("work stress")

        assert len(goals) == 5
        assert [g["priority"] for g in goals] == [1, 1, 2, 2, 3]
        assert {g["category"] for g in goals} == {"stress"}
        assert "work stress" in goals[0]["description"]

    def test_exercises(self):
        """Test default exercises carry a type."""
        exercises = default_exercises("work stress")

        assert len(exercises) == 6
        assert exercises[0]["exercise_type"] == "worksheet"


class TestCreateSimpleResponse:
    """Tests for create_simple_response."""

    def test_planner_mentions_topic_and_category(self):
        """Test the plan fallback names the topic and its category."""
        text = create_simple_response(
            AgentVariant.PLANNER,
            "I want to learn graph theory",
            {"topic": "Graph Theory", "response_style": "concise"},
        )

        assert "Graph Theory" in text
        assert "📚 **Subject Category**: Other" in text
        assert "(5 concepts created)" in text

    def test_teacher_welcome(self):
        """Test the teacher welcomes a learner asking to learn the topic."""
        text = create_simple_response(
            AgentVariant.TEACHER,
            "I want to learn graph theory",
            {"topic": "Graph Theory", "concepts": []},
        )

        assert text.startswith("Welcome to your Graph Theory learning journey!")

    def test_teacher_names_next_pending_concept(self):
        """Test the teacher picks up the first pending concept."""
        context = {
            "topic": "Graph Theory",
            "concepts": [
                {"name": "Vertices", "description": "Points", "is_completed": True},
                {"name": "Edges", "description": "Connections", "is_completed": False},
            ],
        }

        text = create_simple_response(AgentVariant.TEACHER, "go on", context)

        assert "**Next up: Edges**" in text

    def test_teacher_generic(self):
        """Test the generic teacher reply mentions the topic."""
        text = create_simple_response(AgentVariant.TEACHER, "hello", {"topic": "Graph Theory"})

        assert text.startswith("I understand you want to learn about Graph Theory.")

    def test_assessment_mentions_concern(self):
        """Test the assessment fallback names the concern and focus area."""
        text = create_simple_response(
            AgentVariant.ASSESSMENT,
            "I feel stressed",
            {"primary_concern": "work stress"},
        )

        assert "CBT Assessment for work stress" in text
        assert "Stress Management" in text

    def test_psychotherapist_uses_pending_goal(self):
        """Test the therapy fallback names the first pending goal."""
        context = {
            "primary_concern": "work stress",
            "goals": [{"title": "Immediate Coping", "is_completed": False}],
        }

        text = create_simple_response(AgentVariant.PSYCHOTHERAPIST, "hi", context)

        assert "work stress" in text
        assert "**Immediate Coping**" in text

    def test_restructuring_walks_abcde(self):
        """Test the restructuring fallback lays out the A-B-C-D-E steps."""
        text = create_simple_response(
            AgentVariant.COGNITIVE_RESTRUCTURING,
            "/abcde",
            {"primary_concern": "work stress"},
        )

        assert "ABCDE" in text
        assert "work stress" in text
