# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for topic and concern categorisation."""

import pytest

from src.core.agents.categories import (
    THERAPY_CATEGORIES,
    detect_subject_category,
    detect_therapy_category,
    is_valid_subject_category,
)


class TestSubjectCategory:
    """Tests for detect_subject_category."""

    def test_unmatched_topic_is_other(self):
        """Test a topic with no keyword match falls into Other."""
        category = detect_subject_category("Graph Theory")

        assert category.category_id == 50
        assert category.category_name == "Other"
        assert category.subject_name == "Graph Theory"

    @pytest.mark.parametrize(
        "topic,expected_id",
        [
            ("Python programming", 1),
            ("Web development with HTML", 35),
            ("Android app programming", 34),
            ("Linear Algebra", 9),
            ("Organic Chemistry", 43),
            ("Public speaking skills", 29),
        ],
    )
    def test_keyword_matches(self, topic, expected_id):
        """Test keyword rules and their refinements."""
        assert detect_subject_category(topic).category_id == expected_id

    def test_matching_is_case_insensitive(self):
        """Test matching ignores case."""
        assert detect_subject_category("PHYSICS").category_name == "Physics"

    @pytest.mark.parametrize("value,valid", [(1, True), (50, True), (0, False), (51, False), (None, False), (True, False)])
    def test_category_id_range(self, value, valid):
        """Test the accepted category id range."""
        assert is_valid_subject_category(value) is valid


class TestTherapyCategory:
    """Tests for detect_therapy_category."""

    @pytest.mark.parametrize(
        "concern,expected",
        [
            ("panic attacks before exams", "anxiety"),
            ("feeling hopeless", "depression"),
            ("work stress", "stress"),
            ("procrastination", "behavioral"),
            ("low self-esteem", "self-concept"),
        ],
    )
    def test_keyword_matches(self, concern, expected):
        """Test concerns map to their category."""
        assert detect_therapy_category(concern).category == expected

    def test_unmatched_concern_is_general(self):
        """Test an unmatched concern is general well-being."""
        category = detect_therapy_category("life transitions")

        assert category.category == "general"
        assert category.category in THERAPY_CATEGORIES
