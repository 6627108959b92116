# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for model output validation."""

from types import SimpleNamespace

import pytest

from src.core.agents.output_guard import (
    GuardResult,
    MarkerCorruptionClassifier,
    OutputGuard,
    extract_text,
)


def fallback():
    return "Deterministic fallback text for the learner."


class TestExtractText:
    """Tests for extract_text."""

    def test_plain_string_is_stripped(self):
        """Test plain strings are returned stripped."""
        assert extract_text("  hello  ") == "hello"

    def test_none_is_empty(self):
        """Test None yields an empty string."""
        assert extract_text(None) == ""

    def test_fragment_list_is_joined_with_spaces(self):
        """Test lists of fragments are joined with spaces."""
        content = [
            "Graphs",
            {"text": "have"},
            SimpleNamespace(content="vertices"),
            {"message": "and edges"},
        ]

        assert extract_text(content) == "Graphs have vertices and edges"

    def test_single_object_uses_text_field(self):
        """Test a single object exposes its text field."""
        assert extract_text(SimpleNamespace(text="A tree is acyclic.")) == "A tree is acyclic."

    def test_unknown_fragment_yields_empty(self):
        """Test fragments without text fields contribute nothing."""
        assert extract_text([{"other": 1}]) == ""


class TestOutputGuard:
    """Tests for OutputGuard.validate."""

    @pytest.fixture
    def guard(self):
        return OutputGuard()

    def test_accepts_valid_text(self, guard):
        """Test valid output passes through unchanged."""
        result = guard.validate(
            "A graph is a set of vertices joined by edges.",
            min_length=10,
            fallback=fallback,
        )

        assert result == GuardResult(
            text="A graph is a set of vertices joined by edges.",
            accepted=True,
        )

    @pytest.mark.parametrize("raw", [None, "", "   \n  ", []])
    def test_rejects_empty_output(self, guard, raw):
        """Test empty output is replaced by the fallback."""
        result = guard.validate(raw, min_length=10, fallback=fallback)

        assert not result.accepted
        assert result.reason == "empty"
        assert result.text == fallback()

    @pytest.mark.parametrize(
        "raw",
        [
            "<details>internal reasoning</details> Here is your plan for today.",
            "Safety measures: none. Here is the explanation you asked for.",
        ],
    )
    def test_rejects_corrupted_output(self, guard, raw):
        """Test output with leaked wrapper markers is rejected."""
        result = guard.validate(raw, min_length=10, fallback=fallback)

        assert not result.accepted
        assert result.reason == "corrupted"
        assert result.text == fallback()

    def test_rejects_short_output(self, guard):
        """Test output under the agent threshold is rejected."""
        result = guard.validate("Too short", min_length=100, fallback=fallback)

        assert result.reason == "too_short"
        assert result.text == fallback()

    def test_length_threshold_is_inclusive(self, guard):
        """Test output exactly at the threshold is accepted."""
        result = guard.validate("x" * 10, min_length=10, fallback=fallback)

        assert result.accepted

    def test_fallback_not_called_when_accepted(self, guard):
        """Test the fallback is only built on rejection."""
        calls = []

        def tracking_fallback():
            calls.append(1)
            return "fallback"

        guard.validate("Long enough reply text", min_length=5, fallback=tracking_fallback)

        assert calls == []

    def test_custom_classifiers(self):
        """Test the classifier list is replaceable."""
        guard = OutputGuard(classifiers=[MarkerCorruptionClassifier(markers=["[[raw]]"])])

        result = guard.validate("[[raw]] leaked", min_length=1000, fallback=fallback)

        assert result.reason == "corrupted"
