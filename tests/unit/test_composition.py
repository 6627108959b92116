# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for composite reply formatting."""

from src.core.orchestration.composition import AGENT_SEPARATOR, compose_reply, split_reply
from src.core.orchestration.states.learning import AgentPart


class TestComposeReply:
    """Tests for compose_reply."""

    def test_single_part_is_plain_text(self):
        """Test a single-agent turn has no markers."""
        reply = compose_reply([AgentPart(tag="TEACHING_AGENT", text="Let's begin.")])

        assert reply == "Let's begin."
        assert AGENT_SEPARATOR not in reply

    def test_empty_parts(self):
        """Test no parts yields an empty reply."""
        assert compose_reply([]) == ""

    def test_two_parts_are_tagged_and_separated(self):
        """Test a multi-agent turn uses tag markers and the separator."""
        reply = compose_reply(
            [
                AgentPart(tag="LEARNING_PLAN_AGENT", text="Plan text"),
                AgentPart(tag="TEACHING_AGENT", text="Lesson text"),
            ]
        )

        assert reply == (
            "[LEARNING_PLAN_AGENT_START]\nPlan text\n[LEARNING_PLAN_AGENT_END]"
            "\n\n[AGENT_SEPARATOR]\n\n"
            "[TEACHING_AGENT_START]\nLesson text\n[TEACHING_AGENT_END]"
        )

    def test_order_is_preserved(self):
        """Test parts appear in the order the agents ran."""
        reply = compose_reply(
            [
                AgentPart(tag="ASSESSMENT_AGENT", text="Goals"),
                AgentPart(tag="PSYCHOTHERAPIST_AGENT", text="Welcome"),
            ]
        )

        assert reply.index("ASSESSMENT_AGENT_START") < reply.index("PSYCHOTHERAPIST_AGENT_START")


class TestSplitReply:
    """Tests for split_reply."""

    def test_split_composite(self):
        """Test a composite reply splits back into its parts."""
        parts = [
            AgentPart(tag="LEARNING_PLAN_AGENT", text="Plan\nwith lines"),
            AgentPart(tag="TEACHING_AGENT", text="Lesson"),
        ]

        assert split_reply(compose_reply(parts)) == parts

    def test_plain_reply_has_empty_tag(self):
        """Test a plain reply yields one untagged part."""
        assert split_reply("Just text") == [AgentPart(tag="", text="Just text")]
