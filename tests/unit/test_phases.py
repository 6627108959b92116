# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for session phase decisions and restructuring signals."""

import pytest

from src.core.orchestration.restructuring import (
    RestructuringSignal,
    RestructuringSignalClassifier,
    is_exit_request,
    is_reassessment_request,
    is_restructuring_request,
    refers_to_restructuring,
)
from src.core.orchestration.states.learning import (
    PHASE_NEEDS_PLAN,
    PHASE_TEACHING,
    decide_learning_phase,
)
from src.core.orchestration.states.therapy import (
    PHASE_ASSESSMENT,
    PHASE_COGNITIVE_RESTRUCTURING,
    PHASE_THERAPY,
    decide_therapy_phase,
)


class TestLearningPhase:
    """Tests for decide_learning_phase."""

    def test_no_concepts_needs_plan(self):
        """Test a session without concepts needs a plan."""
        assert decide_learning_phase(0) == PHASE_NEEDS_PLAN

    @pytest.mark.parametrize("count", [1, 5, 40])
    def test_any_concept_means_teaching(self, count):
        """Test any concept moves the session to teaching."""
        assert decide_learning_phase(count) == PHASE_TEACHING


class TestTherapyPhase:
    """Tests for decide_therapy_phase."""

    @pytest.mark.parametrize("signal", list(RestructuringSignal))
    def test_no_goals_is_assessment(self, signal):
        """Test zero goals always means assessment, whatever the signal."""
        assert decide_therapy_phase(PHASE_COGNITIVE_RESTRUCTURING, 0, signal) == PHASE_ASSESSMENT

    def test_exit_returns_to_therapy(self):
        """Test an exit signal leaves restructuring."""
        phase = decide_therapy_phase(PHASE_COGNITIVE_RESTRUCTURING, 3, RestructuringSignal.EXIT)

        assert phase == PHASE_THERAPY

    def test_enter_starts_restructuring(self):
        """Test an entry signal starts restructuring."""
        assert decide_therapy_phase(PHASE_THERAPY, 3, RestructuringSignal.ENTER) == (
            PHASE_COGNITIVE_RESTRUCTURING
        )

    def test_stored_restructuring_phase_is_kept(self):
        """Test restructuring continues across turns without a new signal."""
        phase = decide_therapy_phase(PHASE_COGNITIVE_RESTRUCTURING, 3, RestructuringSignal.NONE)

        assert phase == PHASE_COGNITIVE_RESTRUCTURING

    @pytest.mark.parametrize("stored", [PHASE_THERAPY, PHASE_COGNITIVE_RESTRUCTURING])
    def test_reassessment_with_goals_is_assessment(self, stored):
        """Test an explicit plan request reopens the assessment."""
        assert decide_therapy_phase(stored, 4, RestructuringSignal.REASSESS) == PHASE_ASSESSMENT

    @pytest.mark.parametrize("stored", [None, PHASE_THERAPY, PHASE_ASSESSMENT, "unknown"])
    def test_otherwise_therapy(self, stored):
        """Test the default phase with goals is therapy."""
        assert decide_therapy_phase(stored, 2, RestructuringSignal.NONE) == PHASE_THERAPY


class TestRestructuringDetection:
    """Tests for the keyword heuristics."""

    @pytest.mark.parametrize(
        "message",
        [
            "/abcde",
            "/ABCDE please",
            "Can we try cognitive restructuring?",
            "I keep having negative thoughts about work",
            "I'd like to work on my thoughts about the meeting",
            "Could you help with this situation?",
        ],
    )
    def test_entry_requests(self, message):
        """Test entry phrasing is detected."""
        assert is_restructuring_request(message)

    @pytest.mark.parametrize(
        "message",
        ["I had a rough day", "Can you help me relax?", "I want to work on sleeping better"],
    )
    def test_non_entry_messages(self, message):
        """Test ordinary messages are not entry requests."""
        assert not is_restructuring_request(message)

    @pytest.mark.parametrize(
        "message",
        ["/therapy", "I want to stop", "Please go back to therapy", "cancel   this exercise"],
    )
    def test_exit_requests(self, message):
        """Test exit phrasing is detected."""
        assert is_exit_request(message)

    @pytest.mark.parametrize(
        "reply",
        [
            "Let's try an ABCDE exercise together next time.",
            "Would you like to work through an ABCDE exercise about it?",
            "How about we fill in an ABCDE worksheet for that moment?",
            "Shall we use an A-B-C-D-E exercise to look at that thought?",
        ],
    )
    def test_referral_detection(self, reply):
        """Test invitations to an exercise in a psychotherapist reply are referrals."""
        assert refers_to_restructuring(reply)

    @pytest.mark.parametrize(
        "reply",
        [
            "Let's talk about your week.",
            "Well done finishing your Thought Record worksheet this week. How are you feeling today?",
            "A thought record could help here.",
            "Last week's ABCDE exercise showed real progress.",
        ],
    )
    def test_mentions_are_not_referrals(self, reply):
        """Test mentioning a worksheet without inviting the user is not a referral."""
        assert not refers_to_restructuring(reply)

    @pytest.mark.parametrize(
        "message",
        [
            "Can we make a new therapy plan?",
            "I think my treatment plan needs to change",
            "Please create plan for me",
            "Could you assess me again?",
            "I'd like to reassess and start over",
            "Can you re-assess my goals?",
        ],
    )
    def test_reassessment_requests(self, message):
        """Test explicit plan requests are detected."""
        assert is_reassessment_request(message)

    @pytest.mark.parametrize(
        "message",
        [
            "My assessment of the meeting was harsh",
            "It's hard to assess the situation",
            "I stuck to my plan this week",
        ],
    )
    def test_non_reassessment_messages(self, message):
        """Test ordinary mentions of assessing or plans are not plan requests."""
        assert not is_reassessment_request(message)


class TestRestructuringSignalClassifier:
    """Tests for RestructuringSignalClassifier."""

    @pytest.fixture
    def classifier(self):
        return RestructuringSignalClassifier()

    def test_none(self, classifier):
        """Test an ordinary message carries no signal."""
        assert classifier.classify("I slept badly") is RestructuringSignal.NONE

    def test_enter(self, classifier):
        """Test the entry command."""
        assert classifier.classify("/abcde") is RestructuringSignal.ENTER

    def test_in_progress_record_enters(self, classifier):
        """Test an in-progress record routes back to restructuring."""
        signal = classifier.classify("The belief was that I'd fail", has_in_progress=True)

        assert signal is RestructuringSignal.ENTER

    def test_reassess(self, classifier):
        """Test a plan request is a re-assessment signal."""
        assert classifier.classify("Can we make a new therapy plan?") is RestructuringSignal.REASSESS

    def test_reassess_wins_over_entry(self, classifier):
        """Test a plan request takes precedence over an in-progress record."""
        signal = classifier.classify("Let's create plan from scratch", has_in_progress=True)

        assert signal is RestructuringSignal.REASSESS

    def test_exit_wins_over_reassess(self, classifier):
        """Test exit takes precedence over a plan request."""
        signal = classifier.classify("/therapy and a new treatment plan please")

        assert signal is RestructuringSignal.EXIT

    def test_exit_wins_over_entry(self, classifier):
        """Test exit takes precedence when both are present."""
        signal = classifier.classify("stop abcde, I want to stop", has_in_progress=True)

        assert signal is RestructuringSignal.EXIT
