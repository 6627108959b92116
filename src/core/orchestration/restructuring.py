# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Detection of cognitive restructuring entry and exit signals.

Entry signals, in order of precedence:
1. The explicit ``/abcde`` command
2. Restructuring keywords in the user's message
3. An A-B-C-D-E record already in progress for the session
4. A psychotherapist reply on the previous turn that referred the user
   to an A-B-C-D-E exercise, carried over as the stored session phase

A referral counts only when the reply names an A-B-C-D-E exercise and
invites the user to do it; mentioning a past worksheet is not a referral.

Exit signals are the explicit ``/therapy`` command or an exit phrase.
A re-assessment signal is an explicit request for a new therapy plan.
Precedence within one message is exit, then re-assessment, then entry.

The keyword lists are heuristics; RestructuringSignalClassifier is the
single place to replace them with a stricter classifier.
"""

import re
from enum import Enum

ENTER_COMMAND = "/abcde"
EXIT_COMMAND = "/therapy"

RESTRUCTURING_KEYWORDS: tuple[str, ...] = (
    "abcde",
    "cognitive restructuring",
    "thought challenging",
    "negative thoughts",
    "automatic thoughts",
    "thinking patterns",
    "challenge my thoughts",
)

WORK_REQUEST_PHRASES: tuple[str, ...] = ("work on", "help with")
WORK_REQUEST_SUBJECTS: tuple[str, ...] = ("thoughts", "situation", "belief", "thinking")

EXIT_PHRASES: tuple[str, ...] = (
    "stop abcde",
    "exit cognitive restructuring",
    "cancel this exercise",
    "go back to therapy",
    "return to therapist",
    "abandon this",
    "quit this exercise",
    "i want to stop",
)

REFERRAL_PHRASES: tuple[str, ...] = (
    "abcde exercise",
    "abcde worksheet",
    "a-b-c-d-e exercise",
)
INVITATION_PHRASES: tuple[str, ...] = (
    "would you like",
    "shall we",
    "let's try",
    "let's work through",
    "we could try",
    "how about",
)

REASSESS_PHRASES: tuple[str, ...] = ("therapy plan", "treatment plan", "create plan")
REASSESS_VERBS: frozenset[str] = frozenset({"assess", "reassess", "re-assess"})
REASSESS_TARGETS: tuple[str, ...] = ("me", "my", "new plan", "start over")

EXIT_INSTRUCTION = (
    "The user has decided to stop their cognitive restructuring exercise and "
    "return to therapy. Please acknowledge their choice and continue with "
    "supportive therapy."
)
COMPLETION_INSTRUCTION = (
    "The user has just completed a cognitive restructuring exercise. Please "
    "provide supportive follow-up, integrate this work with their overall "
    "therapy goals, and continue the therapeutic conversation."
)


class RestructuringSignal(str, Enum):
    """What a user turn asks of the cognitive restructuring flow."""

    NONE = "none"
    ENTER = "enter"
    EXIT = "exit"
    REASSESS = "reassess"


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def is_exit_request(message: str) -> bool:
    """Check whether a message asks to leave the structured exercise."""
    text = _normalize(message)
    if text.startswith(EXIT_COMMAND):
        return True
    return any(phrase in text for phrase in EXIT_PHRASES)


def is_reassessment_request(message: str) -> bool:
    """Check whether a message asks for a fresh assessment and therapy plan."""
    text = _normalize(message)
    if any(phrase in text for phrase in REASSESS_PHRASES):
        return True
    words = re.findall(r"[a-z'-]+", text)
    if not REASSESS_VERBS.intersection(words):
        return False
    return any(
        target in words if " " not in target else target in text
        for target in REASSESS_TARGETS
    )


def is_restructuring_request(message: str) -> bool:
    """Check whether a message asks for structured reflective work."""
    text = _normalize(message)
    if text.startswith(ENTER_COMMAND):
        return True
    if any(keyword in text for keyword in RESTRUCTURING_KEYWORDS):
        return True
    return any(p in text for p in WORK_REQUEST_PHRASES) and any(
        s in text for s in WORK_REQUEST_SUBJECTS
    )


def refers_to_restructuring(reply: str) -> bool:
    """Check whether a psychotherapist reply invites the user to an A-B-C-D-E exercise."""
    text = _normalize(reply).replace("\u2019", "'")
    return any(phrase in text for phrase in REFERRAL_PHRASES) and any(
        phrase in text for phrase in INVITATION_PHRASES
    )


class RestructuringSignalClassifier:
    """Classifies one therapy turn into a restructuring or re-assessment signal."""

    def classify(
        self,
        message: str,
        *,
        has_in_progress: bool = False,
    ) -> RestructuringSignal:
        """Classify a user message.

        Args:
            message: The inbound user message.
            has_in_progress: Whether an in-progress A-B-C-D-E record exists.

        Returns:
            The signal for this turn.
        """
        if is_exit_request(message):
            return RestructuringSignal.EXIT
        if is_reassessment_request(message):
            return RestructuringSignal.REASSESS
        if is_restructuring_request(message) or has_in_progress:
            return RestructuringSignal.ENTER
        return RestructuringSignal.NONE
