# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Validation of model output before it is shown to the user.

Rules, applied in order:
1. Extract text from whatever shape the model returned
2. Reject empty or whitespace-only text
3. Reject text containing corruption markers (leaked wrapper tags)
4. Reject text shorter than the agent's minimum length

Rejected output is replaced by the caller-supplied deterministic fallback,
so the user never sees an empty or corrupted bubble. Rules 2-4 are
pluggable classifiers; a stricter structural check can replace the marker
heuristic without touching the runtime.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

CORRUPTION_MARKERS: tuple[str, ...] = ("<details>", "</details>", "Safety measures")

_FRAGMENT_FIELDS = ("text", "content", "message")


def extract_text(content: Any) -> str:
    """Extract plain text from a model response payload.

    Handles plain strings, lists of fragments (strings or objects with a
    text/content/message field, joined with spaces) and single objects.

    Args:
        content: Raw content returned by the model client.

    Returns:
        Extracted text, stripped. Empty string if nothing is extractable.
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, (list, tuple)):
        return " ".join(_fragment_text(item) for item in content).strip()
    return _fragment_text(content).strip()


def _fragment_text(fragment: Any) -> str:
    if isinstance(fragment, str):
        return fragment
    for field in _FRAGMENT_FIELDS:
        if isinstance(fragment, dict):
            value = fragment.get(field)
        else:
            value = getattr(fragment, field, None)
        if isinstance(value, str) and value:
            return value
    return ""


class OutputClassifier(ABC):
    """Decides whether extracted text is unfit to show."""

    @abstractmethod
    def reject_reason(self, text: str, min_length: int) -> str | None:
        """Return a short rejection reason, or None to accept."""


class EmptyOutputClassifier(OutputClassifier):
    """Rejects empty and whitespace-only text."""

    def reject_reason(self, text: str, min_length: int) -> str | None:
        return "empty" if not text.strip() else None


class MarkerCorruptionClassifier(OutputClassifier):
    """Rejects text containing known corruption markers."""

    def __init__(self, markers: Sequence[str] = CORRUPTION_MARKERS) -> None:
        self._markers = tuple(markers)

    def reject_reason(self, text: str, min_length: int) -> str | None:
        for marker in self._markers:
            if marker in text:
                return "corrupted"
        return None


class MinimumLengthClassifier(OutputClassifier):
    """Rejects text shorter than the agent's threshold."""

    def reject_reason(self, text: str, min_length: int) -> str | None:
        return "too_short" if len(text.strip()) < min_length else None


DEFAULT_CLASSIFIERS: tuple[OutputClassifier, ...] = (
    EmptyOutputClassifier(),
    MarkerCorruptionClassifier(),
    MinimumLengthClassifier(),
)


@dataclass
class GuardResult:
    """Outcome of validating one model output.

    Attributes:
        text: Text to show; the fallback when the output was rejected.
        accepted: Whether the model's own text was used.
        reason: Rejection reason if not accepted.
    """

    text: str
    accepted: bool
    reason: str | None = None


class OutputGuard:
    """Applies the classifiers in order and substitutes the fallback."""

    def __init__(self, classifiers: Sequence[OutputClassifier] | None = None) -> None:
        self._classifiers = tuple(classifiers) if classifiers is not None else DEFAULT_CLASSIFIERS

    def validate(
        self,
        raw: Any,
        *,
        min_length: int,
        fallback: Callable[[], str],
        agent_id: str = "",
    ) -> GuardResult:
        """Validate model output.

        Args:
            raw: Raw content returned by the model client.
            min_length: Minimum accepted length for this agent.
            fallback: Produces the deterministic replacement text.
            agent_id: Agent identifier for logging.

        Returns:
            GuardResult carrying the text to show.
        """
        text = extract_text(raw)

        for classifier in self._classifiers:
            reason = classifier.reject_reason(text, min_length)
            if reason is not None:
                logger.warning(
                    "Output rejected (%s) for agent %s, using fallback", reason, agent_id
                )
                return GuardResult(text=fallback(), accepted=False, reason=reason)

        return GuardResult(text=text, accepted=True)
