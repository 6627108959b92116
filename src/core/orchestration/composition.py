# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Composite reply format.

When several agents answer one turn, each part is wrapped in its agent's
tag markers and the parts are joined with a transfer delimiter:

    [LEARNING_PLAN_AGENT_START]
    ...
    [LEARNING_PLAN_AGENT_END]

    [AGENT_SEPARATOR]

    [TEACHING_AGENT_START]
    ...
    [TEACHING_AGENT_END]

A single-part turn is returned as plain text.
"""

import re
from collections.abc import Sequence

from src.core.orchestration.states.learning import AgentPart

AGENT_SEPARATOR = "[AGENT_SEPARATOR]"

_JOINER = f"\n\n{AGENT_SEPARATOR}\n\n"
_PART_PATTERN = re.compile(r"\A\[(?P<tag>[A-Z_]+)_START\]\n(?P<text>.*)\n\[(?P=tag)_END\]\Z", re.S)


def compose_reply(parts: Sequence[AgentPart]) -> str:
    """Join agent parts into the reply shown to the user.

    Args:
        parts: Agent parts in the order the agents ran.

    Returns:
        Plain text for a single part, the tagged composite otherwise.
    """
    if not parts:
        return ""
    if len(parts) == 1:
        return parts[0]["text"]
    return _JOINER.join(
        f"[{part['tag']}_START]\n{part['text']}\n[{part['tag']}_END]" for part in parts
    )


def split_reply(reply: str) -> list[AgentPart]:
    """Parse a reply back into tagged parts.

    Args:
        reply: Text produced by compose_reply.

    Returns:
        The tagged parts. A plain reply yields one part with an empty tag.
    """
    chunks = reply.split(_JOINER)
    parts: list[AgentPart] = []
    for chunk in chunks:
        match = _PART_PATTERN.match(chunk)
        if match is None:
            return [AgentPart(tag="", text=reply)]
        parts.append(AgentPart(tag=match.group("tag"), text=match.group("text")))
    return parts
