# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Conversation domain: the chat pipeline shared by every session kind."""

from src.domains.conversation.schemas import ChatReply, MessageInfo, ProgressEntry
from src.domains.conversation.service import ConversationService

__all__ = [
    "ChatReply",
    "ConversationService",
    "MessageInfo",
    "ProgressEntry",
]
