# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Append-only records shared by both session kinds.

Neither table is ever updated after insert. ``chat_messages`` feeds the
transcript UI, not the agents; agents read their own history from the
checkpoint store.
"""

from typing import Any

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDMixin


class ProgressHistory(Base, UUIDMixin, TimestampMixin):
    """Audit row written once per state-changing tool invocation."""

    __tablename__ = "progress_history"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    session_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    session_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    item_type: Mapped[str] = mapped_column(
        String(30), nullable=False, doc="concept|task|goal|exercise|structured_exercise",
    )
    item_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    tool_name: Mapped[str] = mapped_column(String(64), nullable=False)
    changes: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")


class ChatMessage(Base, UUIDMixin, TimestampMixin):
    """One transcript entry."""

    __tablename__ = "chat_messages"

    session_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    session_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    thread_id: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, doc="user|assistant")
    content: Mapped[str] = mapped_column(Text, nullable=False)
    agent_tag: Mapped[str | None] = mapped_column(String(64), nullable=True)
