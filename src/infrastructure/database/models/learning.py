# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning session models.

A learning session owns a concept tree and a flat list of practice tasks.
``completion_rate`` is derived from the concepts and only ever written by
the progress recompute in ``src.tools.progress``.
"""

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import (
    Base,
    CompletableMixin,
    TimestampMixin,
    UUIDMixin,
)


class LearningSession(Base, UUIDMixin, TimestampMixin):
    """One tutoring engagement on a single topic."""

    __tablename__ = "learning_sessions"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    thread_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    topic: Mapped[str] = mapped_column(String(255), nullable=False)
    teaching_style: Mapped[str] = mapped_column(String(50), nullable=False, default="balanced")
    response_style: Mapped[str] = mapped_column(String(50), nullable=False, default="detailed")
    subject_category_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    subject_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    completion_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active", doc="active|completed",
    )
    phase: Mapped[str] = mapped_column(
        String(20), nullable=False, default="needs_plan", doc="needs_plan|teaching",
    )

    concepts: Mapped[list["Concept"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="Concept.order_index",
    )
    tasks: Mapped[list["Task"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="Task.created_at",
    )


class Concept(Base, UUIDMixin, TimestampMixin, CompletableMixin):
    """A node in the session's concept map."""

    __tablename__ = "concepts"

    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("learning_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("concepts.id", ondelete="SET NULL"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    session: Mapped[LearningSession] = relationship(back_populates="concepts")


class Task(Base, UUIDMixin, TimestampMixin, CompletableMixin):
    """A practice task, optionally attached to a concept."""

    __tablename__ = "tasks"

    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("learning_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    concept_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("concepts.id", ondelete="SET NULL"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    session: Mapped[LearningSession] = relationship(back_populates="tasks")
