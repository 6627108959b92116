# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Therapy session models.

A therapy session owns a goal tree, a list of exercises and the
A-B-C-D-E structured exercises written during cognitive restructuring.
``progress_level`` is derived from the goals.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import (
    Base,
    CompletableMixin,
    TimestampMixin,
    UUIDMixin,
)

RECORD_IN_PROGRESS = "in_progress"
RECORD_COMPLETED = "completed"
RECORD_ABANDONED = "abandoned"


class TherapySession(Base, UUIDMixin, TimestampMixin):
    """One CBT-style therapy engagement around a primary concern."""

    __tablename__ = "therapy_sessions"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    thread_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    primary_concern: Mapped[str] = mapped_column(String(255), nullable=False)
    therapy_goal: Mapped[str] = mapped_column(Text, nullable=False, default="")
    therapy_style: Mapped[str] = mapped_column(String(50), nullable=False, default="supportive")
    session_type: Mapped[str] = mapped_column(String(50), nullable=False, default="assessment")
    primary_category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    progress_level: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active", doc="active|completed",
    )
    phase: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default="assessment",
        doc="assessment|therapy|cognitive_restructuring",
    )

    goals: Mapped[list["TherapyGoal"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="TherapyGoal.priority",
    )
    exercises: Mapped[list["TherapyExercise"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="TherapyExercise.created_at",
    )
    structured_exercises: Mapped[list["StructuredExercise"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="StructuredExercise.created_at",
    )


class TherapyGoal(Base, UUIDMixin, TimestampMixin, CompletableMixin):
    """A therapeutic goal; goals may nest under a parent goal."""

    __tablename__ = "therapy_goals"

    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("therapy_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("therapy_goals.id", ondelete="SET NULL"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=2, doc="1=high, 3=low")

    session: Mapped[TherapySession] = relationship(back_populates="goals")


class TherapyExercise(Base, UUIDMixin, TimestampMixin, CompletableMixin):
    """A practice exercise assigned during assessment."""

    __tablename__ = "therapy_exercises"

    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("therapy_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    goal_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("therapy_goals.id", ondelete="SET NULL"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    exercise_type: Mapped[str] = mapped_column(String(50), nullable=False, default="worksheet")
    difficulty: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    estimated_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)

    session: Mapped[TherapySession] = relationship(back_populates="exercises")


class StructuredExercise(Base, UUIDMixin, TimestampMixin):
    """An A-B-C-D-E cognitive restructuring record.

    Completed iff both the disputation (D) and the effective beliefs (E)
    are filled in.
    """

    __tablename__ = "structured_exercises"

    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("therapy_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    activating_event: Mapped[str] = mapped_column(Text, nullable=False, default="")
    beliefs: Mapped[str] = mapped_column(Text, nullable=False, default="")
    consequences: Mapped[str] = mapped_column(Text, nullable=False, default="")
    disputation: Mapped[str | None] = mapped_column(Text, nullable=True)
    effective_beliefs: Mapped[str | None] = mapped_column(Text, nullable=True)
    completion_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RECORD_IN_PROGRESS,
        doc="in_progress|completed|abandoned",
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    session: Mapped[TherapySession] = relationship(back_populates="structured_exercises")

    @property
    def has_resolution(self) -> bool:
        """Check whether both the D and E steps are filled in."""
        return bool((self.disputation or "").strip()) and bool(
            (self.effective_beliefs or "").strip()
        )
