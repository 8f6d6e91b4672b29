"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in app/models/.
Repos convert between SQLAlchemy rows and domain dataclasses.

Content tables mirror what the content store owns; the engine only reads
them.  Attempt and test-attempt tables are append-only logs; item and
section progress are single-row-per-key projections of those logs.
"""

from __future__ import annotations

import datetime
import uuid
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.engine import Base

# --- Content (read-only for this service) ---


class CourseRow(Base):
    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)


class SectionRow(Base):
    __tablename__ = "sections"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("courses.id"), nullable=False
    )
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    test_questions_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=6
    )
    pass_percent: Mapped[int] = mapped_column(Integer, nullable=False, default=60)

    __table_args__ = (
        UniqueConstraint("course_id", "slug"),
        CheckConstraint(
            "test_questions_count >= 1", name="ck_sections_test_questions_count"
        ),
        CheckConstraint(
            "pass_percent BETWEEN 0 AND 100", name="ck_sections_pass_percent"
        ),
    )


class IslandRow(Base):
    __tablename__ = "islands"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("sections.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(
        String(16), nullable=False, default="normal"
    )  # normal|test
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ExerciseRow(Base):
    __tablename__ = "exercises"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    answer_type: Mapped[str] = mapped_column(
        String(16), nullable=False
    )  # abcd|numeric
    points_max: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    prompt: Mapped[str] = mapped_column(Text, nullable=False, default="")


class ExerciseAnswerKeyRow(Base):
    """Kept apart from exercises so learner-facing reads never see keys."""

    __tablename__ = "exercise_answer_keys"

    exercise_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("exercises.id"), primary_key=True
    )
    answer_key: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)


class IslandItemRow(Base):
    __tablename__ = "island_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    island_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("islands.id"), nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    item_type: Mapped[str] = mapped_column(
        String(16), nullable=False
    )  # video|exercise
    exercise_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("exercises.id"), nullable=True
    )

    __table_args__ = (Index("ix_island_items_island_order", "island_id", "order_index"),)


# --- Attempt log (append-only) ---


class ExerciseAttemptRow(Base):
    __tablename__ = "exercise_attempts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    exercise_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("exercises.id"), nullable=False
    )
    island_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("islands.id"), nullable=False
    )
    answer: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    points_awarded: Mapped[int] = mapped_column(Integer, nullable=False)
    time_spent_sec: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    __table_args__ = (
        Index(
            "ix_exercise_attempts_latest",
            "user_id",
            "island_id",
            "exercise_id",
            "created_at",
        ),
    )


# --- Progress ---


class IslandItemProgressRow(Base):
    __tablename__ = "island_item_progress"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    island_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("island_items.id"), primary_key=True
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_answer: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)


class SectionTestAttemptRow(Base):
    __tablename__ = "section_test_attempts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    section_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("sections.id"), nullable=False
    )
    island_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("islands.id"), nullable=False
    )
    score_percent: Mapped[int] = mapped_column(Integer, nullable=False)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    correct_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    __table_args__ = (
        Index("ix_section_test_attempts_user_section", "user_id", "section_id"),
    )


class SectionProgressRow(Base):
    """Projection of section_test_attempts: best score per learner+section."""

    __tablename__ = "section_progress"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    section_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("sections.id"), primary_key=True
    )
    best_test_score_percent: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    points_done: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    points_catchup: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    points_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
