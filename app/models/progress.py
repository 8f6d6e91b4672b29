from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


@dataclass(frozen=True, slots=True)
class Attempt:
    """One graded submission.  Append-only; never mutated after insert.

    ``is_correct`` and ``points_awarded`` are fixed at write time so that a
    later change to the answer key does not rewrite history.
    """

    id: UUID
    learner_id: str
    exercise_id: UUID
    island_id: UUID
    answer: dict[str, Any]
    is_correct: bool
    points_awarded: int
    time_spent_sec: int
    created_at: datetime.datetime

    @staticmethod
    def new(
        *,
        learner_id: str,
        exercise_id: UUID,
        island_id: UUID,
        answer: dict[str, Any],
        is_correct: bool,
        points_awarded: int,
        time_spent_sec: int = 0,
        created_at: datetime.datetime | None = None,
    ) -> Attempt:
        return Attempt(
            id=uuid4(),
            learner_id=learner_id,
            exercise_id=exercise_id,
            island_id=island_id,
            answer=answer,
            is_correct=is_correct,
            points_awarded=points_awarded,
            time_spent_sec=max(0, time_spent_sec),
            created_at=created_at or utcnow(),
        )


@dataclass(frozen=True, slots=True)
class ItemProgress:
    """Per (learner, island item) completion.  Only ever moves forward."""

    learner_id: str
    island_item_id: UUID
    is_completed: bool = False
    points_earned: int = 0
    completed_at: datetime.datetime | None = None
    last_answer: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class SectionTestAttempt:
    """History snapshot of one test submission."""

    id: UUID
    learner_id: str
    section_id: UUID
    island_id: UUID
    score_percent: int
    passed: bool
    correct_count: int
    created_at: datetime.datetime

    @staticmethod
    def new(
        *,
        learner_id: str,
        section_id: UUID,
        island_id: UUID,
        score_percent: int,
        passed: bool,
        correct_count: int,
    ) -> SectionTestAttempt:
        return SectionTestAttempt(
            id=uuid4(),
            learner_id=learner_id,
            section_id=section_id,
            island_id=island_id,
            score_percent=score_percent,
            passed=passed,
            correct_count=correct_count,
            created_at=utcnow(),
        )


@dataclass(frozen=True, slots=True)
class SectionProgress:
    """Best-known test state per (learner, section).

    Like CourseProgress in the event-sourced design: a projection of the
    SectionTestAttempt history, rebuildable from it.
    """

    learner_id: str
    section_id: UUID
    best_test_score_percent: int = 0
    completed: bool = False
    points_done: int = 0
    points_catchup: int = 0
    points_total: int = 0
    updated_at: datetime.datetime | None = None


# ---------------------------------------------------------------------------
# Read models (computed on read, never stored)
# ---------------------------------------------------------------------------


def round_percent(part: int, total: int) -> int:
    """``part / total`` as a whole percent, halves rounded up, clamped to 0..100."""
    if total <= 0:
        return 0
    return max(0, min(100, (200 * part + total) // (2 * total)))


def progress_state(completed: int, total: int) -> str:
    """none|in_progress|done.  An empty container is never done."""
    if total <= 0 or completed <= 0:
        return "none"
    if completed < total:
        return "in_progress"
    return "done"


@dataclass(frozen=True, slots=True)
class IslandStats:
    island_id: UUID
    total_exercises: int = 0
    completed_exercises: int = 0
    earned_points: int = 0
    max_points: int = 0

    @property
    def state(self) -> str:
        return progress_state(self.completed_exercises, self.total_exercises)

    @property
    def is_done(self) -> bool:
        return self.state == "done"


@dataclass(frozen=True, slots=True)
class SectionStats:
    section_id: UUID
    completed_islands: int = 0
    total_islands: int = 0
    earned_points: int = 0
    max_points: int = 0
    islands: tuple[IslandStats, ...] = field(default_factory=tuple)

    @property
    def percent(self) -> int:
        return round_percent(self.completed_islands, self.total_islands)

    @property
    def state(self) -> str:
        return progress_state(self.completed_islands, self.total_islands)


@dataclass(frozen=True, slots=True)
class CourseStats:
    course_id: UUID
    sections: tuple[SectionStats, ...] = field(default_factory=tuple)
