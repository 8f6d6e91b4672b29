from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from app.models.progress import Attempt


@dataclass(frozen=True, slots=True)
class GradeOutcome:
    is_correct: bool
    points_awarded: int
    attempt: Attempt


@dataclass(frozen=True, slots=True)
class QuestionResult:
    index: int  # 1-based, in island order
    exercise_id: UUID
    answered: bool
    is_correct: bool
    answer_type: str | None
    user_answer: dict[str, Any] | None
    correct_answer: Any


@dataclass(frozen=True, slots=True)
class TestResult:
    __test__ = False  # not a pytest class

    section_id: UUID
    test_questions_count: int
    pass_percent: int
    correct_count: int
    score_percent: int
    passed: bool
    best_test_score_percent: int
    per_question: tuple[QuestionResult, ...] = field(default_factory=tuple)

    @property
    def answered_count(self) -> int:
        return sum(1 for q in self.per_question if q.answered)

    @property
    def missing_count(self) -> int:
        return self.test_questions_count - self.answered_count
