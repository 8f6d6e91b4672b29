"""Course content as seen by the scoring engine.

Owned by the content store; the engine only reads these.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4

ANSWER_TYPES = ("abcd", "numeric")
ISLAND_TYPES = ("normal", "test")
ITEM_TYPES = ("video", "exercise")


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    slug: str
    title: str

    @staticmethod
    def new(*, slug: str, title: str) -> Course:
        return Course(id=uuid4(), slug=slug, title=title)


@dataclass(frozen=True, slots=True)
class Section:
    id: UUID
    course_id: UUID
    slug: str
    title: str
    order_index: int = 0
    test_questions_count: int = 6
    pass_percent: int = 60

    @staticmethod
    def new(
        *,
        course_id: UUID,
        slug: str,
        title: str,
        order_index: int = 0,
        test_questions_count: int = 6,
        pass_percent: int = 60,
    ) -> Section:
        if test_questions_count < 1:
            raise ValueError("test_questions_count must be >= 1")
        if not 0 <= pass_percent <= 100:
            raise ValueError("pass_percent must be between 0 and 100")
        return Section(
            id=uuid4(),
            course_id=course_id,
            slug=slug,
            title=title,
            order_index=order_index,
            test_questions_count=test_questions_count,
            pass_percent=pass_percent,
        )


@dataclass(frozen=True, slots=True)
class Island:
    id: UUID
    section_id: UUID
    title: str
    type: str = "normal"  # normal|test
    order_index: int = 0
    is_active: bool = True

    @property
    def is_test(self) -> bool:
        return self.type == "test"

    @staticmethod
    def new(
        *,
        section_id: UUID,
        title: str,
        type: str = "normal",
        order_index: int = 0,
        is_active: bool = True,
    ) -> Island:
        if type not in ISLAND_TYPES:
            raise ValueError(f"island type must be normal|test (got {type!r})")
        return Island(
            id=uuid4(),
            section_id=section_id,
            title=title,
            type=type,
            order_index=order_index,
            is_active=is_active,
        )


@dataclass(frozen=True, slots=True)
class IslandItem:
    id: UUID
    island_id: UUID
    order_index: int
    item_type: str  # video|exercise
    exercise_id: UUID | None = None

    @property
    def is_exercise(self) -> bool:
        return self.item_type == "exercise" and self.exercise_id is not None

    @staticmethod
    def new(
        *,
        island_id: UUID,
        order_index: int,
        item_type: str,
        exercise_id: UUID | None = None,
    ) -> IslandItem:
        if item_type not in ITEM_TYPES:
            raise ValueError(f"item_type must be video|exercise (got {item_type!r})")
        if (item_type == "exercise") != (exercise_id is not None):
            raise ValueError("exercise_id is required for, and only for, exercises")
        return IslandItem(
            id=uuid4(),
            island_id=island_id,
            order_index=order_index,
            item_type=item_type,
            exercise_id=exercise_id,
        )


@dataclass(frozen=True, slots=True)
class Exercise:
    id: UUID
    answer_type: str  # abcd|numeric
    points_max: int = 1
    prompt: str = ""

    @staticmethod
    def new(*, answer_type: str, points_max: int = 1, prompt: str = "") -> Exercise:
        if points_max < 0:
            raise ValueError("points_max must be non-negative")
        return Exercise(
            id=uuid4(), answer_type=answer_type, points_max=points_max, prompt=prompt
        )


@dataclass(frozen=True, slots=True)
class AnswerKey:
    """Stored correct answer.

    ``payload`` keeps the stored JSON shape:
    abcd -> {"options": {"A": ..., "D": ...}, "correct": "B"}
    numeric -> {"value": 10}
    """

    exercise_id: UUID
    payload: dict[str, Any] = field(default_factory=dict)
