"""Sample course for local development without a database.

Loaded at startup when SEED_DEMO_CONTENT is on (the default in dev with
no DATABASE_URL), so the endpoints can be exercised straight away.
"""

from __future__ import annotations

import logging
from uuid import UUID

from app.models.content import (
    AnswerKey,
    Course,
    Exercise,
    Island,
    IslandItem,
    Section,
)
from app.repos.content_repo import InMemoryContentRepo

logger = logging.getLogger(__name__)

DEMO_COURSE_ID = UUID("00000000-0000-0000-0000-000000000001")
DEMO_SECTION_ID = UUID("00000000-0000-0000-0000-000000000002")
DEMO_PRACTICE_ISLAND_ID = UUID("00000000-0000-0000-0000-000000000003")
DEMO_TEST_ISLAND_ID = UUID("00000000-0000-0000-0000-000000000004")

# (prompt, answer_type, key payload)
_PRACTICE = [
    ("2 + 2 = ?", "abcd", {"options": {"A": "3", "B": "4", "C": "5", "D": "22"}, "correct": "B"}),
    ("Half of 5", "numeric", {"value": 2.5}),
]
_TEST = [
    ("3 * 4", "numeric", {"value": 12}),
    ("10 / 4", "numeric", {"value": "2,5"}),
    ("Largest prime below 10", "abcd", {"options": {"A": "5", "B": "9", "C": "7", "D": "8"}, "correct": "C"}),
    ("7 - 10", "numeric", {"value": -3}),
    ("Square root of 81", "abcd", {"options": {"A": "9", "B": "8", "C": "18", "D": "3"}, "correct": "A"}),
    ("0.1 + 0.2 (one decimal)", "numeric", {"value": 0.3}),
]


def _add_exercises(
    repo: InMemoryContentRepo,
    island_id: UUID,
    specs: list[tuple[str, str, dict]],
    *,
    first_index: int = 0,
) -> None:
    for offset, (prompt, answer_type, payload) in enumerate(specs):
        exercise = Exercise.new(answer_type=answer_type, prompt=prompt)
        repo.add_exercise(exercise, AnswerKey(exercise_id=exercise.id, payload=payload))
        repo.add_item(
            IslandItem.new(
                island_id=island_id,
                order_index=first_index + offset,
                item_type="exercise",
                exercise_id=exercise.id,
            )
        )


def seed_demo_content(repo: InMemoryContentRepo) -> None:
    """Load the sample course. Skip if already present."""
    if repo.has_course(DEMO_COURSE_ID):
        return

    repo.add_course(Course(id=DEMO_COURSE_ID, slug="arithmetic-basics", title="Arithmetic basics"))
    repo.add_section(
        Section(
            id=DEMO_SECTION_ID,
            course_id=DEMO_COURSE_ID,
            slug="warm-up",
            title="Warm-up",
        )
    )
    repo.add_island(
        Island(id=DEMO_PRACTICE_ISLAND_ID, section_id=DEMO_SECTION_ID, title="Practice")
    )
    repo.add_island(
        Island(
            id=DEMO_TEST_ISLAND_ID,
            section_id=DEMO_SECTION_ID,
            title="Section test",
            type="test",
            order_index=1,
        )
    )

    repo.add_item(
        IslandItem.new(island_id=DEMO_PRACTICE_ISLAND_ID, order_index=0, item_type="video")
    )
    _add_exercises(repo, DEMO_PRACTICE_ISLAND_ID, _PRACTICE, first_index=1)
    _add_exercises(repo, DEMO_TEST_ISLAND_ID, _TEST)

    logger.info("Demo content loaded  course_id=%s", DEMO_COURSE_ID)
