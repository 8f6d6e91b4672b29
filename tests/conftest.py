from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.content import (
    AnswerKey,
    Course,
    Exercise,
    Island,
    IslandItem,
    Section,
)
from app.repos.bundle import RepoBundle, in_memory_bundle
from app.repos.content_repo import InMemoryContentRepo
from app.services import token_service
from app.services.attempt_grader import AttemptGrader
from app.services.progress_aggregator import ProgressAggregator
from app.services.test_session import TestSession

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_repos() -> RepoBundle:
    """Fresh, empty in-memory repositories for every test."""
    app.state.repos = in_memory_bundle()
    return app.state.repos


@pytest.fixture
def repos(reset_repos: RepoBundle) -> RepoBundle:
    return reset_repos


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "learner-1",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


@pytest.fixture
def token() -> str:
    """Token with default role (learner)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username="test-admin", roles=["admin"])


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Content builders
# ---------------------------------------------------------------------------


@dataclass
class SectionContent:
    """One section with a practice island and a test island.

    Practice exercises are abcd with correct answer "B".  Test exercise
    number i (0-based) is numeric with correct value i + 1.
    """

    course: Course
    section: Section
    practice: Island
    test: Island
    practice_exercises: list[Exercise] = field(default_factory=list)
    test_exercises: list[Exercise] = field(default_factory=list)


def add_exercise(
    content: InMemoryContentRepo,
    island: Island,
    order_index: int,
    answer_type: str,
    key: dict,
    *,
    points_max: int = 1,
) -> Exercise:
    exercise = Exercise.new(answer_type=answer_type, points_max=points_max)
    content.add_exercise(exercise, AnswerKey(exercise_id=exercise.id, payload=key))
    content.add_item(
        IslandItem.new(
            island_id=island.id,
            order_index=order_index,
            item_type="exercise",
            exercise_id=exercise.id,
        )
    )
    return exercise


def build_section(
    content: InMemoryContentRepo,
    *,
    course: Course | None = None,
    slug: str = "fractions",
    order_index: int = 0,
    practice_count: int = 2,
    test_count: int = 6,
    test_questions_count: int = 6,
    pass_percent: int = 60,
    points_max: int = 1,
) -> SectionContent:
    if course is None:
        course = Course.new(slug="math", title="Math")
        content.add_course(course)
    section = Section.new(
        course_id=course.id,
        slug=slug,
        title=slug.title(),
        order_index=order_index,
        test_questions_count=test_questions_count,
        pass_percent=pass_percent,
    )
    content.add_section(section)

    practice = Island.new(section_id=section.id, title="Practice", order_index=0)
    test = Island.new(section_id=section.id, title="Test", type="test", order_index=1)
    content.add_island(practice)
    content.add_island(test)

    built = SectionContent(course=course, section=section, practice=practice, test=test)
    content.add_item(IslandItem.new(island_id=practice.id, order_index=0, item_type="video"))
    for i in range(practice_count):
        built.practice_exercises.append(
            add_exercise(
                content,
                practice,
                i + 1,
                "abcd",
                {"options": {"A": "1", "B": "2", "C": "3", "D": "4"}, "correct": "B"},
                points_max=points_max,
            )
        )
    for i in range(test_count):
        built.test_exercises.append(
            add_exercise(content, test, i, "numeric", {"value": i + 1}, points_max=points_max)
        )
    return built


def services(repos: RepoBundle) -> tuple[AttemptGrader, ProgressAggregator, TestSession]:
    grader = AttemptGrader(repos.content, repos.attempts)
    aggregator = ProgressAggregator(repos.content, repos.progress)
    session = TestSession(repos.content, repos.attempts, repos.progress, aggregator)
    return grader, aggregator, session
