from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest
from prometheus_client import REGISTRY

from app.models.content import Exercise
from app.repos.bundle import RepoBundle
from app.services.errors import AnswerKeyMissing, ExerciseNotFound, InvalidAnswer
from tests.conftest import build_section, services


def _sample(name: str, labels: dict) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels)
    return value if value is not None else 0.0


def test_correct_answer_awards_points_max(repos: RepoBundle) -> None:
    content = build_section(repos.content, points_max=3)
    grader, _, _ = services(repos)
    ex = content.practice_exercises[0]

    outcome = asyncio.run(
        grader.record_attempt("l1", ex.id, content.practice.id, {"choice": "b"})
    )

    assert outcome.is_correct is True
    assert outcome.points_awarded == 3
    assert outcome.attempt.answer == {"choice": "b"}


def test_wrong_answer_awards_nothing_but_is_logged(repos: RepoBundle) -> None:
    content = build_section(repos.content)
    grader, _, _ = services(repos)
    ex = content.practice_exercises[0]

    outcome = asyncio.run(
        grader.record_attempt("l1", ex.id, content.practice.id, {"choice": "A"})
    )

    assert outcome.is_correct is False
    assert outcome.points_awarded == 0
    history = asyncio.run(grader.history("l1", [ex.id]))
    assert [a.id for a in history] == [outcome.attempt.id]


def test_every_attempt_is_appended(repos: RepoBundle) -> None:
    content = build_section(repos.content)
    grader, _, _ = services(repos)
    ex = content.test_exercises[0]

    for value in ("9", "1", "7"):
        asyncio.run(grader.record_attempt("l1", ex.id, content.test.id, {"value": value}))

    history = asyncio.run(grader.history("l1", [ex.id]))
    assert [a.answer["value"] for a in history] == ["7", "1", "9"]


def test_history_is_per_learner(repos: RepoBundle) -> None:
    content = build_section(repos.content)
    grader, _, _ = services(repos)
    ex = content.test_exercises[0]

    asyncio.run(grader.record_attempt("l1", ex.id, content.test.id, {"value": 1}))
    asyncio.run(grader.record_attempt("l2", ex.id, content.test.id, {"value": 1}))

    assert len(asyncio.run(grader.history("l1", [ex.id]))) == 1


def test_missing_answer_is_graded_incorrect(repos: RepoBundle) -> None:
    content = build_section(repos.content)
    grader, _, _ = services(repos)
    ex = content.test_exercises[0]

    outcome = asyncio.run(grader.record_attempt("l1", ex.id, content.test.id, None))

    assert outcome.is_correct is False
    assert outcome.attempt.answer == {"value": None}


def test_negative_time_spent_is_clamped(repos: RepoBundle) -> None:
    content = build_section(repos.content)
    grader, _, _ = services(repos)
    ex = content.test_exercises[0]

    outcome = asyncio.run(
        grader.record_attempt("l1", ex.id, content.test.id, {"value": 1}, -12)
    )

    assert outcome.attempt.time_spent_sec == 0


def test_unknown_exercise_raises_not_found(repos: RepoBundle) -> None:
    content = build_section(repos.content)
    grader, _, _ = services(repos)

    with pytest.raises(ExerciseNotFound):
        asyncio.run(grader.record_attempt("l1", uuid4(), content.practice.id, {}))


def test_invalid_payload_writes_nothing(repos: RepoBundle) -> None:
    content = build_section(repos.content)
    grader, _, _ = services(repos)
    ex = content.practice_exercises[0]

    with pytest.raises(InvalidAnswer):
        asyncio.run(grader.record_attempt("l1", ex.id, content.practice.id, {"choice": 1}))

    assert asyncio.run(grader.history("l1", [ex.id])) == []


def test_exercise_without_key_raises(repos: RepoBundle) -> None:
    content = build_section(repos.content)
    keyless = Exercise.new(answer_type="numeric")
    repos.content.add_exercise(keyless)
    grader, _, _ = services(repos)

    with pytest.raises(AnswerKeyMissing):
        asyncio.run(grader.record_attempt("l1", keyless.id, content.test.id, {"value": 1}))

    assert asyncio.run(grader.history("l1", [keyless.id])) == []


def test_graded_counter_increments(repos: RepoBundle) -> None:
    content = build_section(repos.content)
    grader, _, _ = services(repos)
    ex = content.test_exercises[0]
    labels = {"answer_type": "numeric", "result": "correct"}

    before = _sample("attempts_graded_total", labels)
    asyncio.run(grader.record_attempt("l1", ex.id, content.test.id, {"value": "1,0"}))
    after = _sample("attempts_graded_total", labels)

    assert after - before == 1
