"""Tests for the exercise attempt endpoints."""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

from app.repos.bundle import RepoBundle
from tests.conftest import auth, build_section, mint_token


def _post(client: TestClient, token: str, exercise_id, island_id, answer) -> dict:
    resp = client.post(
        "/v1/attempts",
        json={
            "exercise_id": str(exercise_id),
            "island_id": str(island_id),
            "answer": answer,
        },
        headers=auth(token),
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


# ---- 401 ----


def test_attempt_rejects_missing_token(client: TestClient) -> None:
    resp = client.post(
        "/v1/attempts",
        json={"exercise_id": str(uuid4()), "island_id": str(uuid4()), "answer": {}},
    )
    assert resp.status_code == 401


# ---- grading ----


def test_correct_answer_completes_practice_item(
    client: TestClient, token: str, repos: RepoBundle
) -> None:
    content = build_section(repos.content, points_max=2)
    ex = content.practice_exercises[0]

    body = _post(client, token, ex.id, content.practice.id, {"choice": "b"})
    assert body == {"is_correct": True, "points_awarded": 2}

    resp = client.get(f"/v1/progress/islands/{content.practice.id}", headers=auth(token))
    assert resp.json()["completedExercises"] == 1
    assert resp.json()["earnedPoints"] == 2


def test_wrong_answer_does_not_complete(
    client: TestClient, token: str, repos: RepoBundle
) -> None:
    content = build_section(repos.content)
    ex = content.practice_exercises[0]

    body = _post(client, token, ex.id, content.practice.id, {"choice": "D"})
    assert body == {"is_correct": False, "points_awarded": 0}

    resp = client.get(f"/v1/progress/islands/{content.practice.id}", headers=auth(token))
    assert resp.json()["completedExercises"] == 0


def test_completion_survives_later_wrong_answer(
    client: TestClient, token: str, repos: RepoBundle
) -> None:
    content = build_section(repos.content)
    ex = content.practice_exercises[0]

    _post(client, token, ex.id, content.practice.id, {"choice": "B"})
    _post(client, token, ex.id, content.practice.id, {"choice": "A"})

    resp = client.get(f"/v1/progress/islands/{content.practice.id}", headers=auth(token))
    assert resp.json()["completedExercises"] == 1


def test_test_island_answer_waits_for_submission(
    client: TestClient, token: str, repos: RepoBundle
) -> None:
    content = build_section(repos.content)
    ex = content.test_exercises[0]

    body = _post(client, token, ex.id, content.test.id, {"value": "1,0"})
    assert body["is_correct"] is True

    resp = client.get(f"/v1/progress/islands/{content.test.id}", headers=auth(token))
    assert resp.json()["completedExercises"] == 0


def test_numeric_garbage_is_graded_not_rejected(
    client: TestClient, token: str, repos: RepoBundle
) -> None:
    content = build_section(repos.content)
    ex = content.test_exercises[0]

    body = _post(client, token, ex.id, content.test.id, {"value": "abc"})
    assert body == {"is_correct": False, "points_awarded": 0}


# ---- errors ----


def test_wrong_payload_type_is_422(
    client: TestClient, token: str, repos: RepoBundle
) -> None:
    content = build_section(repos.content)
    ex = content.practice_exercises[0]

    resp = client.post(
        "/v1/attempts",
        json={
            "exercise_id": str(ex.id),
            "island_id": str(content.practice.id),
            "answer": {"choice": 3},
        },
        headers=auth(token),
    )
    assert resp.status_code == 422
    assert resp.json() == {
        "error": "invalid_answer",
        "detail": "answer.choice must be a string",
    }


def test_unknown_exercise_is_404(client: TestClient, token: str, repos: RepoBundle) -> None:
    content = build_section(repos.content)

    resp = client.post(
        "/v1/attempts",
        json={"exercise_id": str(uuid4()), "island_id": str(content.practice.id)},
        headers=auth(token),
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "exercise_not_found"


def test_unknown_island_is_404(client: TestClient, token: str, repos: RepoBundle) -> None:
    content = build_section(repos.content)
    ex = content.practice_exercises[0]

    resp = client.post(
        "/v1/attempts",
        json={"exercise_id": str(ex.id), "island_id": str(uuid4()), "answer": {}},
        headers=auth(token),
    )
    assert resp.status_code == 404
    assert resp.json() == {"error": "island_not_found", "detail": "Island not found"}


# ---- history ----


def test_history_lists_own_attempts_newest_first(
    client: TestClient, token: str, repos: RepoBundle
) -> None:
    content = build_section(repos.content)
    ex = content.test_exercises[0]
    _post(client, token, ex.id, content.test.id, {"value": "5"})
    _post(client, token, ex.id, content.test.id, {"value": "1"})
    _post(client, mint_token("someone-else"), ex.id, content.test.id, {"value": "1"})

    resp = client.get(
        "/v1/attempts", params={"exercise_id": str(ex.id)}, headers=auth(token)
    )
    assert resp.status_code == 200
    rows = resp.json()
    assert [r["answer"] for r in rows] == [{"value": "1"}, {"value": "5"}]
    assert [r["is_correct"] for r in rows] == [True, False]
