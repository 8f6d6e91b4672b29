"""Exercise attempt endpoints.

POST /v1/attempts is the direct exercise flow:
  Client -> POST /v1/attempts {exercise_id, island_id, answer}
  -> grade against the answer key, append to the attempt log
  -> correct answer on a normal island: mark the island item complete
  -> 200 {is_correct, points_awarded}

On test islands the answer is graded and logged the same way, but item
completion waits for POST /v1/tests/submit.
"""

from __future__ import annotations

import datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.api.dependencies import (
    Repos,
    get_attempt_grader,
    get_progress_aggregator,
    require_user,
)
from app.models.principal import Principal
from app.services.attempt_grader import AttemptGrader
from app.services.errors import IslandNotFound
from app.services.progress_aggregator import ProgressAggregator

router = APIRouter(prefix="/v1/attempts", tags=["attempts"])


class AttemptIn(BaseModel):
    exercise_id: UUID
    island_id: UUID
    answer: dict[str, Any] | None = None
    time_spent_sec: float | None = 0


class AttemptOut(BaseModel):
    is_correct: bool
    points_awarded: int


class AttemptHistoryOut(BaseModel):
    id: str
    exercise_id: str
    island_id: str
    answer: dict[str, Any]
    is_correct: bool
    points_awarded: int
    time_spent_sec: int
    created_at: datetime.datetime


@router.post("", response_model=AttemptOut)
async def record_attempt(
    body: AttemptIn,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Repos,
    grader: Annotated[AttemptGrader, Depends(get_attempt_grader)],
    aggregator: Annotated[ProgressAggregator, Depends(get_progress_aggregator)],
) -> AttemptOut:
    island = await repos.content.get_island(body.island_id)
    if island is None:
        raise IslandNotFound(body.island_id)

    outcome = await grader.record_attempt(
        principal.user_id,
        body.exercise_id,
        body.island_id,
        body.answer,
        body.time_spent_sec,
    )

    if outcome.is_correct and not island.is_test:
        await aggregator.complete_exercise_in_island(
            principal.user_id,
            body.island_id,
            body.exercise_id,
            outcome.points_awarded,
            outcome.attempt.answer,
        )

    await repos.commit()
    return AttemptOut(
        is_correct=outcome.is_correct, points_awarded=outcome.points_awarded
    )


@router.get("", response_model=list[AttemptHistoryOut])
async def list_attempts(
    principal: Annotated[Principal, Depends(require_user)],
    grader: Annotated[AttemptGrader, Depends(get_attempt_grader)],
    exercise_id: Annotated[list[UUID], Query()],
) -> list[AttemptHistoryOut]:
    """The caller's own attempts on the given exercises, newest first."""
    attempts = await grader.history(principal.user_id, exercise_id)
    return [
        AttemptHistoryOut(
            id=str(a.id),
            exercise_id=str(a.exercise_id),
            island_id=str(a.island_id),
            answer=a.answer,
            is_correct=a.is_correct,
            points_awarded=a.points_awarded,
            time_spent_sec=a.time_spent_sec,
            created_at=a.created_at,
        )
        for a in attempts
    ]
