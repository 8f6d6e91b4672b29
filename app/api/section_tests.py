"""Section test submission endpoint.

  Client -> POST /v1/tests/submit {island_id}
  -> score latest attempt per test exercise (missing = wrong)
  -> append section_test_attempts snapshot
  -> upsert section_progress best score
  -> 200 TestResult

Response field names are a published contract with the course frontend
(``answeredCount``, ``perQuestion``, ... are camelCase on purpose).
"""

from __future__ import annotations

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.dependencies import Repos, get_test_session, require_user
from app.models.grading import TestResult
from app.models.principal import Principal
from app.services.test_session import TestSession

router = APIRouter(prefix="/v1/tests", tags=["tests"])


class SubmitTestIn(BaseModel):
    island_id: UUID


class QuestionOut(BaseModel):
    index: int
    exercise_id: str
    answered: bool
    is_correct: bool
    answer_type: str | None
    user_answer: dict[str, Any] | None
    correct_answer: Any


class TestResultOut(BaseModel):
    test_questions_count: int
    pass_percent: int
    answeredCount: int
    missingCount: int
    correctCount: int
    score_percent: int
    passed: bool
    best_test_score_percent: int
    perQuestion: list[QuestionOut]

    @staticmethod
    def from_result(result: TestResult) -> TestResultOut:
        return TestResultOut(
            test_questions_count=result.test_questions_count,
            pass_percent=result.pass_percent,
            answeredCount=result.answered_count,
            missingCount=result.missing_count,
            correctCount=result.correct_count,
            score_percent=result.score_percent,
            passed=result.passed,
            best_test_score_percent=result.best_test_score_percent,
            perQuestion=[
                QuestionOut(
                    index=q.index,
                    exercise_id=str(q.exercise_id),
                    answered=q.answered,
                    is_correct=q.is_correct,
                    answer_type=q.answer_type,
                    user_answer=q.user_answer,
                    correct_answer=q.correct_answer,
                )
                for q in result.per_question
            ],
        )


@router.post("/submit", response_model=TestResultOut)
async def submit_test(
    body: SubmitTestIn,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Repos,
    session: Annotated[TestSession, Depends(get_test_session)],
) -> TestResultOut:
    result = await session.submit_test(principal.user_id, body.island_id)
    await repos.commit()
    return TestResultOut.from_result(result)
