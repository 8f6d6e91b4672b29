"""Grade one exercise attempt and append it to the attempt log."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any
from uuid import UUID

from app.core.metrics import ATTEMPTS_GRADED
from app.models.answer import parse_answer
from app.models.grading import GradeOutcome
from app.models.progress import Attempt
from app.repos.attempt_repo import AttemptRepo
from app.repos.content_repo import ContentRepo
from app.services import answer_key_codec
from app.services.errors import AnswerKeyMissing, ExerciseNotFound

logger = logging.getLogger(__name__)


class AttemptGrader:
    """Decides "did they get it right" and records the attempt.

    What a correct answer means for progress is the caller's business:
    the exercise flow marks the island item complete straight away, a test
    defers that to submission.  This class never touches item progress.
    """

    def __init__(self, content: ContentRepo, attempts: AttemptRepo) -> None:
        self._content = content
        self._attempts = attempts

    async def record_attempt(
        self,
        learner_id: str,
        exercise_id: UUID,
        island_id: UUID,
        answer: Mapping[str, Any] | None,
        time_spent_sec: int | float | None = 0,
    ) -> GradeOutcome:
        exercise = await self._content.get_exercise(exercise_id)
        if exercise is None:
            logger.warning("Attempt rejected: exercise=%s not found", exercise_id)
            raise ExerciseNotFound(exercise_id)

        # Validate the payload shape (and the answer_type) before anything
        # else is read or written.
        submitted = parse_answer(exercise.answer_type, answer)

        key = await self._content.get_answer_key(exercise_id)
        if key is None or not key.payload:
            logger.error(
                "Content integrity fault: exercise=%s has no answer key", exercise_id
            )
            raise AnswerKeyMissing(exercise_id)

        correct = answer_key_codec.is_correct(exercise.answer_type, key.payload, submitted)
        points = exercise.points_max if correct else 0

        attempt = Attempt.new(
            learner_id=learner_id,
            exercise_id=exercise.id,
            island_id=island_id,
            answer=submitted.to_json(),
            is_correct=correct,
            points_awarded=points,
            time_spent_sec=_clamp_seconds(time_spent_sec),
        )
        await self._attempts.add(attempt)

        ATTEMPTS_GRADED.labels(
            answer_type=exercise.answer_type,
            result="correct" if correct else "incorrect",
        ).inc()
        logger.info(
            "Attempt graded learner=%s exercise=%s correct=%s points=%d",
            learner_id,
            exercise.id,
            correct,
            points,
            extra={"learner_id": learner_id, "exercise_id": str(exercise.id)},
        )
        return GradeOutcome(is_correct=correct, points_awarded=points, attempt=attempt)

    async def history(
        self, learner_id: str, exercise_ids: Iterable[UUID]
    ) -> list[Attempt]:
        """Every recorded attempt on these exercises, newest first."""
        return await self._attempts.list_for_exercises(learner_id, exercise_ids)


def _clamp_seconds(raw: int | float | None) -> int:
    try:
        return max(0, int(raw or 0))
    except (TypeError, ValueError, OverflowError):
        return 0
