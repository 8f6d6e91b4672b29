"""Section test submission.

A test island holds exactly ``test_questions_count`` exercises.  Learners
answer them one at a time through the normal attempt endpoint (each answer
is graded and logged on arrival); submitting the test then scores the
latest attempt per exercise:

  1. load the island's exercises in order
  2. latest attempt per exercise by this learner in this island
  3. unanswered counts as wrong, and stays in the denominator
  4. score_percent = round(correct / test_questions_count * 100)
  5. passed = score_percent >= pass_percent
  6. append a SectionTestAttempt snapshot
  7. best score = max(previous best, score), upserted atomically
  8. mark correctly answered items complete

Resubmitting without new attempts reproduces the same score; the best
score is unchanged (max is idempotent) but a new snapshot is appended.
"""

from __future__ import annotations

import logging
from uuid import UUID

from app.core.metrics import TEST_SCORE, TEST_SUBMISSIONS
from app.models.grading import QuestionResult, TestResult
from app.models.progress import SectionProgress, SectionTestAttempt, round_percent
from app.repos.attempt_repo import AttemptRepo
from app.repos.content_repo import ContentRepo
from app.repos.progress_repo import ProgressRepo
from app.services import answer_key_codec
from app.services.errors import (
    InvalidSectionConfig,
    IslandNotFound,
    NotATestIsland,
    QuestionCountMismatch,
    SectionNotFound,
)
from app.services.progress_aggregator import ProgressAggregator

logger = logging.getLogger(__name__)


def score_percent(correct: int, total: int) -> int:
    """Integer percentage, rounding halves up."""
    return round_percent(correct, total)


class TestSession:
    __test__ = False  # not a pytest class

    def __init__(
        self,
        content: ContentRepo,
        attempts: AttemptRepo,
        progress: ProgressRepo,
        aggregator: ProgressAggregator,
    ) -> None:
        self._content = content
        self._attempts = attempts
        self._progress = progress
        self._aggregator = aggregator

    async def submit_test(self, learner_id: str, island_id: UUID) -> TestResult:
        island = await self._content.get_island(island_id)
        if island is None:
            raise IslandNotFound(island_id)
        if not island.is_test:
            raise NotATestIsland(island_id)

        section = await self._content.get_section(island.section_id)
        if section is None:
            raise SectionNotFound(island.section_id)
        if section.test_questions_count < 1:
            raise InvalidSectionConfig(section.id, "test_questions_count must be >= 1")
        if not 0 <= section.pass_percent <= 100:
            raise InvalidSectionConfig(section.id, "pass_percent must be between 0 and 100")

        items = await self._content.list_exercise_items([island_id])
        ordered_ids = [it.exercise_id for it in items if it.exercise_id is not None]
        expected = section.test_questions_count
        if len(ordered_ids) != expected:
            logger.error(
                "Test island=%s misconfigured: expected %d exercises, found %d",
                island_id,
                expected,
                len(ordered_ids),
            )
            raise QuestionCountMismatch(expected, len(ordered_ids))

        latest = await self._attempts.latest_for_island(learner_id, island_id, ordered_ids)
        exercises = await self._content.get_exercises(ordered_ids)
        keys = await self._content.get_answer_keys(ordered_ids)

        per_question: list[QuestionResult] = []
        for idx, exercise_id in enumerate(ordered_ids, start=1):
            attempt = latest.get(exercise_id)
            exercise = exercises.get(exercise_id)
            answer_type = exercise.answer_type if exercise is not None else None
            key = keys.get(exercise_id)
            per_question.append(
                QuestionResult(
                    index=idx,
                    exercise_id=exercise_id,
                    answered=attempt is not None,
                    is_correct=attempt is not None and attempt.is_correct,
                    answer_type=answer_type,
                    user_answer=attempt.answer if attempt is not None else None,
                    correct_answer=answer_key_codec.correct_answer(
                        answer_type, key.payload if key is not None else None
                    ),
                )
            )

        correct_count = sum(1 for q in per_question if q.is_correct)
        score = score_percent(correct_count, expected)
        passed = score >= section.pass_percent

        await self._progress.add_test_attempt(
            SectionTestAttempt.new(
                learner_id=learner_id,
                section_id=section.id,
                island_id=island_id,
                score_percent=score,
                passed=passed,
                correct_count=correct_count,
            )
        )
        section_progress = await self._progress.upsert_section_best(
            learner_id, section.id, score, section.pass_percent
        )

        # Test and normal islands do not share items in the current content
        # model; syncing anyway keeps island views right if they ever do.
        for q in per_question:
            if not q.is_correct:
                continue
            exercise = exercises.get(q.exercise_id)
            await self._aggregator.complete_exercise_in_island(
                learner_id,
                island_id,
                q.exercise_id,
                exercise.points_max if exercise is not None else 0,
                q.user_answer,
            )

        TEST_SUBMISSIONS.labels(result="passed" if passed else "failed").inc()
        TEST_SCORE.observe(score)
        logger.info(
            "Test submitted learner=%s section=%s score=%d%% passed=%s best=%d%%",
            learner_id,
            section.id,
            score,
            passed,
            section_progress.best_test_score_percent,
            extra={
                "learner_id": learner_id,
                "island_id": str(island_id),
                "section_id": str(section.id),
            },
        )

        return TestResult(
            section_id=section.id,
            test_questions_count=expected,
            pass_percent=section.pass_percent,
            correct_count=correct_count,
            score_percent=score,
            passed=passed,
            best_test_score_percent=section_progress.best_test_score_percent,
            per_question=tuple(per_question),
        )

    async def get_section_progress(
        self, learner_id: str, section_id: UUID
    ) -> tuple[SectionProgress, list[SectionTestAttempt]]:
        """Stored best-score state plus the submission history, newest first."""
        section = await self._content.get_section(section_id)
        if section is None:
            raise SectionNotFound(section_id)
        current = await self._progress.get_section_progress(learner_id, section_id)
        history = await self._progress.list_test_attempts(learner_id, section_id)
        return current or SectionProgress(learner_id=learner_id, section_id=section_id), history

    async def rebuild_section_progress(
        self, learner_id: str, section_id: UUID
    ) -> SectionProgress:
        """Recompute the best-score record from the test history.

        Repairs a submission that appended its snapshot but failed before the
        best-score upsert.  Safe to run any number of times.
        """
        section = await self._content.get_section(section_id)
        if section is None:
            raise SectionNotFound(section_id)

        history = await self._progress.list_test_attempts(learner_id, section_id)
        if not history:
            current = await self._progress.get_section_progress(learner_id, section_id)
            return current or SectionProgress(learner_id=learner_id, section_id=section_id)

        best = max(h.score_percent for h in history)
        rebuilt = await self._progress.upsert_section_best(
            learner_id, section_id, best, section.pass_percent
        )
        logger.info(
            "Section progress rebuilt learner=%s section=%s from %d snapshots best=%d%%",
            learner_id,
            section_id,
            len(history),
            rebuilt.best_test_score_percent,
        )
        return rebuilt
