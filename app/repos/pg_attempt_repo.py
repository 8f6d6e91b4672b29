"""PostgreSQL implementation of AttemptRepo."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import ExerciseAttemptRow
from app.models.progress import Attempt
from app.repos.pg_errors import storage_errors


class PgAttemptRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, attempt: Attempt) -> None:
        row = ExerciseAttemptRow(
            id=attempt.id,
            user_id=attempt.learner_id,
            exercise_id=attempt.exercise_id,
            island_id=attempt.island_id,
            answer=attempt.answer,
            is_correct=attempt.is_correct,
            points_awarded=attempt.points_awarded,
            time_spent_sec=attempt.time_spent_sec,
            created_at=attempt.created_at,
        )
        with storage_errors("add_attempt"):
            self._session.add(row)
            await self._session.flush()

    async def latest_for_island(
        self, learner_id: str, island_id: UUID, exercise_ids: Iterable[UUID]
    ) -> dict[UUID, Attempt]:
        exercise_ids = list(exercise_ids)
        if not exercise_ids:
            return {}
        # DISTINCT ON keeps the first row per exercise in ORDER BY order,
        # i.e. the newest by created_at (id breaks exact-timestamp ties).
        stmt = (
            select(ExerciseAttemptRow)
            .where(
                ExerciseAttemptRow.user_id == learner_id,
                ExerciseAttemptRow.island_id == island_id,
                ExerciseAttemptRow.exercise_id.in_(exercise_ids),
            )
            .distinct(ExerciseAttemptRow.exercise_id)
            .order_by(
                ExerciseAttemptRow.exercise_id,
                ExerciseAttemptRow.created_at.desc(),
                ExerciseAttemptRow.id.desc(),
            )
        )
        with storage_errors("latest_attempts"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return {row.exercise_id: _row_to_attempt(row) for row in rows}

    async def list_for_exercises(
        self, learner_id: str, exercise_ids: Iterable[UUID]
    ) -> list[Attempt]:
        exercise_ids = list(exercise_ids)
        if not exercise_ids:
            return []
        stmt = (
            select(ExerciseAttemptRow)
            .where(
                ExerciseAttemptRow.user_id == learner_id,
                ExerciseAttemptRow.exercise_id.in_(exercise_ids),
            )
            .order_by(ExerciseAttemptRow.created_at.desc(), ExerciseAttemptRow.id.desc())
        )
        with storage_errors("list_attempts"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_attempt(row) for row in rows]


def _row_to_attempt(row: ExerciseAttemptRow) -> Attempt:
    return Attempt(
        id=row.id,
        learner_id=row.user_id,
        exercise_id=row.exercise_id,
        island_id=row.island_id,
        answer=dict(row.answer or {}),
        is_correct=row.is_correct,
        points_awarded=row.points_awarded,
        time_spent_sec=row.time_spent_sec,
        created_at=row.created_at,
    )
