"""PostgreSQL implementation of ProgressRepo.

Both upserts are a single ``INSERT ... ON CONFLICT DO UPDATE`` so two
concurrent requests can never interleave a read and a write:

- item completion sets ``is_completed = is_completed OR true``;
- section best score sets ``GREATEST(current, new)`` and derives
  ``completed`` from that same greatest value.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from sqlalchemy import Integer, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import (
    IslandItemProgressRow,
    SectionProgressRow,
    SectionTestAttemptRow,
)
from app.models.progress import (
    ItemProgress,
    SectionProgress,
    SectionTestAttempt,
    utcnow,
)
from app.repos.pg_errors import storage_errors


class PgProgressRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert_item_completion(
        self,
        learner_id: str,
        island_item_id: UUID,
        points_earned: int,
        last_answer: dict[str, Any] | None,
    ) -> ItemProgress:
        now = utcnow()
        stmt = insert(IslandItemProgressRow).values(
            user_id=learner_id,
            island_item_id=island_item_id,
            is_completed=True,
            points_earned=points_earned,
            completed_at=now,
            last_answer=last_answer,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                IslandItemProgressRow.user_id,
                IslandItemProgressRow.island_item_id,
            ],
            set_={
                "is_completed": IslandItemProgressRow.is_completed.op("OR")(True),
                "points_earned": stmt.excluded.points_earned,
                "completed_at": stmt.excluded.completed_at,
                "last_answer": stmt.excluded.last_answer,
            },
        ).returning(IslandItemProgressRow).execution_options(populate_existing=True)
        with storage_errors("upsert_item_completion"):
            row = (await self._session.execute(stmt)).scalar_one()
        return _row_to_item_progress(row)

    async def get_item_progress(
        self, learner_id: str, island_item_ids: Iterable[UUID]
    ) -> dict[UUID, ItemProgress]:
        island_item_ids = list(island_item_ids)
        if not island_item_ids:
            return {}
        stmt = select(IslandItemProgressRow).where(
            IslandItemProgressRow.user_id == learner_id,
            IslandItemProgressRow.island_item_id.in_(island_item_ids),
        )
        with storage_errors("get_item_progress"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return {row.island_item_id: _row_to_item_progress(row) for row in rows}

    async def add_test_attempt(self, record: SectionTestAttempt) -> None:
        row = SectionTestAttemptRow(
            id=record.id,
            user_id=record.learner_id,
            section_id=record.section_id,
            island_id=record.island_id,
            score_percent=record.score_percent,
            passed=record.passed,
            correct_count=record.correct_count,
            created_at=record.created_at,
        )
        with storage_errors("add_test_attempt"):
            self._session.add(row)
            await self._session.flush()

    async def list_test_attempts(
        self, learner_id: str, section_id: UUID
    ) -> list[SectionTestAttempt]:
        stmt = (
            select(SectionTestAttemptRow)
            .where(
                SectionTestAttemptRow.user_id == learner_id,
                SectionTestAttemptRow.section_id == section_id,
            )
            .order_by(
                SectionTestAttemptRow.created_at.desc(),
                SectionTestAttemptRow.id.desc(),
            )
        )
        with storage_errors("list_test_attempts"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [
            SectionTestAttempt(
                id=row.id,
                learner_id=row.user_id,
                section_id=row.section_id,
                island_id=row.island_id,
                score_percent=row.score_percent,
                passed=row.passed,
                correct_count=row.correct_count,
                created_at=row.created_at,
            )
            for row in rows
        ]

    async def upsert_section_best(
        self,
        learner_id: str,
        section_id: UUID,
        score_percent: int,
        pass_percent: int,
    ) -> SectionProgress:
        stmt = insert(SectionProgressRow).values(
            user_id=learner_id,
            section_id=section_id,
            best_test_score_percent=score_percent,
            completed=score_percent >= pass_percent,
            points_done=0,
            points_catchup=0,
            points_total=0,
            updated_at=utcnow(),
        )
        best = func.greatest(
            SectionProgressRow.best_test_score_percent,
            stmt.excluded.best_test_score_percent,
            type_=Integer,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[SectionProgressRow.user_id, SectionProgressRow.section_id],
            set_={
                "best_test_score_percent": best,
                "completed": best >= pass_percent,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(SectionProgressRow).execution_options(populate_existing=True)
        with storage_errors("upsert_section_best"):
            row = (await self._session.execute(stmt)).scalar_one()
        return _row_to_section_progress(row)

    async def get_section_progress(
        self, learner_id: str, section_id: UUID
    ) -> SectionProgress | None:
        with storage_errors("get_section_progress"):
            row = await self._session.get(SectionProgressRow, (learner_id, section_id))
        return None if row is None else _row_to_section_progress(row)


def _row_to_item_progress(row: IslandItemProgressRow) -> ItemProgress:
    return ItemProgress(
        learner_id=row.user_id,
        island_item_id=row.island_item_id,
        is_completed=row.is_completed,
        points_earned=row.points_earned,
        completed_at=row.completed_at,
        last_answer=row.last_answer,
    )


def _row_to_section_progress(row: SectionProgressRow) -> SectionProgress:
    return SectionProgress(
        learner_id=row.user_id,
        section_id=row.section_id,
        best_test_score_percent=row.best_test_score_percent,
        completed=row.completed,
        points_done=row.points_done,
        points_catchup=row.points_catchup,
        points_total=row.points_total,
        updated_at=row.updated_at,
    )
