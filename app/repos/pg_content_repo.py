"""PostgreSQL implementation of ContentRepo."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import (
    CourseRow,
    ExerciseAnswerKeyRow,
    ExerciseRow,
    IslandItemRow,
    IslandRow,
    SectionRow,
)
from app.models.content import (
    AnswerKey,
    Course,
    Exercise,
    Island,
    IslandItem,
    Section,
)
from app.repos.pg_errors import storage_errors


class PgContentRepo:
    """Satisfies the ContentRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_course(self, course_id: UUID) -> Course | None:
        with storage_errors("get_course"):
            row = await self._session.get(CourseRow, course_id)
        return None if row is None else Course(id=row.id, slug=row.slug, title=row.title)

    async def get_section(self, section_id: UUID) -> Section | None:
        with storage_errors("get_section"):
            row = await self._session.get(SectionRow, section_id)
        return None if row is None else _row_to_section(row)

    async def get_island(self, island_id: UUID) -> Island | None:
        with storage_errors("get_island"):
            row = await self._session.get(IslandRow, island_id)
        return None if row is None else _row_to_island(row)

    async def get_exercise(self, exercise_id: UUID) -> Exercise | None:
        with storage_errors("get_exercise"):
            row = await self._session.get(ExerciseRow, exercise_id)
        return None if row is None else _row_to_exercise(row)

    async def get_exercises(self, ids: Iterable[UUID]) -> dict[UUID, Exercise]:
        ids = list(ids)
        if not ids:
            return {}
        stmt = select(ExerciseRow).where(ExerciseRow.id.in_(ids))
        with storage_errors("get_exercises"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return {row.id: _row_to_exercise(row) for row in rows}

    async def get_answer_key(self, exercise_id: UUID) -> AnswerKey | None:
        with storage_errors("get_answer_key"):
            row = await self._session.get(ExerciseAnswerKeyRow, exercise_id)
        if row is None or not row.answer_key:
            return None
        return AnswerKey(exercise_id=row.exercise_id, payload=dict(row.answer_key))

    async def get_answer_keys(self, ids: Iterable[UUID]) -> dict[UUID, AnswerKey]:
        ids = list(ids)
        if not ids:
            return {}
        stmt = select(ExerciseAnswerKeyRow).where(
            ExerciseAnswerKeyRow.exercise_id.in_(ids)
        )
        with storage_errors("get_answer_keys"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return {
            row.exercise_id: AnswerKey(
                exercise_id=row.exercise_id, payload=dict(row.answer_key)
            )
            for row in rows
            if row.answer_key
        }

    async def list_sections(self, course_id: UUID) -> list[Section]:
        stmt = (
            select(SectionRow)
            .where(SectionRow.course_id == course_id)
            .order_by(SectionRow.order_index, SectionRow.id)
        )
        with storage_errors("list_sections"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_section(row) for row in rows]

    async def list_islands(
        self, section_id: UUID, *, active_only: bool = True
    ) -> list[Island]:
        stmt = select(IslandRow).where(IslandRow.section_id == section_id)
        if active_only:
            stmt = stmt.where(IslandRow.is_active.is_(True))
        stmt = stmt.order_by(IslandRow.order_index, IslandRow.id)
        with storage_errors("list_islands"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_island(row) for row in rows]

    async def list_exercise_items(self, island_ids: Iterable[UUID]) -> list[IslandItem]:
        island_ids = list(island_ids)
        if not island_ids:
            return []
        stmt = (
            select(IslandItemRow)
            .where(
                IslandItemRow.island_id.in_(island_ids),
                IslandItemRow.item_type == "exercise",
                IslandItemRow.exercise_id.is_not(None),
            )
            .order_by(IslandItemRow.island_id, IslandItemRow.order_index)
        )
        with storage_errors("list_exercise_items"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_item(row) for row in rows]

    async def find_exercise_item(
        self, island_id: UUID, exercise_id: UUID
    ) -> IslandItem | None:
        stmt = (
            select(IslandItemRow)
            .where(
                IslandItemRow.island_id == island_id,
                IslandItemRow.item_type == "exercise",
                IslandItemRow.exercise_id == exercise_id,
            )
            .order_by(IslandItemRow.order_index)
            .limit(1)
        )
        with storage_errors("find_exercise_item"):
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return None if row is None else _row_to_item(row)


def _row_to_section(row: SectionRow) -> Section:
    return Section(
        id=row.id,
        course_id=row.course_id,
        slug=row.slug,
        title=row.title,
        order_index=row.order_index,
        test_questions_count=row.test_questions_count,
        pass_percent=row.pass_percent,
    )


def _row_to_island(row: IslandRow) -> Island:
    return Island(
        id=row.id,
        section_id=row.section_id,
        title=row.title,
        type=row.type,
        order_index=row.order_index,
        is_active=row.is_active,
    )


def _row_to_exercise(row: ExerciseRow) -> Exercise:
    return Exercise(
        id=row.id,
        answer_type=row.answer_type,
        points_max=row.points_max,
        prompt=row.prompt or "",
    )


def _row_to_item(row: IslandItemRow) -> IslandItem:
    return IslandItem(
        id=row.id,
        island_id=row.island_id,
        order_index=row.order_index,
        item_type=row.item_type,
        exercise_id=row.exercise_id,
    )
