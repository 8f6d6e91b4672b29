from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from typing import Any, Protocol
from uuid import UUID

from app.models.progress import (
    ItemProgress,
    SectionProgress,
    SectionTestAttempt,
    utcnow,
)


class ProgressRepo(Protocol):
    async def upsert_item_completion(
        self,
        learner_id: str,
        island_item_id: UUID,
        points_earned: int,
        last_answer: dict[str, Any] | None,
    ) -> ItemProgress: ...
    async def get_item_progress(
        self, learner_id: str, island_item_ids: Iterable[UUID]
    ) -> dict[UUID, ItemProgress]: ...
    async def add_test_attempt(self, record: SectionTestAttempt) -> None: ...
    async def list_test_attempts(
        self, learner_id: str, section_id: UUID
    ) -> list[SectionTestAttempt]: ...
    async def upsert_section_best(
        self,
        learner_id: str,
        section_id: UUID,
        score_percent: int,
        pass_percent: int,
    ) -> SectionProgress: ...
    async def get_section_progress(
        self, learner_id: str, section_id: UUID
    ) -> SectionProgress | None: ...


class InMemoryProgressRepo:
    """Dict-backed progress store.

    Upserts read and write without an ``await`` in between, so under
    asyncio each one is atomic the same way a single SQL statement is.
    """

    def __init__(self) -> None:
        self._items: dict[tuple[str, UUID], ItemProgress] = {}
        self._sections: dict[tuple[str, UUID], SectionProgress] = {}
        self._test_attempts: list[SectionTestAttempt] = []

    def clear(self) -> None:
        self._items.clear()
        self._sections.clear()
        self._test_attempts.clear()

    async def upsert_item_completion(
        self,
        learner_id: str,
        island_item_id: UUID,
        points_earned: int,
        last_answer: dict[str, Any] | None,
    ) -> ItemProgress:
        record = ItemProgress(
            learner_id=learner_id,
            island_item_id=island_item_id,
            is_completed=True,
            points_earned=points_earned,
            completed_at=utcnow(),
            last_answer=last_answer,
        )
        self._items[(learner_id, island_item_id)] = record
        return record

    async def get_item_progress(
        self, learner_id: str, island_item_ids: Iterable[UUID]
    ) -> dict[UUID, ItemProgress]:
        out: dict[UUID, ItemProgress] = {}
        for item_id in island_item_ids:
            record = self._items.get((learner_id, item_id))
            if record is not None:
                out[item_id] = record
        return out

    async def add_test_attempt(self, record: SectionTestAttempt) -> None:
        self._test_attempts.append(record)

    async def list_test_attempts(
        self, learner_id: str, section_id: UUID
    ) -> list[SectionTestAttempt]:
        rows = [
            r
            for r in self._test_attempts
            if r.learner_id == learner_id and r.section_id == section_id
        ]
        return rows[::-1]

    async def upsert_section_best(
        self,
        learner_id: str,
        section_id: UUID,
        score_percent: int,
        pass_percent: int,
    ) -> SectionProgress:
        key = (learner_id, section_id)
        existing = self._sections.get(key) or SectionProgress(
            learner_id=learner_id, section_id=section_id
        )
        best = max(existing.best_test_score_percent, score_percent)
        updated = dataclasses.replace(
            existing,
            best_test_score_percent=best,
            completed=best >= pass_percent,
            updated_at=utcnow(),
        )
        self._sections[key] = updated
        return updated

    async def get_section_progress(
        self, learner_id: str, section_id: UUID
    ) -> SectionProgress | None:
        return self._sections.get((learner_id, section_id))
