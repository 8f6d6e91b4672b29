from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from app.models.progress import Attempt


class AttemptRepo(Protocol):
    """Append-only attempt log."""

    async def add(self, attempt: Attempt) -> None: ...
    async def latest_for_island(
        self, learner_id: str, island_id: UUID, exercise_ids: Iterable[UUID]
    ) -> dict[UUID, Attempt]: ...
    async def list_for_exercises(
        self, learner_id: str, exercise_ids: Iterable[UUID]
    ) -> list[Attempt]: ...


class InMemoryAttemptRepo:
    def __init__(self) -> None:
        self._log: list[Attempt] = []

    async def add(self, attempt: Attempt) -> None:
        self._log.append(attempt)

    async def latest_for_island(
        self, learner_id: str, island_id: UUID, exercise_ids: Iterable[UUID]
    ) -> dict[UUID, Attempt]:
        """Latest attempt per exercise, by created_at.

        Equal timestamps resolve to the later insert, matching the id
        tie-break of the SQL implementation closely enough for a log that
        is only ever appended to.
        """
        wanted = set(exercise_ids)
        latest: dict[UUID, Attempt] = {}
        for a in self._log:
            if a.learner_id != learner_id or a.island_id != island_id:
                continue
            if a.exercise_id not in wanted:
                continue
            current = latest.get(a.exercise_id)
            if current is None or a.created_at >= current.created_at:
                latest[a.exercise_id] = a
        return latest

    async def list_for_exercises(
        self, learner_id: str, exercise_ids: Iterable[UUID]
    ) -> list[Attempt]:
        """All attempts for the exercises, newest first."""
        wanted = set(exercise_ids)
        rows = [
            (pos, a)
            for pos, a in enumerate(self._log)
            if a.learner_id == learner_id and a.exercise_id in wanted
        ]
        rows.sort(key=lambda r: (r[1].created_at, r[0]), reverse=True)
        return [a for _, a in rows]
