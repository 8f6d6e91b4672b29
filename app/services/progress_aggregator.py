"""Item completion writes and island/section/course progress reads.

Aggregates are computed on every read from item progress rows; there is
no cache in front of them.  Storage failures propagate as StorageError.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from typing import Any
from uuid import UUID

from app.models.content import Island, IslandItem
from app.models.progress import (
    CourseStats,
    IslandStats,
    ItemProgress,
    SectionStats,
)
from app.repos.content_repo import ContentRepo
from app.repos.progress_repo import ProgressRepo
from app.services.errors import CourseNotFound, IslandNotFound, SectionNotFound

logger = logging.getLogger(__name__)


class ProgressAggregator:
    def __init__(self, content: ContentRepo, progress: ProgressRepo) -> None:
        self._content = content
        self._progress = progress

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def upsert_item_completion(
        self,
        learner_id: str,
        island_item_id: UUID,
        points_earned: int,
        last_answer: dict[str, Any] | None,
    ) -> ItemProgress:
        """Mark the item complete for this learner.

        Idempotent.  ``points_earned`` replaces the stored value (credit for
        eventually getting it right, not a running sum), and completion is
        never taken back.
        """
        record = await self._progress.upsert_item_completion(
            learner_id, island_item_id, points_earned, last_answer
        )
        logger.debug(
            "Item completed learner=%s item=%s points=%d",
            learner_id,
            island_item_id,
            points_earned,
        )
        return record

    async def complete_exercise_in_island(
        self,
        learner_id: str,
        island_id: UUID,
        exercise_id: UUID,
        points_earned: int,
        last_answer: dict[str, Any] | None,
    ) -> ItemProgress | None:
        """Resolve the island item holding ``exercise_id`` and complete it.

        Returns None when the exercise is not part of the island.
        """
        item = await self._content.find_exercise_item(island_id, exercise_id)
        if item is None:
            logger.warning(
                "No island item for exercise=%s in island=%s; progress not recorded",
                exercise_id,
                island_id,
            )
            return None
        return await self.upsert_item_completion(
            learner_id, item.id, points_earned, last_answer
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def compute_island_stats(self, learner_id: str, island_id: UUID) -> IslandStats:
        island = await self._content.get_island(island_id)
        if island is None:
            raise IslandNotFound(island_id)
        (stats,) = await self._stats_for_islands(learner_id, [island])
        return stats

    async def compute_section_stats(
        self, learner_id: str, section_id: UUID
    ) -> SectionStats:
        """Completion over the section's active normal islands.

        Test islands are left out: test completion is the best-score record
        kept by TestSession, not item bookkeeping.
        """
        section = await self._content.get_section(section_id)
        if section is None:
            raise SectionNotFound(section_id)
        return await self._section_stats(learner_id, section_id)

    async def compute_course_stats(self, learner_id: str, course_id: UUID) -> CourseStats:
        course = await self._content.get_course(course_id)
        if course is None:
            raise CourseNotFound(course_id)
        sections = await self._content.list_sections(course_id)
        return CourseStats(
            course_id=course_id,
            sections=tuple(
                [await self._section_stats(learner_id, s.id) for s in sections]
            ),
        )

    async def _section_stats(self, learner_id: str, section_id: UUID) -> SectionStats:
        islands = [
            i
            for i in await self._content.list_islands(section_id, active_only=True)
            if not i.is_test
        ]
        island_stats = await self._stats_for_islands(learner_id, islands)
        return SectionStats(
            section_id=section_id,
            completed_islands=sum(1 for s in island_stats if s.is_done),
            total_islands=len(island_stats),
            earned_points=sum(s.earned_points for s in island_stats),
            max_points=sum(s.max_points for s in island_stats),
            islands=tuple(island_stats),
        )

    async def _stats_for_islands(
        self, learner_id: str, islands: Sequence[Island]
    ) -> list[IslandStats]:
        if not islands:
            return []

        items = await self._content.list_exercise_items([i.id for i in islands])
        exercises = await self._content.get_exercises(
            {it.exercise_id for it in items if it.exercise_id is not None}
        )
        progress = await self._progress.get_item_progress(
            learner_id, [it.id for it in items]
        )

        by_island: dict[UUID, list[IslandItem]] = defaultdict(list)
        for it in items:
            by_island[it.island_id].append(it)

        out: list[IslandStats] = []
        for island in islands:
            island_items = by_island.get(island.id, [])
            completed = [
                it
                for it in island_items
                if it.id in progress and progress[it.id].is_completed
            ]
            out.append(
                IslandStats(
                    island_id=island.id,
                    total_exercises=len(island_items),
                    completed_exercises=len(completed),
                    earned_points=sum(progress[it.id].points_earned for it in completed),
                    max_points=sum(
                        exercises[it.exercise_id].points_max
                        for it in island_items
                        if it.exercise_id in exercises
                    ),
                )
            )
        return out
