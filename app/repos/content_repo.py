from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from app.models.content import (
    AnswerKey,
    Course,
    Exercise,
    Island,
    IslandItem,
    Section,
)


class ContentRepo(Protocol):
    """Read side of the content store, as consumed by the scoring engine."""

    async def get_course(self, course_id: UUID) -> Course | None: ...
    async def get_section(self, section_id: UUID) -> Section | None: ...
    async def get_island(self, island_id: UUID) -> Island | None: ...
    async def get_exercise(self, exercise_id: UUID) -> Exercise | None: ...
    async def get_exercises(self, ids: Iterable[UUID]) -> dict[UUID, Exercise]: ...
    async def get_answer_key(self, exercise_id: UUID) -> AnswerKey | None: ...
    async def get_answer_keys(self, ids: Iterable[UUID]) -> dict[UUID, AnswerKey]: ...
    async def list_sections(self, course_id: UUID) -> list[Section]: ...
    async def list_islands(
        self, section_id: UUID, *, active_only: bool = True
    ) -> list[Island]: ...
    async def list_exercise_items(
        self, island_ids: Iterable[UUID]
    ) -> list[IslandItem]: ...
    async def find_exercise_item(
        self, island_id: UUID, exercise_id: UUID
    ) -> IslandItem | None: ...


class InMemoryContentRepo:
    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._sections: dict[UUID, Section] = {}
        self._islands: dict[UUID, Island] = {}
        self._items: dict[UUID, IslandItem] = {}
        self._exercises: dict[UUID, Exercise] = {}
        self._keys: dict[UUID, AnswerKey] = {}

    # --- writes (seeding / tests; authoring lives in the content store) ---

    def add_course(self, course: Course) -> None:
        self._courses[course.id] = course

    def add_section(self, section: Section) -> None:
        self._sections[section.id] = section

    def add_island(self, island: Island) -> None:
        self._islands[island.id] = island

    def add_item(self, item: IslandItem) -> None:
        self._items[item.id] = item

    def add_exercise(self, exercise: Exercise, key: AnswerKey | None = None) -> None:
        self._exercises[exercise.id] = exercise
        if key is not None:
            self._keys[exercise.id] = key

    def has_course(self, course_id: UUID) -> bool:
        return course_id in self._courses

    def clear(self) -> None:
        for store in (
            self._courses,
            self._sections,
            self._islands,
            self._items,
            self._exercises,
            self._keys,
        ):
            store.clear()

    # --- reads ---

    async def get_course(self, course_id: UUID) -> Course | None:
        return self._courses.get(course_id)

    async def get_section(self, section_id: UUID) -> Section | None:
        return self._sections.get(section_id)

    async def get_island(self, island_id: UUID) -> Island | None:
        return self._islands.get(island_id)

    async def get_exercise(self, exercise_id: UUID) -> Exercise | None:
        return self._exercises.get(exercise_id)

    async def get_exercises(self, ids: Iterable[UUID]) -> dict[UUID, Exercise]:
        return {i: self._exercises[i] for i in ids if i in self._exercises}

    async def get_answer_key(self, exercise_id: UUID) -> AnswerKey | None:
        return self._keys.get(exercise_id)

    async def get_answer_keys(self, ids: Iterable[UUID]) -> dict[UUID, AnswerKey]:
        return {i: self._keys[i] for i in ids if i in self._keys}

    async def list_sections(self, course_id: UUID) -> list[Section]:
        sections = [s for s in self._sections.values() if s.course_id == course_id]
        return sorted(sections, key=lambda s: s.order_index)

    async def list_islands(
        self, section_id: UUID, *, active_only: bool = True
    ) -> list[Island]:
        islands = [
            i
            for i in self._islands.values()
            if i.section_id == section_id and (i.is_active or not active_only)
        ]
        return sorted(islands, key=lambda i: i.order_index)

    async def list_exercise_items(self, island_ids: Iterable[UUID]) -> list[IslandItem]:
        wanted = set(island_ids)
        items = [
            it for it in self._items.values() if it.island_id in wanted and it.is_exercise
        ]
        return sorted(items, key=lambda it: (str(it.island_id), it.order_index))

    async def find_exercise_item(
        self, island_id: UUID, exercise_id: UUID
    ) -> IslandItem | None:
        for item in await self.list_exercise_items([island_id]):
            if item.exercise_id == exercise_id:
                return item
        return None
