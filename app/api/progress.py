"""Learner progress read endpoints.

Everything here is computed from item progress and test history on each
request; there is no read-through cache, so a storage failure is reported
as a retryable 503 rather than masked with stale data.

  GET  /v1/progress/islands/{island_id}          island completion
  GET  /v1/progress/sections/{section_id}        section completion (normal islands)
  GET  /v1/progress/sections/{section_id}/test   best test score + history
  POST /v1/progress/sections/{section_id}/rebuild  recompute best score (admin)
  GET  /v1/progress/courses/{course_id}          per-section completion
"""

from __future__ import annotations

import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.api.dependencies import (
    Repos,
    get_progress_aggregator,
    get_test_session,
    require_role,
    require_user,
)
from app.models.principal import Principal
from app.models.progress import IslandStats, SectionProgress, SectionStats
from app.services.progress_aggregator import ProgressAggregator
from app.services.test_session import TestSession

router = APIRouter(prefix="/v1/progress", tags=["progress"])


class IslandStatsOut(BaseModel):
    island_id: str
    totalExercises: int
    completedExercises: int
    earnedPoints: int
    maxPoints: int
    state: str

    @staticmethod
    def from_stats(stats: IslandStats) -> IslandStatsOut:
        return IslandStatsOut(
            island_id=str(stats.island_id),
            totalExercises=stats.total_exercises,
            completedExercises=stats.completed_exercises,
            earnedPoints=stats.earned_points,
            maxPoints=stats.max_points,
            state=stats.state,
        )


class SectionStatsOut(BaseModel):
    section_id: str
    completedIslands: int
    totalIslands: int
    percent: int
    state: str
    earnedPoints: int
    maxPoints: int
    islands: list[IslandStatsOut]

    @staticmethod
    def from_stats(stats: SectionStats) -> SectionStatsOut:
        return SectionStatsOut(
            section_id=str(stats.section_id),
            completedIslands=stats.completed_islands,
            totalIslands=stats.total_islands,
            percent=stats.percent,
            state=stats.state,
            earnedPoints=stats.earned_points,
            maxPoints=stats.max_points,
            islands=[IslandStatsOut.from_stats(i) for i in stats.islands],
        )


class CourseStatsOut(BaseModel):
    course_id: str
    sections: list[SectionStatsOut]


class SectionProgressOut(BaseModel):
    section_id: str
    best_test_score_percent: int
    completed: bool
    updated_at: datetime.datetime | None

    @staticmethod
    def from_progress(p: SectionProgress) -> SectionProgressOut:
        return SectionProgressOut(
            section_id=str(p.section_id),
            best_test_score_percent=p.best_test_score_percent,
            completed=p.completed,
            updated_at=p.updated_at,
        )


class TestAttemptOut(BaseModel):
    id: str
    island_id: str
    score_percent: int
    passed: bool
    correct_count: int
    created_at: datetime.datetime


class SectionTestProgressOut(SectionProgressOut):
    history: list[TestAttemptOut]


@router.get("/islands/{island_id}", response_model=IslandStatsOut)
async def get_island_progress(
    island_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    aggregator: Annotated[ProgressAggregator, Depends(get_progress_aggregator)],
) -> IslandStatsOut:
    stats = await aggregator.compute_island_stats(principal.user_id, island_id)
    return IslandStatsOut.from_stats(stats)


@router.get("/sections/{section_id}", response_model=SectionStatsOut)
async def get_section_progress(
    section_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    aggregator: Annotated[ProgressAggregator, Depends(get_progress_aggregator)],
) -> SectionStatsOut:
    stats = await aggregator.compute_section_stats(principal.user_id, section_id)
    return SectionStatsOut.from_stats(stats)


@router.get("/sections/{section_id}/test", response_model=SectionTestProgressOut)
async def get_section_test_progress(
    section_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    session: Annotated[TestSession, Depends(get_test_session)],
) -> SectionTestProgressOut:
    current, history = await session.get_section_progress(principal.user_id, section_id)
    return SectionTestProgressOut(
        **SectionProgressOut.from_progress(current).model_dump(),
        history=[
            TestAttemptOut(
                id=str(h.id),
                island_id=str(h.island_id),
                score_percent=h.score_percent,
                passed=h.passed,
                correct_count=h.correct_count,
                created_at=h.created_at,
            )
            for h in history
        ],
    )


@router.post("/sections/{section_id}/rebuild", response_model=SectionProgressOut)
async def rebuild_section_progress(
    section_id: UUID,
    _admin: Annotated[Principal, Depends(require_role("admin"))],
    repos: Repos,
    session: Annotated[TestSession, Depends(get_test_session)],
    learner_id: Annotated[str, Query(min_length=1)],
) -> SectionProgressOut:
    """Recompute a learner's best test score from their submission history."""
    rebuilt = await session.rebuild_section_progress(learner_id, section_id)
    await repos.commit()
    return SectionProgressOut.from_progress(rebuilt)


@router.get("/courses/{course_id}", response_model=CourseStatsOut)
async def get_course_progress(
    course_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    aggregator: Annotated[ProgressAggregator, Depends(get_progress_aggregator)],
) -> CourseStatsOut:
    stats = await aggregator.compute_course_stats(principal.user_id, course_id)
    return CourseStatsOut(
        course_id=str(stats.course_id),
        sections=[SectionStatsOut.from_stats(s) for s in stats.sections],
    )
