"""The set of repositories one request works against.

Services receive their repos through their constructors; nothing in the
scoring engine reaches for a module-level client.  ``RepoBundle`` is what
the API layer builds per request and hands to the service constructors.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.repos.attempt_repo import AttemptRepo, InMemoryAttemptRepo
from app.repos.content_repo import ContentRepo, InMemoryContentRepo
from app.repos.pg_attempt_repo import PgAttemptRepo
from app.repos.pg_content_repo import PgContentRepo
from app.repos.pg_errors import storage_errors
from app.repos.pg_progress_repo import PgProgressRepo
from app.repos.progress_repo import InMemoryProgressRepo, ProgressRepo


@dataclass(frozen=True, slots=True)
class RepoBundle:
    content: ContentRepo
    attempts: AttemptRepo
    progress: ProgressRepo
    session: AsyncSession | None = None

    async def commit(self) -> None:
        """Make this request's writes durable (no-op for in-memory repos)."""
        if self.session is None:
            return
        with storage_errors("commit"):
            await self.session.commit()


def in_memory_bundle() -> RepoBundle:
    return RepoBundle(
        content=InMemoryContentRepo(),
        attempts=InMemoryAttemptRepo(),
        progress=InMemoryProgressRepo(),
    )


def pg_bundle(session: AsyncSession) -> RepoBundle:
    return RepoBundle(
        content=PgContentRepo(session),
        attempts=PgAttemptRepo(session),
        progress=PgProgressRepo(session),
        session=session,
    )
