from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from app.db.engine import async_session_factory, session_scope
from app.middleware.request_context import learner_id_var
from app.models.principal import Principal
from app.repos.bundle import RepoBundle, pg_bundle
from app.services import token_service
from app.services.attempt_grader import AttemptGrader
from app.services.progress_aggregator import ProgressAggregator
from app.services.test_session import TestSession

logger = logging.getLogger(__name__)

# Tokens come from the identity provider; there is no token endpoint here.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/token", auto_error=True)


async def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal.

    Declared first on every protected endpoint so an unauthenticated
    request is rejected before any content is read.  Async so the
    learner id it puts in the logging context is seen by the handler.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    learner_id_var.set(principal.user_id)
    logger.debug(
        "Token validated for user=%s roles=%s", principal.user_id, principal.roles
    )
    return principal


def require_role(role: str):
    """Dependency factory: demand a specific role.

    Usage: Depends(require_role("admin"))
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s missing role=%s", principal.user_id, role
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


# ---------------------------------------------------------------------------
# Repositories and services
# ---------------------------------------------------------------------------


async def get_repos(request: Request) -> AsyncGenerator[RepoBundle, None]:
    """Per-request repositories.

    With DATABASE_URL set, a fresh session-bound bundle per request;
    otherwise the in-memory bundle kept on ``app.state``.
    """
    if async_session_factory is None:
        yield request.app.state.repos
        return
    async with session_scope() as session:
        yield pg_bundle(session)


Repos = Annotated[RepoBundle, Depends(get_repos)]


def get_attempt_grader(repos: Repos) -> AttemptGrader:
    return AttemptGrader(repos.content, repos.attempts)


def get_progress_aggregator(repos: Repos) -> ProgressAggregator:
    return ProgressAggregator(repos.content, repos.progress)


def get_test_session(
    repos: Repos,
    aggregator: Annotated[ProgressAggregator, Depends(get_progress_aggregator)],
) -> TestSession:
    return TestSession(repos.content, repos.attempts, repos.progress, aggregator)
