"""Map domain errors to HTTP responses.

Services raise ScoringError subclasses and know nothing about HTTP.
This is the one place that turns them into responses:

  {"error": "<code>", "detail": "<message>"}

with the status code carried by the error class.  Storage failures get
a fixed retry message; the underlying driver error is logged by
app/repos/pg_errors.py and never sent to the client.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.metrics import SCORING_ERRORS
from app.services.errors import ScoringError, StorageError

logger = logging.getLogger(__name__)


async def scoring_error_handler(request: Request, exc: ScoringError) -> JSONResponse:
    SCORING_ERRORS.labels(code=exc.code).inc()

    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            extra={"error_code": exc.code},
        )
    else:
        logger.info(
            "%s %s rejected: %s",
            request.method,
            request.url.path,
            exc.message,
            extra={"error_code": exc.code},
        )

    headers = {"Retry-After": "1"} if isinstance(exc, StorageError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ScoringError, scoring_error_handler)  # type: ignore[arg-type]
