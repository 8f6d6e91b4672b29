"""Request context middleware: assigns a unique ID to every request.

Concurrent requests interleave their log lines; the request ID (and,
once the bearer token is validated, the learner ID) is attached to every
record so one learner's submission can be followed through the log.

Both live in ContextVars rather than thread-locals: requests share the
event loop thread, and each asyncio task gets its own context copy.

  request_id_var  set here, from X-Request-ID or a fresh UUID
  learner_id_var  set by app.api.dependencies.require_user
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
learner_id_var: ContextVar[str | None] = ContextVar("learner_id", default=None)


class RequestContextFilter(logging.Filter):
    """Copy the context vars onto every LogRecord.

    Attached to the stdout handler by setup_logging, so records from every
    logger pass through it.  Values passed via ``extra=`` at the call
    site win.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        if getattr(record, "learner_id", None) is None:
            learner_id = learner_id_var.get(None)
            if learner_id is not None:
                record.learner_id = learner_id  # type: ignore[attr-defined]
        return True


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request, and log one completion line.

    1. Reads X-Request-ID (if the client sent one) or generates a UUID
    2. Stores it in request_id_var
    3. Logs method, path, status and duration on completion
    4. Echoes X-Request-ID on the response
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
