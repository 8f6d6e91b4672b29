"""Prometheus scrape endpoint.

Serves every metric declared in app/core/metrics.py in the Prometheus
text exposition format, e.g.:

  attempts_graded_total{answer_type="numeric",result="correct"} 41.0
  test_submissions_total{result="passed"} 7.0

Not listed in the OpenAPI schema.  Restrict it at the ingress in
production: answer accuracy and pass rates are not public data.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
