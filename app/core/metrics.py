"""Prometheus metric inventory.

Every metric the service exports is declared here; the owning module
imports it and increments/observes at the point of action.

HTTP metrics are fed by MetricsMiddleware.  Scoring metrics are fed by
the grading services so dashboards can show answer accuracy and test
pass rates next to request latency.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Test submission issues a handful of queries; anything past 1s is a
    # storage problem.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Scoring metrics
# ---------------------------------------------------------------------------

ATTEMPTS_GRADED = Counter(
    "attempts_graded_total",
    "Exercise attempts graded and recorded",
    ["answer_type", "result"],  # result: correct|incorrect
)

TEST_SUBMISSIONS = Counter(
    "test_submissions_total",
    "Section test submissions graded",
    ["result"],  # passed|failed
)

TEST_SCORE = Histogram(
    "test_score_percent",
    "Distribution of section test scores",
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)

SCORING_ERRORS = Counter(
    "scoring_errors_total",
    "Scoring requests rejected with a domain error",
    ["code"],
)
