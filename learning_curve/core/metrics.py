"""Prometheus metric inventory.

Every metric the service exposes is declared here; the modules that own
the behavior import the metric and increment it at the point of action.
The /metrics endpoint renders the default registry.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
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
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Learning metrics
# ---------------------------------------------------------------------------

REGISTRATIONS = Counter(
    "user_registrations_total",
    "Registration calls by outcome",
    ["outcome"],  # "created" or "existing"
)

ACHIEVEMENT_CHECKS = Counter(
    "achievement_checks_total",
    "Reconciliation passes by result",
    ["result"],  # "granted", "none", "unavailable"
)

ACHIEVEMENTS_GRANTED = Counter(
    "achievements_granted_total",
    "Earned-achievement rows inserted, by achievement key",
    ["key"],
)

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Cache get operations by result",
    ["operation"],  # "hit" or "miss"
)
