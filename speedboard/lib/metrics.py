"""Prometheus-compatible metrics for request, upstream, and persistence monitoring."""

from prometheus_client import Counter, Histogram

# Performance metrics
request_duration_seconds = Histogram(
    'request_duration_seconds',
    'Request duration in seconds',
    ['endpoint', 'method', 'status'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0]
)

upstream_api_duration_seconds = Histogram(
    'upstream_api_duration_seconds',
    'Upstream API call duration',
    ['service', 'operation'],
    buckets=[0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0]
)

# Analysis metrics
pagespeed_requests_total = Counter(
    'pagespeed_requests_total',
    'PageSpeed analyses by device strategy and outcome',
    ['strategy', 'outcome']
)

persisted_results_total = Counter(
    'persisted_results_total',
    'Lighthouse score inserts by outcome',
    ['outcome']
)


def record_request_duration(endpoint: str, method: str, status: int, duration_seconds: float):
    """Record overall request duration.

    Args:
        endpoint: API endpoint path
        method: HTTP method (GET, POST, etc.)
        status: HTTP status code
        duration_seconds: Request duration in seconds
    """
    request_duration_seconds.labels(
        endpoint=endpoint,
        method=method,
        status=str(status)
    ).observe(duration_seconds)


def record_upstream_api_call(service: str, operation: str, duration_seconds: float):
    """Record upstream API call duration.

    Args:
        service: Service name ('pagespeed')
        operation: Operation name ('run_pagespeed')
        duration_seconds: API call duration in seconds
    """
    upstream_api_duration_seconds.labels(
        service=service,
        operation=operation
    ).observe(duration_seconds)


def record_pagespeed_request(strategy: str, outcome: str):
    """Record a finished analysis ('success' or 'failure')."""
    pagespeed_requests_total.labels(strategy=strategy, outcome=outcome).inc()


def record_persist_outcome(outcome: str):
    """Record a persistence attempt ('success' or 'failure')."""
    persisted_results_total.labels(outcome=outcome).inc()
