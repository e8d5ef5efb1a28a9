"""
Prometheus metrics for Livestock Service.

Tracks HTTP traffic and livestock operations by outcome.
"""

import time
from contextlib import contextmanager
from typing import Iterator

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "livestock_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "livestock_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Operation metrics
livestock_operations_total = Counter(
    "livestock_operations_total",
    "Total livestock operations",
    ["operation", "status"],
)

livestock_operation_duration_seconds = Histogram(
    "livestock_operation_duration_seconds",
    "Livestock operation duration in seconds",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)


def track_request_metrics(
    method: str, endpoint: str, status_code: int, duration: float
):
    """Track HTTP request metrics."""
    http_requests_total.labels(
        method=method, endpoint=endpoint, status=status_code
    ).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        duration
    )


def track_operation_result(operation: str, success: bool, duration: float):
    """Track a single livestock operation."""
    status = "success" if success else "failure"
    livestock_operations_total.labels(operation=operation, status=status).inc()
    livestock_operation_duration_seconds.labels(operation=operation).observe(duration)


@contextmanager
def track_operation(operation: str) -> Iterator[None]:
    """Time the enclosed block and record it as success or failure."""
    start_time = time.time()
    try:
        yield
    except Exception:
        track_operation_result(operation, False, time.time() - start_time)
        raise
    track_operation_result(operation, True, time.time() - start_time)


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
