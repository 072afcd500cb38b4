"""Prometheus metrics for the application."""

import time

from prometheus_client import Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# --- Metrics ---

APP_INFO = Info("translation_orchestrator", "Translation orchestrator application info")
APP_INFO.info({"version": "1.0.0", "name": "translation_orchestrator"})

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30],
)

TRANSLATION_OUTCOMES = Counter(
    "translation_requests_total",
    "Translation requests by terminal outcome",
    ["outcome"],  # success, cached, expired, cancelled, exhausted, failed
)

PROVIDER_CALLS = Counter(
    "translation_provider_calls_total",
    "Provider calls by result",
    ["provider", "result"],  # ok, error
)

PROVIDER_LATENCY = Histogram(
    "translation_provider_latency_seconds",
    "Provider round-trip time in seconds",
    ["provider"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10],
)

CACHE_LOOKUPS = Counter(
    "translation_cache_lookups_total",
    "Cache lookups made by the queue processor",
    ["result"],  # hit, miss
)

RETRIES_SCHEDULED = Counter(
    "translation_retries_scheduled_total",
    "Requests sent back to the queue after a retryable failure",
)


# --- Middleware ---

# Normalize dynamic path segments to reduce cardinality
_PATH_PREFIXES = ("/api/v1/translation/queue/",)
_STATIC_SEGMENTS = {"", "stats"}


def _normalize_path(path: str) -> str:
    """Replace request IDs in paths with {id} to avoid high cardinality."""
    for prefix in _PATH_PREFIXES:
        if path.startswith(prefix) and path[len(prefix) :] not in _STATIC_SEGMENTS:
            return f"{prefix}{{id}}"
    return path


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect HTTP request metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        path = _normalize_path(request.url.path)

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        REQUEST_DURATION.labels(method=method, path=path).observe(duration)

        return response


def metrics_response() -> Response:
    """Generate Prometheus /metrics response."""
    return Response(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
