"""Prometheus HTTP request metrics for the explorer API.

Requests are labelled by route template (``/insight-api/tx/{txid}``), not by
the concrete URL, so txids and addresses do not create new series. Requests
that match no route share the ``UNMATCHED`` label.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from prometheus_client import CollectorRegistry
    from starlette.requests import Request
    from starlette.responses import Response

APP_LABEL = "py-insight"
UNMATCHED = "<unmatched>"


def route_template(request: Request) -> str:
    """The path template of the route that served *request*."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) else UNMATCHED


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Records count and latency of every HTTP request."""

    def __init__(self, app: object, *, registry: CollectorRegistry) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._requests = Counter(
            "http_request_total",
            "HTTP requests served, by route and status",
            ("method", "path", "status_code", "app"),
            registry=registry,
        )
        self._latency = Histogram(
            "http_request_duration_seconds",
            "Time spent serving HTTP requests",
            ("method", "path", "app"),
            registry=registry,
        )

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.monotonic()
        response: Response = await call_next(request)
        elapsed = time.monotonic() - started

        # The router fills in scope["route"] while handling the request.
        path = route_template(request)
        self._requests.labels(request.method, path, str(response.status_code), APP_LABEL).inc()
        self._latency.labels(request.method, path, APP_LABEL).observe(elapsed)
        return response
