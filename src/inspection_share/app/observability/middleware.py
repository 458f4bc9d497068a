"""Request-ID, request-logging and metrics middleware."""

from __future__ import annotations

import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .logging import get_logger, request_id_ctx
from .metrics import (
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_IN_FLIGHT,
    HTTP_REQUESTS_TOTAL,
)

logger = get_logger(__name__)

_VALID_REQUEST_ID = re.compile(r"^[a-zA-Z0-9\-]{8,128}$")

# Share tokens and inspection ids must never become label values.
_PATH_NORMALIZERS = [
    (re.compile(r"/api/shared/inspections/[^/]+"), "/api/shared/inspections/{token}"),
    (re.compile(r"/api/inspections/[^/]+"), "/api/inspections/{id}"),
]


def normalize_metric_path(path: str) -> str:
    for pattern, replacement in _PATH_NORMALIZERS:
        path = pattern.sub(replacement, path)
    return path


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Reuse a well-formed X-Request-ID or mint one, and echo it back."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        incoming_id = request.headers.get("x-request-id", "")
        if incoming_id and _VALID_REQUEST_ID.match(incoming_id):
            rid = incoming_id
        else:
            rid = str(uuid.uuid4())

        request.state.request_id = rid
        token = request_id_ctx.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)

        response.headers["X-Request-ID"] = rid
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        path = normalize_metric_path(request.url.path)
        method = request.method

        HTTP_REQUESTS_IN_FLIGHT.inc()
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            HTTP_REQUESTS_TOTAL.labels(method=method, path=path, status="500").inc()
            raise
        finally:
            HTTP_REQUESTS_IN_FLIGHT.dec()
            HTTP_REQUEST_DURATION_SECONDS.labels(method=method, path=path).observe(
                time.perf_counter() - start,
            )

        HTTP_REQUESTS_TOTAL.labels(
            method=method, path=path, status=str(response.status_code),
        ).inc()
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every completed request. Paths are normalized so tokens stay out of logs."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request_completed",
            method=request.method,
            path=normalize_metric_path(request.url.path),
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response
