"""
FlagArchive Backend: Request Context Middleware
===============================================

What:  A correlation ID per request, and one access log line per request
       naming the archive resource it touched.
How:   RequestIDMiddleware (outermost) puts the ID in a ContextVar that the
       exception handlers and AccessLogMiddleware read; AccessLogMiddleware
       times call_next and logs at a level chosen from the status.

Access line:
    GET /entities/7 → 404 in 2.3ms [entity #7] rid=3f2a91c0 from 10.0.0.4

Request bodies are never logged.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("flagarchive.access")

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# First path segment → resource kind, as used in error bodies
RESOURCE_BY_PREFIX = {"entities": "entity", "users": "user"}

# Probes run every few seconds
UNLOGGED_PATHS = frozenset({"/health"})


def resource_of(path: str) -> Tuple[Optional[str], Optional[str]]:
    """('entity', '7') for /entities/7, ('entity', None) for /entities."""
    segments = path.strip("/").split("/")
    kind = RESOURCE_BY_PREFIX.get(segments[0])
    if kind is None:
        return None, None
    return kind, segments[1] if len(segments) > 1 and segments[1] else None


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Uses the caller's X-Request-ID when present, else a short uuid4."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        kind, resource_id = resource_of(path)
        target = f"{kind} #{resource_id}" if resource_id else (kind or "-")
        rid = request_id_var.get("")
        client = request.client.host if request.client else "unknown"

        logger.log(
            _level_for(response.status_code),
            "%s %s → %d in %.1fms [%s] rid=%s from %s",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            target,
            rid,
            client,
            extra={
                "request_id": rid,
                "resource": kind,
                "resource_id": resource_id,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
