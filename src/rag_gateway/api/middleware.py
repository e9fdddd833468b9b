"""FastAPI middleware for request timing, request IDs and body size limits."""

from __future__ import annotations

import time
from uuid import uuid4

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from rag_gateway.observability.logger import get_logger

logger = get_logger("middleware")


class RequestTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = str(uuid4())
        start = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
            duration_ms = (time.monotonic() - start) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Duration-MS"] = str(round(duration_ms, 2))
            logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
            return response
        except Exception as e:
            duration_ms = (time.monotonic() - start) * 1000
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_ms=round(duration_ms, 2),
            )
            raise


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects request bodies larger than the limit with 413.

    A declared Content-Length is checked up front. Bodies sent without one
    (chunked transfer) are read and measured before the route runs.
    """

    def __init__(self, app, max_body_bytes: int) -> None:
        super().__init__(app)
        self._max_body_bytes = max_body_bytes

    async def dispatch(self, request: Request, call_next) -> Response:
        declared = request.headers.get("content-length")
        if declared and declared.isdigit():
            size = int(declared)
        elif request.method in ("POST", "PUT", "PATCH"):
            size = len(await request.body())
        else:
            size = 0

        if size > self._max_body_bytes:
            logger.warning("request_too_large", path=request.url.path, size=size)
            return JSONResponse(
                status_code=413,
                content={"detail": f"Request body exceeds {self._max_body_bytes} bytes"},
            )
        return await call_next(request)
