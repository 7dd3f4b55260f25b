"""Request ID middleware — unique ID per request for tracing and access logs.

Learn: Every request gets an ID, either from the incoming X-Request-ID
header (for distributed tracing) or a fresh UUID. The ID is bound to
structlog's contextvars so every log entry for the request carries it
(the auth gate adds account_id the same way), and it is echoed back in
the response header. One "http.request" line is logged per request.

This is also the last stop for exceptions no handler claimed: they are
logged with their traceback and answered with the generic JSON 500, so
even a crash carries its request ID back to the caller.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = structlog.get_logger()

INTERNAL_ERROR = {"detail": "Internal server error"}


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a unique request ID, then log the outcome."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception("http.unhandled_error", path=request.url.path)
            response = JSONResponse(status_code=500, content=INTERNAL_ERROR)
        response.headers["X-Request-ID"] = request_id

        logger.info(
            "http.request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response
