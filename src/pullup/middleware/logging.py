# src/pullup/middleware/logging.py

"""Request tracing and access logging for the PullUp API."""

import logging
import re
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("pullup.api")

REQUEST_ID_HEADER = "X-Request-ID"

# Inbound IDs end up verbatim in log lines and response headers
_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def request_id(request: Request) -> str | None:
    """The trace ID assigned to ``request``, or None outside the middleware."""
    return getattr(request.state, "request_id", None)


def _assign_request_id(request: Request) -> str:
    inbound = request.headers.get(REQUEST_ID_HEADER, "")
    if _SAFE_REQUEST_ID.fullmatch(inbound):
        return inbound
    return uuid.uuid4().hex[:8]


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags every request with a trace ID and writes one access line for it.

    A well-formed inbound X-Request-ID is kept so a submission can be
    followed from the client into the ledger logs; anything else is
    replaced with a fresh short ID. The ID is stored on ``request.state``
    for the exception handlers and echoed in the response headers.

    The access line is INFO for successful requests, WARNING for client
    errors (rejected submissions, unknown players) and ERROR for server
    errors, so a ledger that starts refusing writes stands out.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = _assign_request_id(request)
        request.state.request_id = rid
        started = time.perf_counter()
        context = {
            "request_id": rid,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.debug(
            "[%s] %s %s started", rid, request.method, request.url, extra=context
        )

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            logger.error(
                "[%s] %s %s -> unhandled %s (%.2fms)",
                rid,
                request.method,
                request.url.path,
                type(e).__name__,
                elapsed_ms,
                extra={**context, "duration_ms": elapsed_ms},
                exc_info=True,
            )
            raise

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.log(
            _level_for(response.status_code),
            "[%s] %s %s -> %d (%.2fms)",
            rid,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        response.headers[REQUEST_ID_HEADER] = rid
        return response  # type: ignore[no-any-return]
