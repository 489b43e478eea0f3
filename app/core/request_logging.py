# app/core/request_logging.py
"""
Request logging middleware for tracking all HTTP requests.
"""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.logging_config import get_logger

logger = get_logger(__name__)

#: Paths logged at DEBUG instead of INFO when they succeed.
QUIET_PATHS = frozenset({"/api/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs all HTTP requests with timing and status codes.

    Reuses an incoming X-Request-ID header or generates one, and echoes it
    on the response for tracing.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            status_code = response.status_code
            error = None
        except Exception as e:
            status_code = 500
            error = str(e)
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            summary = f"{request.method} {request.url.path} - {status_code} ({duration_ms:.2f}ms)"
            extra = {
                "extra_fields": {
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            }

            if error:
                logger.error(f"{summary} - ERROR: {error}", extra=extra, exc_info=True)
            elif status_code >= 500:
                logger.error(summary, extra=extra)
            elif status_code >= 400:
                logger.warning(summary, extra=extra)
            elif request.url.path in QUIET_PATHS:
                logger.debug(summary, extra=extra)
            else:
                logger.info(summary, extra=extra)

        response.headers["X-Request-ID"] = request_id
        return response
