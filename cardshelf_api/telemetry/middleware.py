"""
Telemetry Middleware for FastAPI

Tracks every HTTP request with timing and status code and injects a
correlation id into the request context and the X-Request-ID header.
"""

import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .context import clear_request_context, generate_correlation_id, set_request_context
from .events import TelemetryEvents
from .tracker import track_event, track_exception


class TelemetryMiddleware(BaseHTTPMiddleware):
    """
    Request telemetry.

    The caller is recorded as "anonymous" here; the authorization guard binds
    the subject id to the context once the token has been verified.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        request_id = request.headers.get("X-Request-ID") or generate_correlation_id()
        set_request_context(request_id=request_id)
        request.state.request_id = request_id

        try:
            track_event(
                TelemetryEvents.REQUEST_RECEIVED,
                {"endpoint": request.url.path, "method": request.method},
            )

            response = await call_next(request)

            track_event(
                TelemetryEvents.REQUEST_COMPLETED,
                {
                    "endpoint": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "duration_ms": (time.perf_counter() - start_time) * 1000,
                },
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_exception(
                e,
                {"endpoint": request.url.path, "method": request.method, "duration_ms": duration_ms},
            )
            track_event(
                TelemetryEvents.REQUEST_FAILED,
                {
                    "endpoint": request.url.path,
                    "method": request.method,
                    "duration_ms": duration_ms,
                    "error_type": type(e).__name__,
                },
            )
            raise

        finally:
            clear_request_context()
