"""
Request logging middleware for FastAPI.

Logs every inbound request with its timestamp, and the response status
with timing once the handler returns.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs requests.

    Streaming responses are timed until their headers are ready, not
    until the body finishes.
    """

    def __init__(self, app: ASGIApp, slow_request_threshold_ms: float = 5000):
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        logger.info(f"{timestamp.replace('+00:00', 'Z')} - {request.method} {target}")

        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        if duration_ms > self.slow_request_threshold_ms:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"took {duration_ms:.2f}ms"
            )
        else:
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"({duration_ms:.2f}ms)"
            )

        return response
