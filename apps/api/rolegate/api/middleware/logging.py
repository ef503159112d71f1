"""
Logging middleware for request/response logging.
"""

import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from rolegate.utils.context import get_request_id

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with the role it was evaluated under."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        # Set by the ability dependency; absent on routes that never
        # resolved a role (health checks, docs)
        role = getattr(request.state, "role", None)

        logger.info(
            "Request completed",
            extra={
                "request_id": get_request_id(),
                "method": request.method,
                "path": request.url.path,
                "role": role,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )

        return response
