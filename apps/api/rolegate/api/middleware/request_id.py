"""
Request ID middleware for request tracing.
"""

import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from rolegate.utils.context import reset_request_id, set_request_id


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        # Reuse an upstream ID when the caller sends one
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        token = set_request_id(request_id)
        try:
            request.state.request_id = request_id
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            reset_request_id(token)
