"""Middleware package."""

from rolegate.api.middleware.request_id import RequestIdMiddleware
from rolegate.api.middleware.logging import LoggingMiddleware

__all__ = [
    "RequestIdMiddleware",
    "LoggingMiddleware",
]
