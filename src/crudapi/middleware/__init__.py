"""
Middleware run around the router.

    LoggingMiddleware    access log line + X-Request-ID
    JSONBodyMiddleware   400 for bodies that claim JSON but are not
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog
from .json_body import JSONBodyMiddleware

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
    "JSONBodyMiddleware",
]
