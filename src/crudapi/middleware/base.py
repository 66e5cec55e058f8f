"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

Middleware wraps the router. Each one sees the request on the way in and
the response on the way out, and may answer by itself without calling on:

    pipeline.add(LoggingMiddleware())       # outermost
    pipeline.add(JSONBodyMiddleware())      # innermost, next to the router

    request  ──► Logging ──► JSONBody ──► router.handle
    response ◄── Logging ◄── JSONBody ◄──┘

Contract:

    def __call__(self, request, next) -> HTTPResponse:
        ...                      # before
        response = next(request) # or return early
        ...                      # after
        return response

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

# The next middleware, or the router at the end of the chain.
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """Abstract base class for middleware."""

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """Process the request, usually by delegating to ``next``."""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered middleware around a final handler.

    First added is outermost. wrap() builds the chain once:

        handler = pipeline.wrap(router.handle)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Nest the middleware around handler.

        Wrapping runs in reverse so that [A, B] yields A(B(handler)).
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._bind(middleware, current)
        return current

    @staticmethod
    def _bind(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
