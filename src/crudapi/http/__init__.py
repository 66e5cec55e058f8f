"""
=============================================================================
HTTP MODULE
=============================================================================

The protocol layer: bytes in, HTTPRequest; HTTPResponse out, bytes.

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ request.py           │ RequestParser, HTTPRequest, HTTPParseError   │
    │ response.py          │ HTTPResponse, ResponseBuilder, ok/created/...│
    │ router.py            │ Router, Route: "GET /users/:id" → handler    │
    │ status_codes.py      │ HTTPStatus with reason phrases               │
    └──────────────────────┴──────────────────────────────────────────────┘

Nothing in here knows about users.

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                  # 200 OK
    created,             # 201 Created
    message,             # {"message": ...}
    error,               # {"error": ...}
    bad_request,         # 400 Bad Request
    not_found,           # 404 Not Found
    method_not_allowed,  # 405 Method Not Allowed
    internal_error,      # 500 Internal Server Error
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "message",
    "error",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",
]
