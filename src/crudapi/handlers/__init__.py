"""
=============================================================================
HANDLERS
=============================================================================

Application code that sits behind the router.

    ┌──────────────┬─────────────────────────────────────────────────────┐
    │ UserHandler  │ POST/GET/PUT/DELETE on /users over a UserStore       │
    │ DocsHandler  │ /api-docs page and its OpenAPI JSON                  │
    └──────────────┴─────────────────────────────────────────────────────┘

Both follow the same shape: build with their dependencies, then call
register(router) to bind bound methods as route handlers.

=============================================================================
"""

from .users import UserHandler, USER_NOT_FOUND, USER_DELETED
from .docs import DocsHandler, build_openapi, USER_SCHEMA

__all__ = [
    "UserHandler",
    "USER_NOT_FOUND",
    "USER_DELETED",
    "DocsHandler",
    "build_openapi",
    "USER_SCHEMA",
]
