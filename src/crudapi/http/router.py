"""
=============================================================================
URL ROUTER
=============================================================================

Maps "METHOD path" to a handler function.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Registered Routes                                                 │
    │   ┌───────────────────────────────────────────────────────────────┐ │
    │   │ POST   /users           → UserHandler.create                  │ │
    │   │ GET    /users           → UserHandler.list_all                │ │
    │   │ GET    /users/:id       → UserHandler.get     ← GET /users/7  │ │
    │   │ PUT    /users/:id       → UserHandler.update                  │ │
    │   │ DELETE /users/:id       → UserHandler.delete                  │ │
    │   │ GET    /api-docs        → DocsHandler.page                    │ │
    │   └───────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │   Extracted: request.path_params = {"id": "7"}                      │
    └─────────────────────────────────────────────────────────────────────┘

Patterns:
    /users           static, exact match (a trailing slash is ignored)
    /users/:id       ":id" captures one segment, always as text
    /files/*path     "*path" captures the rest, must come last

Each pattern compiles to an anchored regex with named groups:

    /users/:id  →  ^/users/(?P<id>[^/]+)$

First registered, first matched. A path that exists under another method
answers 405 with an Allow header; anything else answers 404.

Routes may carry metadata given as keyword arguments at registration.
The API documentation is generated from it, so the route table is the
single source for both dispatch and docs.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, Any, List
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found, method_not_allowed


logger = logging.getLogger(__name__)

# Handler: takes a request, returns a response.
Handler = Callable[[HTTPRequest], HTTPResponse]

ALL_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


@dataclass
class Route:
    """
    A registered route.

        Route(
            path="/users/:id",
            method="GET",
            handler=handler.get,
            name="get_user",
            meta={"summary": "Get user by ID", "responses": {...}},
        )
    """

    path: str
    method: Optional[str]            # None = any method
    handler: Handler
    name: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)

    @property
    def param_names(self) -> List[str]:
        return list(self._param_names)

    @property
    def template(self) -> str:
        """
        The path in OpenAPI template form: /users/:id → /users/{id}.
        """
        segments = []
        for segment in self.path.split("/"):
            if segment.startswith(":") or segment.startswith("*"):
                segments.append("{" + (segment[1:] or "wildcard") + "}")
            else:
                segments.append(segment)
        return "/".join(segments) or "/"


@dataclass
class RouteMatch:
    """A successful match: the route plus its captured path parameters."""
    route: Route
    params: Dict[str, str]


class Router:
    """
    HTTP request router with dynamic path parameters.

    Registration is decorator-based:

        router = Router()

        @router.get("/users/:id", summary="Get user by ID")
        def get_user(request):
            return ok({"id": request.path_params["id"]})

    or explicit, which is how handler classes bind their bound methods:

        router.add_route("/users", handler.create, method="POST")
    """

    def __init__(self, prefix: str = ""):
        self.prefix = prefix.rstrip("/")
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None,
        **meta: Any
    ) -> Route:
        """
        Register a route.

        Args:
            path: URL pattern (e.g. /users/:id)
            handler: Callable taking a request and returning a response
            method: HTTP method, None for any
            name: Optional route name, used as the OpenAPI operationId
            **meta: Free-form metadata, kept on route.meta

        Returns:
            The registered Route.
        """
        full_path = self.prefix + path
        pattern, param_names = self._compile_pattern(full_path)

        route = Route(
            path=full_path,
            method=method.upper() if method else None,
            handler=handler,
            name=name,
            meta=meta,
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)

        logger.debug(f"Registered route {route.method or 'ANY'} {route.path}")
        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, List[str]]:
        """
        Compile "/users/:id" into ^/users/(?P<id>[^/]+)$.

        Returns:
            (compiled regex, parameter names in order)
        """
        param_names: List[str] = []
        regex_parts = ["^"]

        for segment in path.split("/"):
            if not segment:
                continue

            regex_parts.append("/")

            if segment.startswith(":"):
                param_name = segment[1:]
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>[^/]+)")
            elif segment.startswith("*"):
                param_name = segment[1:] or "wildcard"
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>.*)")
                break
            else:
                regex_parts.append(re.escape(segment))

        if len(regex_parts) == 1:
            # Root path "/"
            regex_parts.append("/")
        regex_parts.append("$")
        return re.compile("".join(regex_parts)), param_names

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    @staticmethod
    def _normalize(path: str) -> str:
        """Ensure one leading slash and drop trailing ones."""
        return "/" + path.strip("/") if path != "/" else "/"

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Returns:
            RouteMatch, or None when nothing matches.
        """
        path = self._normalize(path)

        for route in self._routes:
            if route.method and route.method != method.upper():
                continue
            if route._pattern:
                found = route._pattern.match(path)
                if found:
                    return RouteMatch(route=route, params=found.groupdict())

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """Methods registered for a path, for the 405 Allow header."""
        path = self._normalize(path)
        methods = set()

        for route in self._routes:
            if route._pattern and route._pattern.match(path):
                if route.method is None:
                    return list(ALL_METHODS)
                methods.add(route.method)

        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request.

        1. match → inject path_params → call handler
        2. path known under other methods → 405
        3. otherwise → 404
        """
        found = self.match(request.method, request.path)

        if found:
            request.path_params = found.params
            return found.route.handler(request)

        allowed = self.get_allowed_methods(request.path)
        if allowed:
            return method_not_allowed(allowed)

        return not_found(f"No route matches {request.path}")

    # =========================================================================
    # DECORATOR-STYLE REGISTRATION
    # =========================================================================

    def route(
        self,
        path: str,
        method: Optional[str] = None,
        name: Optional[str] = None,
        **meta: Any
    ) -> Callable[[Handler], Handler]:
        """Decorator form of add_route(); returns the handler unchanged."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name, **meta)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None, **meta: Any) -> Callable[[Handler], Handler]:
        return self.route(path, "GET", name, **meta)

    def post(self, path: str, name: Optional[str] = None, **meta: Any) -> Callable[[Handler], Handler]:
        return self.route(path, "POST", name, **meta)

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def routes(self) -> List[Route]:
        """All registered routes in registration order."""
        return list(self._routes)

    def describe(self) -> str:
        """
        The route table as text, one route per line:

              POST     /users
              GET      /users/:id
        """
        return "\n".join(
            f"  {route.method or 'ANY':8} {route.path}" for route in self._routes
        )
