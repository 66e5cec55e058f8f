"""
=============================================================================
API DOCUMENTATION
=============================================================================

Serves an OpenAPI 3.0 description of the routes and a page that renders it.

    GET /api-docs                 HTML shell, loads Swagger UI from a CDN
    GET /api-docs/swagger.json    the OpenAPI document

The document is built from route metadata, not written by hand:

    router.add_route("/users/:id", handler.get, method="GET",
                     summary="Get user by ID",
                     param_types={"id": "integer"},
                     responses={200: "User found", 404: "User not found"})

            │
            ▼

    "/users/{id}": {
      "get": {
        "summary": "Get user by ID",
        "parameters": [{"in": "path", "name": "id", "required": true,
                        "schema": {"type": "integer"}}],
        "responses": {"200": {"description": "User found"},
                      "404": {"description": "User not found"}}
      }
    }

Only routes with a "summary" are documented, so the docs routes do not
describe themselves.

Recognised metadata:
    summary        one-line description (required to be listed)
    responses      {status code: description}
    request_body   name of a schema under components.schemas
    param_types    {path param: OpenAPI type}, default "string"

=============================================================================
"""

from typing import Any, Dict, List, Optional
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.router import Router, Route


logger = logging.getLogger(__name__)

API_TITLE = "In-Memory CRUD API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "CRUD REST API with in-memory data and Swagger"

SWAGGER_UI_CDN = "https://unpkg.com/swagger-ui-dist@5"

USER_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "email"],
    "properties": {
        "id": {"type": "integer", "example": 1},
        "name": {"type": "string", "example": "John Doe"},
        "email": {"type": "string", "example": "john@example.com"},
    },
}

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <title>{title}</title>
    <link rel="stylesheet" href="{cdn}/swagger-ui.css">
</head>
<body>
    <div id="swagger-ui"></div>
    <script src="{cdn}/swagger-ui-bundle.js"></script>
    <script>
        window.onload = function () {{
            window.ui = SwaggerUIBundle({{
                url: "{spec_url}",
                dom_id: "#swagger-ui"
            }});
        }};
    </script>
</body>
</html>
"""


def build_openapi(
    routes: List[Route],
    servers: Optional[List[str]] = None,
    schemas: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Build an OpenAPI 3.0.0 document from route metadata.

    Args:
        routes: Routes to describe; those without a summary are skipped.
        servers: Base URLs listed under "servers".
        schemas: components.schemas; defaults to {"User": USER_SCHEMA}.

    Returns:
        The document as a JSON-serializable dict.
    """
    paths: Dict[str, Dict[str, Any]] = {}

    for route in routes:
        if not route.method or "summary" not in route.meta:
            continue
        operation = _describe_operation(route)
        paths.setdefault(route.template, {})[route.method.lower()] = operation

    return {
        "openapi": "3.0.0",
        "info": {
            "title": API_TITLE,
            "version": API_VERSION,
            "description": API_DESCRIPTION,
        },
        "servers": [{"url": url} for url in servers or []],
        "paths": paths,
        "components": {
            "schemas": schemas if schemas is not None else {"User": USER_SCHEMA},
        },
    }


def _describe_operation(route: Route) -> Dict[str, Any]:
    meta = route.meta
    operation: Dict[str, Any] = {"summary": meta["summary"]}
    if route.name:
        operation["operationId"] = route.name

    if route.param_names:
        param_types = meta.get("param_types", {})
        operation["parameters"] = [
            {
                "in": "path",
                "name": name,
                "required": True,
                "schema": {"type": param_types.get(name, "string")},
            }
            for name in route.param_names
        ]

    if meta.get("request_body"):
        operation["requestBody"] = {
            "required": True,
            "content": {
                "application/json": {
                    "schema": {"$ref": f"#/components/schemas/{meta['request_body']}"},
                },
            },
        }

    operation["responses"] = {
        str(code): {"description": description}
        for code, description in meta.get("responses", {}).items()
    }
    return operation


class DocsHandler:
    """
    Serves the API documentation for a router.

    The OpenAPI document is built on each request, so routes registered
    after the docs are mounted still show up.

    Args:
        router: Router whose routes are documented.
        servers: Base URLs for the "servers" list.
        path: Mount point of the HTML page.
    """

    def __init__(self, router: Router, servers: Optional[List[str]] = None, path: str = "/api-docs"):
        self.router = router
        self.servers = list(servers or [])
        self.path = path.rstrip("/")

    @property
    def spec_path(self) -> str:
        return f"{self.path}/swagger.json"

    def register(self, router: Optional[Router] = None) -> None:
        target = router or self.router
        target.add_route(self.path, self.page, method="GET", name="api_docs")
        target.add_route(self.spec_path, self.spec, method="GET", name="api_docs_spec")
        logger.debug(f"API docs mounted at {self.path}")

    def openapi(self) -> Dict[str, Any]:
        return build_openapi(self.router.routes(), servers=self.servers)

    def spec(self, request: HTTPRequest) -> HTTPResponse:
        return ResponseBuilder().json(self.openapi(), pretty=True).no_cache().build()

    def page(self, request: HTTPRequest) -> HTTPResponse:
        html = _PAGE.format(title=API_TITLE, cdn=SWAGGER_UI_CDN, spec_url=self.spec_path)
        return ResponseBuilder().html(html).build()
