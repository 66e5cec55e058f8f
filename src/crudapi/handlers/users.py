"""
=============================================================================
USER ROUTES
=============================================================================

Binds the five /users routes to a UserStore.

    ┌────────┬─────────────┬──────────────────────────┬───────────────────┐
    │ Method │ Path        │ Success                  │ Failure           │
    ├────────┼─────────────┼──────────────────────────┼───────────────────┤
    │ POST   │ /users      │ 201 created record       │ -                 │
    │ GET    │ /users      │ 200 [records]            │ -                 │
    │ GET    │ /users/:id  │ 200 record               │ 404 not found     │
    │ PUT    │ /users/:id  │ 200 updated record       │ 404 not found     │
    │ DELETE │ /users/:id  │ 200 "User deleted"       │ - (idempotent)    │
    └────────┴─────────────┴──────────────────────────┴───────────────────┘

    404 body:    {"message": "User not found"}
    DELETE body: {"message": "User deleted"}

Request bodies are not validated. Whatever "name" and "email" hold is
stored, and a field that is missing is stored as null.

Each route also carries its documentation (summary, parameters, request
body, response codes) as route metadata; DocsHandler turns that into the
OpenAPI document.

=============================================================================
"""

from typing import Any, Dict
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, created, ok, message
from ..http.router import Router
from ..http.status_codes import HTTPStatus
from ..store import UserStore, UserNotFound


logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
USER_DELETED = "User deleted"

ID_PARAM = {"id": "integer"}


class UserHandler:
    """
    CRUD handlers over one UserStore.

    Usage:
        store = UserStore()
        UserHandler(store).register(router)
    """

    def __init__(self, store: UserStore):
        self.store = store

    def register(self, router: Router) -> None:
        """Add the five user routes, with their documentation, to router."""
        router.add_route(
            "/users", self.create, method="POST", name="create_user",
            summary="Create a user",
            request_body="User",
            responses={201: "User created"},
        )
        router.add_route(
            "/users", self.list_all, method="GET", name="list_users",
            summary="Get all users",
            responses={200: "List of users"},
        )
        router.add_route(
            "/users/:id", self.get, method="GET", name="get_user",
            summary="Get user by ID",
            param_types=ID_PARAM,
            responses={200: "User found", 404: USER_NOT_FOUND},
        )
        router.add_route(
            "/users/:id", self.update, method="PUT", name="update_user",
            summary="Update a user",
            param_types=ID_PARAM,
            request_body="User",
            responses={200: "User updated", 404: USER_NOT_FOUND},
        )
        router.add_route(
            "/users/:id", self.delete, method="DELETE", name="delete_user",
            summary="Delete a user",
            param_types=ID_PARAM,
            responses={200: USER_DELETED},
        )

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def create(self, request: HTTPRequest) -> HTTPResponse:
        fields = _body_fields(request)
        user = self.store.create(fields.get("name"), fields.get("email"))
        logger.info(f"User {user.id} created")
        return created(user.to_dict())

    def list_all(self, request: HTTPRequest) -> HTTPResponse:
        return ok([user.to_dict() for user in self.store.list_all()])

    def get(self, request: HTTPRequest) -> HTTPResponse:
        try:
            user = self.store.find_by_id(request.path_params["id"])
        except UserNotFound:
            return _user_not_found()
        return ok(user.to_dict())

    def update(self, request: HTTPRequest) -> HTTPResponse:
        fields = _body_fields(request)
        try:
            user = self.store.update_by_id(
                request.path_params["id"],
                fields.get("name"),
                fields.get("email"),
            )
        except UserNotFound:
            return _user_not_found()
        logger.info(f"User {user.id} updated")
        return ok(user.to_dict())

    def delete(self, request: HTTPRequest) -> HTTPResponse:
        self.store.delete_by_id(request.path_params["id"])
        return message(USER_DELETED)


def _body_fields(request: HTTPRequest) -> Dict[str, Any]:
    """
    The JSON object sent as body, or {} for anything else.

    Non-JSON content types, empty bodies and top-level arrays contribute no
    fields.
    """
    if not request.is_json:
        return {}
    payload = request.json
    return payload if isinstance(payload, dict) else {}


def _user_not_found() -> HTTPResponse:
    return message(USER_NOT_FOUND, HTTPStatus.NOT_FOUND)
