"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

HTTPResponse holds status, headers and body; ResponseBuilder assembles one
fluently:

    ResponseBuilder()
        .status(HTTPStatus.CREATED)
        .json({"id": 1, "name": "John", "email": "john@x.com"})
        .build()

Serialized form (to_bytes):

    HTTP/1.1 201 Created\r\n
    Content-Type: application/json; charset=utf-8\r\n
    Content-Length: 46\r\n              ← always filled in
    Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n
    Server: InMemoryCRUD/1.0\r\n
    \r\n
    {"id": 1, "name": "John", "email": "john@x.com"}

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, Union
import json

from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "InMemoryCRUD/1.0"


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be written to a socket.

    Use ResponseBuilder (or the helpers at the bottom of this module)
    rather than filling the fields by hand.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 404 Not Found"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def json(self) -> Any:
        """Decode a JSON body, mostly useful in tests and middleware."""
        if not self.body:
            return None
        return json.loads(self.body.decode("utf-8"))

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize status line, headers and body.

        Content-Length, Date and Server are added when the handler did not
        set them.
        """
        response_headers = dict(self.headers)
        response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Every setter returns the builder so calls chain; build() produces the
    response.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: Union[HTTPStatus, int]) -> "ResponseBuilder":
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def html(self, html: str) -> "ResponseBuilder":
        self._body = html.encode("utf-8")
        self._headers["Content-Type"] = "text/html; charset=utf-8"
        return self

    def json(self, data: Any, pretty: bool = False) -> "ResponseBuilder":
        """
        Serialize data as the JSON body.

        Non-ASCII text is written as UTF-8 rather than \\u escapes, so a
        user named "Zoë" comes back as typed.
        """
        indent = 2 if pretty else None
        self._body = json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")
        self._headers["Content-Type"] = "application/json; charset=utf-8"
        return self

    def no_cache(self) -> "ResponseBuilder":
        self._headers["Cache-Control"] = "no-store"
        return self

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


def format_http_date(dt: datetime) -> str:
    """
    Format a UTC datetime as an RFC 7231 HTTP-date.

    Example: "Mon, 19 Oct 2026 12:00:00 GMT". Built by hand so the output
    does not depend on the process locale.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
#     return ok(user.to_dict())
#     return created(user.to_dict())
#     return not_found("No route matches /nope")
#
# =============================================================================

def ok(body: Union[dict, list]) -> HTTPResponse:
    """200 OK with a JSON body."""
    return ResponseBuilder().status(HTTPStatus.OK).json(body).build()


def created(body: Union[dict, list]) -> HTTPResponse:
    """201 Created with a JSON body."""
    return ResponseBuilder().status(HTTPStatus.CREATED).json(body).build()


def message(text: str, status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """A ``{"message": text}`` JSON body with the given status."""
    return ResponseBuilder().status(status).json({"message": text}).build()


def error(status: Union[HTTPStatus, int], text: str) -> HTTPResponse:
    """An ``{"error": text}`` JSON body, used for framework-level failures."""
    return ResponseBuilder().status(status).json({"error": text}).build()


def bad_request(text: str = "Bad Request") -> HTTPResponse:
    return error(HTTPStatus.BAD_REQUEST, text)


def not_found(text: str = "Not Found") -> HTTPResponse:
    return error(HTTPStatus.NOT_FOUND, text)


def method_not_allowed(allowed_methods: list[str]) -> HTTPResponse:
    """
    405 with the Allow header RFC 7231 requires.
    """
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .json({"error": "Method Not Allowed", "allowed": allowed_methods})
        .build())


def internal_error(text: str = "Internal Server Error") -> HTTPResponse:
    """500; keep the text generic, details go to the log."""
    return error(HTTPStatus.INTERNAL_SERVER_ERROR, text)
