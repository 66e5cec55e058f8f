"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes of one HTTP/1.x request into an HTTPRequest.

    POST /users HTTP/1.1\r\n                 ← request line
    Host: localhost:3000\r\n                 ← headers (case-insensitive)
    Content-Type: application/json\r\n
    Content-Length: 42\r\n
    \r\n                                     ← blank line
    {"name":"John","email":"john@x.com"}     ← body (Content-Length bytes)

The parser only checks framing. It knows nothing about users: a request
for /users/abc parses fine and it is up to the handler to decide that
"abc" names no record.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from urllib.parse import urlparse, unquote
import re
import json


class HTTPParseError(Exception):
    """
    Raised when a request cannot be understood.

    Carries the status code to answer with:
        400 Bad Request                - malformed syntax, invalid JSON body
        405 Method Not Allowed         - method we do not recognise
        413 Payload Too Large          - over max_request_size
        505 HTTP Version Not Supported - not HTTP/1.0 or HTTP/1.1
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Header names are stored lowercased. ``path_params`` is filled in by the
    router once a route matches: for ``/users/:id`` and ``/users/7`` it is
    ``{"id": "7"}``, always as text.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: tuple[str, int] = ("", 0)

    _body_json: Optional[Any] = field(default=None, repr=False)
    _json_parsed: bool = field(default=False, repr=False)

    @property
    def content_type(self) -> Optional[str]:
        """Media type without parameters ("application/json")."""
        ct = self.headers.get("content-type", "")
        return ct.split(";")[0].strip().lower() or None

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_json(self) -> bool:
        """True when the client declared a JSON body."""
        return self.content_type == "application/json"

    @property
    def json(self) -> Any:
        """
        The body decoded as JSON, or None for an empty body.

        Parsed once and cached.

        Raises:
            HTTPParseError: If the body is not valid UTF-8 JSON.
        """
        if not self._json_parsed:
            if self.body:
                try:
                    self._body_json = json.loads(self.body.decode("utf-8"))
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    raise HTTPParseError(f"Invalid JSON body: {e}")
            self._json_parsed = True
        return self._body_json

    @property
    def is_keep_alive(self) -> bool:
        """
        Whether the client expects the connection to stay open.

        HTTP/1.1 keeps alive unless told "Connection: close"; HTTP/1.0
        closes unless told "Connection: keep-alive".
        """
        connection = self.headers.get("connection", "").lower()
        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    The connection layer has already cut the byte stream into one request
    (headers plus Content-Length bytes of body); this class validates and
    splits it:

        1. size check                 → 413
        2. find the \\r\\n\\r\\n separator
        3. request line               → 400 / 405 / 505
        4. headers, lowercased
        5. body, trimmed to Content-Length
    """

    VALID_METHODS = {
        "GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse one complete request.

        Args:
            data: Raw request bytes.
            client_address: Peer (ip, port), kept for access logging.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413,
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError("Invalid Content-Length header")
        if content_length < 0:
            raise HTTPParseError("Invalid Content-Length header")

        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body[:content_length],
            client_address=client_address,
        )

    def _parse_request_line(
        self,
        line: str
    ) -> tuple[str, str, str]:
        """Split "METHOD URI VERSION" and decode the URI."""
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505,
            )

        parsed = urlparse(uri)
        path = unquote(parsed.path) or "/"
        return method, path, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse "Name: value" lines into a dict keyed by lowercase name.

        Repeated headers are joined with ", " (RFC 7230 section 3.2.2).
        Lines without a colon are ignored.
        """
        headers: Dict[str, str] = {}
        for line in lines:
            if not line:
                continue
            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue
            name = match.group(1).strip().lower()
            value = match.group(2).strip()
            if name in headers:
                headers[name] = f"{headers[name]}, {value}"
            else:
                headers[name] = value
        return headers
