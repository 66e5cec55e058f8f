"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The subset of RFC 7231 status codes this service can emit, with the reason
phrases written on the status line.

    ┌───────────┬──────────────────────────────────────────────────────────┐
    │   Code    │  Where it comes from                                     │
    ├───────────┼──────────────────────────────────────────────────────────┤
    │  200      │  read / update / delete of a user, docs pages            │
    │  201      │  POST /users                                             │
    │  400      │  malformed request line, bad JSON body                   │
    │  404      │  unknown user id, unknown route                          │
    │  405      │  known path, wrong method (router)                       │
    │  408      │  client too slow to send its request                     │
    │  413      │  request larger than max_request_size                    │
    │  500      │  handler raised                                          │
    │  503      │  worker queue full                                       │
    │  505      │  anything other than HTTP/1.0 or HTTP/1.1                │
    └───────────┴──────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes usable as plain integers.

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line ("Not Found", ...)."""
        return _PHRASES.get(self, "Unknown")


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
