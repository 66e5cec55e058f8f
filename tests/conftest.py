"""
pytest configuration and fixtures.
"""

import http.client
import json
import socket
import threading
from typing import Any, Generator, Optional, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from crudapi import ServerConfig, UserStore, create_app
from crudapi.app import CRUDServer
from crudapi.http import HTTPRequest


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /users?page=1&limit=10 HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with JSON body."""
    body = b'{"name": "John", "email": "john@example.com"}'
    return (
        b"POST /users HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"Content-Type: application/json\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"Connection: close\r\n"
        b"\r\n"
    ) + body


@pytest.fixture
def store() -> UserStore:
    return UserStore()


@pytest.fixture
def app(store: UserStore) -> CRUDServer:
    """Fully wired application, not listening. Call app_handler to dispatch."""
    return create_app(ServerConfig(log_level="WARNING"), store=store)


@pytest.fixture
def app_handler(app: CRUDServer):
    """The middleware + router chain exactly as the server runs it."""
    return app._middleware.wrap(app.router.handle)


@pytest.fixture
def make_request():
    """Factory for requests that skip the socket layer."""
    def json_request(method: str, path: str, payload: Any = None, content_type: str = "application/json") -> HTTPRequest:
        headers = {}
        body = b""
        if payload is not None:
            body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
            headers["content-type"] = content_type
            headers["content-length"] = str(len(body))
        return HTTPRequest(method=method, path=path, headers=headers, body=body)
    return json_request


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: CRUDServer, port: int):
        self.server = server
        self.port = port
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        raw_body: Optional[bytes] = None,
        headers: Optional[dict] = None,
    ) -> Tuple[int, dict, Any]:
        """
        One request on a fresh connection.

        Returns:
            (status, lowercased headers, decoded JSON body or raw text)
        """
        conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=5.0)
        try:
            send_headers = dict(headers or {})
            body = raw_body
            if payload is not None:
                body = json.dumps(payload).encode()
                send_headers.setdefault("Content-Type", "application/json")
            conn.request(method, path, body=body, headers=send_headers)
            response = conn.getresponse()
            data = response.read()
            response_headers = {k.lower(): v for k, v in response.getheaders()}
        finally:
            conn.close()

        if response_headers.get("content-type", "").startswith("application/json"):
            return response.status, response_headers, json.loads(data.decode("utf-8"))
        return response.status, response_headers, data.decode("utf-8")


@pytest.fixture
def test_server(free_port: int) -> Generator[TestServer, None, None]:
    """A real CRUD server on a free port with an empty store."""
    server = create_app(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        min_workers=2,
        max_workers=4,
        log_level="WARNING",
    ))

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
