"""
Integration tests: a real server on a real socket, driven with http.client.
"""

import logging
import socket
import threading

import pytest

from crudapi import ServerConfig, create_app


pytestmark = pytest.mark.integration


class TestUserScenarios:
    """End-to-end CRUD walkthroughs."""

    def test_create_then_list(self, test_server):
        status, _, body = test_server.request(
            "POST", "/users", {"name": "John Doe", "email": "john@example.com"}
        )
        assert status == 201
        assert body == {"id": 1, "name": "John Doe", "email": "john@example.com"}

        status, _, body = test_server.request("GET", "/users")
        assert status == 200
        assert body == [{"id": 1, "name": "John Doe", "email": "john@example.com"}]

    def test_get_by_id(self, test_server):
        test_server.request("POST", "/users", {"name": "A", "email": "a@x"})
        test_server.request("POST", "/users", {"name": "B", "email": "b@x"})

        status, _, body = test_server.request("GET", "/users/2")

        assert status == 200
        assert body == {"id": 2, "name": "B", "email": "b@x"}

    def test_get_missing(self, test_server):
        test_server.request("POST", "/users", {"name": "A", "email": "a@x"})

        status, _, body = test_server.request("GET", "/users/999")

        assert status == 404
        assert body == {"message": "User not found"}

    def test_update(self, test_server):
        test_server.request("POST", "/users", {"name": "Alice", "email": "alice@x.com"})

        status, _, body = test_server.request(
            "PUT", "/users/1", {"name": "Alice B", "email": "alice.b@x.com"}
        )
        assert status == 200
        assert body == {"id": 1, "name": "Alice B", "email": "alice.b@x.com"}

        _, _, listed = test_server.request("GET", "/users")
        assert listed == [body]

    def test_update_missing(self, test_server):
        status, _, body = test_server.request("PUT", "/users/5", {"name": "X", "email": "Y"})

        assert status == 404
        assert body == {"message": "User not found"}
        assert test_server.request("GET", "/users")[2] == []

    def test_delete_idempotent(self, test_server):
        test_server.request("POST", "/users", {"name": "A", "email": "a@x"})
        test_server.request("POST", "/users", {"name": "B", "email": "b@x"})

        for _ in range(2):
            status, _, body = test_server.request("DELETE", "/users/1")
            assert status == 200
            assert body == {"message": "User deleted"}

        _, _, listed = test_server.request("GET", "/users")
        assert listed == [{"id": 2, "name": "B", "email": "b@x"}]

    def test_ids_keep_increasing_after_delete(self, test_server):
        test_server.request("POST", "/users", {"name": "A", "email": "a@x"})
        test_server.request("DELETE", "/users/1")

        _, _, body = test_server.request("POST", "/users", {"name": "B", "email": "b@x"})

        assert body["id"] == 2

    def test_store_is_shared_with_app(self, test_server):
        test_server.request("POST", "/users", {"name": "A", "email": "a@x"})

        assert [u.name for u in test_server.server.store.list_all()] == ["A"]


class TestProtocol:
    """HTTP-level behaviour outside the user handlers."""

    def test_malformed_json(self, test_server):
        status, _, body = test_server.request(
            "POST", "/users", raw_body=b'{"name": ', headers={"Content-Type": "application/json"}
        )

        assert status == 400
        assert "error" in body

    def test_unknown_route(self, test_server):
        status, _, body = test_server.request("GET", "/nope")

        assert status == 404
        assert body == {"error": "No route matches /nope"}

    def test_wrong_method(self, test_server):
        status, headers, _ = test_server.request("PATCH", "/users")

        assert status == 405
        assert headers["allow"] == "GET, POST"

    def test_handler_crash_is_500(self, test_server):
        @test_server.server.router.get("/boom")
        def boom(request):
            raise RuntimeError("handler bug")

        status, _, body = test_server.request("GET", "/boom")

        assert status == 500
        assert body == {"error": "Internal Server Error"}

    def test_standard_headers(self, test_server):
        _, headers, _ = test_server.request("GET", "/users")

        assert headers["server"] == "InMemoryCRUD/1.0"
        assert headers["content-type"] == "application/json; charset=utf-8"
        assert "date" in headers
        assert len(headers["x-request-id"]) == 8

    def test_docs(self, test_server):
        status, headers, page = test_server.request("GET", "/api-docs")
        assert status == 200
        assert headers["content-type"].startswith("text/html")
        assert "swagger-ui" in page

        status, _, spec = test_server.request("GET", "/api-docs/swagger.json")
        assert status == 200
        assert spec["servers"][0]["url"] == f"http://localhost:{test_server.port}"
        assert set(spec["paths"]) == {"/users", "/users/{id}"}

    def test_keep_alive_serves_several_requests(self, test_server):
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0) as sock:
            reader = sock.makefile("rb")
            for expected_id in (1, 2):
                body = b'{"name": "A", "email": "a@x"}'
                sock.sendall(
                    b"POST /users HTTP/1.1\r\nHost: test\r\n"
                    b"Content-Type: application/json\r\n"
                    + f"Content-Length: {len(body)}\r\n\r\n".encode()
                    + body
                )
                status_line = reader.readline()
                assert status_line == b"HTTP/1.1 201 Created\r\n"

                headers = {}
                while True:
                    line = reader.readline()
                    if line == b"\r\n":
                        break
                    name, value = line.decode().split(":", 1)
                    headers[name.strip().lower()] = value.strip()

                assert headers["connection"] == "keep-alive"
                payload = reader.read(int(headers["content-length"]))
                assert f'"id": {expected_id}'.encode() in payload

    def test_bad_request_line_closes_connection(self, test_server):
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0) as sock:
            sock.sendall(b"NONSENSE\r\n\r\n")
            data = b""
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                data += chunk

        assert data.startswith(b"HTTP/1.1 400 Bad Request\r\n")
        assert b"Connection: close" in data

    def test_unsupported_version(self, test_server):
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0) as sock:
            sock.sendall(b"GET /users HTTP/2.0\r\nHost: test\r\n\r\n")
            data = sock.recv(4096)

        assert data.startswith(b"HTTP/1.1 505 ")


class TestServerLifecycle:

    def test_startup_lines_logged(self, free_port, caplog):
        caplog.set_level(logging.INFO, logger="crudapi.server")
        app = create_app(ServerConfig(port=free_port, min_workers=1, max_workers=1, log_level="INFO"))
        thread = threading.Thread(target=app.run, daemon=True)
        thread.start()
        try:
            assert app.wait_until_ready(timeout=5.0)
        finally:
            app.shutdown()
            thread.join(timeout=10.0)

        messages = [r.getMessage() for r in caplog.records if r.name == "crudapi.server"]
        assert f"Server running at http://localhost:{free_port}" in messages
        assert f"Swagger docs at http://localhost:{free_port}/api-docs" in messages
        assert not thread.is_alive()
