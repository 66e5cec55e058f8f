"""
Unit tests for HTTP request parsing.
"""

import pytest

from crudapi.http.request import HTTPRequest, RequestParser, HTTPParseError


def parse(raw: bytes) -> HTTPRequest:
    return RequestParser().parse(raw)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/users"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_headers(self, sample_get_request: bytes):
        request = parse(sample_get_request)

        assert request.headers["host"] == "localhost:3000"
        assert request.user_agent == "pytest"
        assert request.headers["accept"] == "application/json"
        assert request.is_keep_alive is True

    def test_parse_post_with_body(self, sample_post_request: bytes):
        request = parse(sample_post_request)

        assert request.method == "POST"
        assert request.path == "/users"
        assert request.content_type == "application/json"
        assert request.is_json is True
        assert request.json == {"name": "John", "email": "john@example.com"}

    def test_parse_encoded_path_drops_query(self):
        raw = b"GET /users/%31?q=hello%20world HTTP/1.1\r\nHost: test\r\n\r\n"
        request = parse(raw)

        assert request.path == "/users/1"

    def test_parse_invalid_method(self):
        raw = b"BREW /pot HTTP/1.1\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse(raw)

        assert exc_info.value.status_code == 405

    def test_parse_invalid_request_line(self):
        raw = b"GET\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse(raw)

        assert exc_info.value.status_code == 400

    def test_parse_unsupported_version(self):
        raw = b"GET / HTTP/2.0\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse(raw)

        assert exc_info.value.status_code == 505

    def test_parse_missing_terminator(self):
        with pytest.raises(HTTPParseError):
            parse(b"GET / HTTP/1.1\r\nHost: test\r\n")

    def test_parse_missing_headers(self):
        request = parse(b"GET / HTTP/1.1\r\n\r\n")

        assert request.method == "GET"
        assert request.path == "/"
        assert len(request.headers) == 0

    def test_dot_segments_left_to_the_router(self):
        request = parse(b"GET /users/.. HTTP/1.1\r\nHost: test\r\n\r\n")

        assert request.path == "/users/.."

    def test_parse_request_too_large(self):
        parser = RequestParser(max_request_size=100)
        raw = b"GET / HTTP/1.1\r\n" + b"X-Large: " + b"A" * 200 + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(raw)

        assert exc_info.value.status_code == 413

    def test_http_version_keep_alive_defaults(self):
        request_10 = parse(b"GET / HTTP/1.0\r\nHost: test\r\n\r\n")
        assert request_10.version == "HTTP/1.0"
        assert request_10.is_keep_alive is False

        request_11 = parse(b"GET / HTTP/1.1\r\nHost: test\r\n\r\n")
        assert request_11.version == "HTTP/1.1"
        assert request_11.is_keep_alive is True

        closing = parse(b"GET / HTTP/1.1\r\nConnection: close\r\n\r\n")
        assert closing.is_keep_alive is False

    def test_content_length_trims_body(self):
        raw = (
            b"POST /users HTTP/1.1\r\n"
            b"Content-Length: 9\r\n"
            b"\r\n"
            b"test bodyEXTRA"
        )

        request = parse(raw)
        assert request.body == b"test body"

    @pytest.mark.parametrize("value", [b"abc", b"-5"])
    def test_invalid_content_length(self, value: bytes):
        raw = b"POST /users HTTP/1.1\r\nContent-Length: " + value + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse(raw)

        assert exc_info.value.status_code == 400

    def test_short_body_rejected(self):
        raw = b"POST /users HTTP/1.1\r\nContent-Length: 20\r\n\r\n{}"

        with pytest.raises(HTTPParseError, match="Incomplete body"):
            parse(raw)

    def test_case_insensitive_headers(self):
        raw = b"GET / HTTP/1.1\r\nCONTENT-TYPE: text/html\r\n\r\n"
        request = parse(raw)

        assert request.content_type == "text/html"
        assert request.headers == {"content-type": "text/html"}

    def test_repeated_headers_are_joined(self):
        raw = b"GET / HTTP/1.1\r\nAccept: text/html\r\nAccept: application/json\r\n\r\n"
        request = parse(raw)

        assert request.headers["accept"] == "text/html, application/json"


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_content_type_strips_parameters(self):
        request = HTTPRequest(
            method="POST",
            path="/users",
            headers={"content-type": "Application/JSON; charset=utf-8"},
        )

        assert request.content_type == "application/json"
        assert request.is_json is True

    def test_json_empty_body_is_none(self):
        request = HTTPRequest(method="POST", path="/users", headers={"content-type": "application/json"})

        assert request.json is None

    def test_json_invalid_body_raises(self):
        request = HTTPRequest(method="POST", path="/users", body=b"{not json")

        with pytest.raises(HTTPParseError) as exc_info:
            request.json

        assert exc_info.value.status_code == 400

    def test_json_is_cached(self):
        request = HTTPRequest(method="POST", path="/users", body=b'{"name": "A"}')

        first = request.json
        first["name"] = "changed"

        assert request.json["name"] == "changed"
