"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    SocketServer ──accept──► ThreadPool ──► _process_connection(conn)
                                                 │
                              ┌──────────────────┘
                              ▼
                  read_request ─► RequestParser ─► middleware ─► Router
                              ▲                                    │
                              └──── keep-alive ◄── send_response ◄─┘

Failures that never reach a handler are answered here:

    ┌──────────────────────────┬─────────────────────────────────────────┐
    │ HTTPParseError           │ its status_code, then close              │
    │ RequestTooLarge          │ 413, then close                          │
    │ handler raised           │ 500 {"error": "Internal Server Error"}   │
    │ first request too slow   │ 408                                      │
    │ worker queue full        │ 503 "Server overloaded"                  │
    └──────────────────────────┴─────────────────────────────────────────┘

=============================================================================
"""

import logging
import threading
from typing import Optional, Callable

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, RequestTooLarge, ThreadPool
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, ResponseBuilder, HTTPStatus,
    Router, internal_error,
)
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class HTTPServer:
    """
    Threaded HTTP/1.1 server with routing and middleware.

        server = HTTPServer(ServerConfig(port=3000))
        server.use(LoggingMiddleware())

        @server.router.get("/ping")
        def ping(request):
            return ok({"pong": True})

        server.run()

    Raises:
        ValueError: From ServerConfig.validate() on a bad configuration.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._router = Router()
        self._middleware = MiddlewarePipeline()

        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None
        self._running = False
        self._ready = threading.Event()

    # ─────────────────────────────────────────────────────────────────────
    # Setup
    # ─────────────────────────────────────────────────────────────────────

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware; the first added runs outermost."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    # ─────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────

    def run(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """
        Serve until SIGINT/SIGTERM or shutdown(). Blocks.

        Args:
            host: Overrides config.host.
            port: Overrides config.port.
        """
        if host:
            self.config.host = host
        if port:
            self.config.port = port
            self.config.validate()

        self._setup_logging()
        self._handler = self._middleware.wrap(self._router.handle)
        self._thread_pool.start()
        self._running = True

        try:
            self._socket_server.start(self._handle_connection, on_listening=self._announce)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def _announce(self) -> None:
        logger.info(f"Server running at {self.config.base_url}")
        logger.info(f"Swagger docs at {self.config.base_url}{self.config.docs_path}")
        logger.debug("Registered routes:\n" + self._router.describe())
        self._ready.set()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server accepts connections; False on timeout."""
        return self._ready.wait(timeout)

    def shutdown(self) -> None:
        """Ask a running server to stop. Returns immediately."""
        self._socket_server.shutdown()

    def _setup_logging(self) -> None:
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        logging.getLogger("crudapi").setLevel(level)

    def _shutdown(self) -> None:
        logger.info("Shutting down server...")
        self._running = False
        self._ready.clear()
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    # ─────────────────────────────────────────────────────────────────────
    # Connections
    # ─────────────────────────────────────────────────────────────────────

    def _handle_connection(self, conn: Connection) -> None:
        submitted = self._thread_pool.submit(self._process_connection, args=(conn,))
        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _process_connection(self, conn: Connection) -> None:
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                    return
                except RequestTooLarge as e:
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
                    return

                if raw_request is None:
                    return

                try:
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    self._send_error(conn, e.status_code, str(e))
                    return

                conn.state = ConnectionState.PROCESSING
                response = self._dispatch(conn, request)

                keep_alive = request.is_keep_alive and self.config.keep_alive and self._running
                if keep_alive:
                    response.headers.setdefault("Connection", "keep-alive")
                    response.headers.setdefault(
                        "Keep-Alive", f"timeout={int(self.config.keep_alive_timeout)}"
                    )
                else:
                    response.headers["Connection"] = "close"

                if not conn.send_response(response.to_bytes(self.config.server_name)):
                    return
                if not keep_alive or response.headers.get("Connection") == "close":
                    return
                conn.set_keep_alive()

    def _dispatch(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        try:
            return self._handler(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            return internal_error()

    def _send_error(self, conn: Connection, status: int, message: str) -> None:
        response = (ResponseBuilder()
            .status(status)
            .json({"error": message})
            .close_connection()
            .build())
        conn.send_response(response.to_bytes(self.config.server_name))
