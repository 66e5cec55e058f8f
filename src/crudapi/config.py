"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable of the service lives in one dataclass. There is no
environment or file based configuration: defaults are literals, and the
command line may override a few of them.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest first)                                          │
    │                                                                      │
    │   1. Command-line arguments   python -m crudapi --port 8000         │
    │   2. Defaults below           port 3000                             │
    └─────────────────────────────────────────────────────────────────────┘

validate() runs when the server is constructed, so a bad value fails at
startup and not on the first request.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the CRUD server.

    Development:
        ServerConfig(log_level="DEBUG")

    Containers:
        ServerConfig(host="0.0.0.0", max_workers=32)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. "0.0.0.0" listens on every interface."""

    port: int = 3000
    """TCP port to listen on."""

    backlog: int = 128
    """Pending connections the kernel queues before refusing more."""

    buffer_size: int = 8192
    """Bytes read from the socket per recv() call."""

    timeout: Optional[float] = 30.0
    """Seconds to wait for a client's first request. None blocks forever."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    """Serve several requests per connection when the client asks."""

    keep_alive_timeout: float = 5.0
    """Idle seconds before a kept-alive connection is closed."""

    max_request_size: int = 1024 * 1024
    """Largest accepted request, headers included. Larger gets 413."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """Worker threads started with the server."""

    max_workers: int = 16
    """Upper bound the pool may grow to under load."""

    queue_size: int = 100
    """Connections waiting for a worker before new ones get 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: "text" (Apache-like) or "json"."""

    # ─────────────────────────────────────────────────────────────────────
    # IDENTITY & DOCS
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "InMemoryCRUD/1.0"
    """Value of the Server response header."""

    docs_path: str = "/api-docs"
    """Where the API documentation page is mounted."""

    extra_servers: List[str] = field(default_factory=list)
    """Base URLs listed in the OpenAPI document after the local one."""

    @property
    def base_url(self) -> str:
        """Local URL announced at startup and listed first in the API docs."""
        return f"http://localhost:{self.port}"

    def validate(self) -> None:
        """
        Check every value, raising ValueError on the first bad one.
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.keep_alive_timeout <= 0:
            raise ValueError("keep_alive_timeout must be > 0")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")

        if not self.docs_path.startswith("/"):
            raise ValueError("docs_path must start with /")
