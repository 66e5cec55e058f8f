"""
Application assembly.

    create_app()
        ├── HTTPServer(config)
        ├── LoggingMiddleware        access log + X-Request-ID
        ├── JSONBodyMiddleware       400 on malformed JSON
        ├── UserHandler(store)       /users, /users/:id
        └── DocsHandler              /api-docs, /api-docs/swagger.json
"""

from typing import Optional

from .config import ServerConfig
from .server import HTTPServer
from .store import UserStore
from .handlers import UserHandler, DocsHandler
from .middleware import LoggingMiddleware, JSONBodyMiddleware


class CRUDServer(HTTPServer):
    """An HTTPServer carrying the user store it serves."""

    def __init__(self, config: Optional[ServerConfig] = None, store: Optional[UserStore] = None):
        super().__init__(config)
        self.store = store if store is not None else UserStore()


def create_app(config: Optional[ServerConfig] = None, store: Optional[UserStore] = None) -> CRUDServer:
    """
    Build the CRUD service, ready to run().

    Args:
        config: Server settings; defaults to ServerConfig().
        store: Record store to serve; a fresh empty one by default.

    Example:
        app = create_app(ServerConfig(port=8000))
        app.run()
    """
    server = CRUDServer(config, store)
    config = server.config

    server.use(LoggingMiddleware(log_format=config.log_format))
    server.use(JSONBodyMiddleware())

    UserHandler(server.store).register(server.router)
    DocsHandler(
        server.router,
        servers=[config.base_url, *config.extra_servers],
        path=config.docs_path,
    ).register()

    return server
