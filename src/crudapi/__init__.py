"""
=============================================================================
CRUDAPI - In-Memory Users CRUD Service
=============================================================================

A small REST service over a process-local list of users, served by a
threaded HTTP/1.1 server built on raw sockets, with OpenAPI docs.

    POST   /users          create            201 {id, name, email}
    GET    /users          list              200 [...]
    GET    /users/:id      read              200 | 404 {"message": ...}
    PUT    /users/:id      replace fields    200 | 404 {"message": ...}
    DELETE /users/:id      delete            200 {"message": "User deleted"}
    GET    /api-docs       Swagger UI page

Data lives only as long as the process.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    crudapi/
    ├── __main__.py          # python -m crudapi
    ├── app.py               # create_app(): wires everything below
    ├── server.py            # HTTPServer: connections → middleware → router
    ├── config.py            # ServerConfig dataclass
    ├── store.py             # UserStore, the record store
    ├── core/                # socket server, connection, thread pool
    ├── http/                # request parsing, responses, routing
    ├── middleware/          # access logging, JSON body checks
    └── handlers/            # /users endpoints, /api-docs

=============================================================================
QUICK START
=============================================================================

    from crudapi import create_app, ServerConfig

    app = create_app(ServerConfig(port=3000))
    app.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer
from .store import User, UserStore, UserNotFound
from .app import create_app, CRUDServer

__all__ = [
    "HTTPServer",
    "CRUDServer",
    "ServerConfig",
    "User",
    "UserStore",
    "UserNotFound",
    "create_app",
    "__version__",
]
