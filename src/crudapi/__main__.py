"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m crudapi                         # http://localhost:3000
    python -m crudapi --port 8000
    python -m crudapi --host 0.0.0.0 --workers 8
    python -m crudapi --server-url https://api.example.com

The same entry point is installed as the ``crudapi`` console script.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .app import create_app
from .config import ServerConfig, LOG_FORMATS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crudapi",
        description="In-memory users CRUD API with OpenAPI documentation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m crudapi                         # Run on port 3000
  python -m crudapi --port 8000             # Custom port
  python -m crudapi --host 0.0.0.0          # Listen on all interfaces
  python -m crudapi --log-format json       # JSON access log
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=3000,
        help="Port to listen on (default: 3000)",
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=4,
        help="Number of worker threads (default: 4, max will be 4x this)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING & DOCS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default="text",
        help="Access log format (default: text)",
    )
    parser.add_argument(
        "--server-url",
        action="append",
        default=[],
        metavar="URL",
        help="Extra server URL for the API docs; may be repeated",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"crudapi {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        min_workers=args.workers,
        max_workers=args.workers * 4,
        log_level=args.log_level,
        log_format=args.log_format,
        extra_servers=list(args.server_url),
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app = create_app(config_from_args(args))
    except ValueError as e:
        parser.error(str(e))

    try:
        app.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
