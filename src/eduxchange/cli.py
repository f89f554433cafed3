"""Command line interface: run the web server or create the database tables."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from eduxchange.config import get_database_url, get_log_level

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from ``level`` or ``EDUXCHANGE_LOG_LEVEL``."""
    logging.basicConfig(level=(level or get_log_level()).upper(), format=LOG_FORMAT)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eduxchange",
        description="Share, browse and manage academic resources.",
    )
    parser.add_argument("--log-level", help="Override EDUXCHANGE_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the web server")
    serve.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    subparsers.add_parser("init-db", help="Create the database tables")
    return parser


def _init_db() -> int:
    from eduxchange.data.db import init_db

    init_db()
    logger.info("Database ready at %s", get_database_url())
    print("✅ Database initialized.")
    return 0


def _serve(host: str, port: int, reload: bool) -> int:
    from eduxchange.api.main import main as serve_main

    serve_main(host=host, port=port, reload=reload)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the CLI application."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.command == "init-db":
            return _init_db()
        return _serve(args.host, args.port, args.reload)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user. Exiting.")
        return 130
    except Exception as exc:
        logger.exception("Command %s failed", args.command)
        print(f"\n❌ Unexpected error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
