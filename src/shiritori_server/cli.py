"""
Command-line interface for the shiritori server.

Provides CLI commands for server management:
- init-db: Create the word table and seed entry if missing
- run: Start the HTTP server

Usage:
    shiritori-server init-db
    shiritori-server run [--host HOST] [--port PORT]

Environment Variables:
    SHIRITORI_HOST: Host to bind (default: 0.0.0.0)
    SHIRITORI_PORT: Port to listen on (default: 8080)
    SHIRITORI_DB_PATH: SQLite database file (default: data/shiritori.db)
"""

import argparse
import logging
import sys

logger = logging.getLogger(__name__)


def cmd_init_db(args: argparse.Namespace) -> int:
    """
    Initialize the database schema and seed word.

    Safe to run repeatedly; an existing chain is left untouched.

    Returns:
        0 on success, 1 on error
    """
    from shiritori_server.db.words_repo import WordLedger

    try:
        seeded = WordLedger().bootstrap()
    except Exception as e:
        print(f"Error initializing database: {e}", file=sys.stderr)
        return 1

    if seeded:
        print("Database initialized successfully.")
    else:
        print("Database already initialized.")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run the shiritori server.

    Configures logging, bootstraps the database, then serves until interrupted.

    Configuration Priority:
        1. CLI arguments (--host, --port)
        2. Environment variables (SHIRITORI_HOST, SHIRITORI_PORT)
        3. config/server.ini, then built-in defaults

    Returns:
        0 on clean shutdown (Ctrl+C), 1 on startup error
    """
    from shiritori_server.api.server import start_server
    from shiritori_server.config import configure_logging

    configure_logging()

    if cmd_init_db(args) != 0:
        return 1

    try:
        start_server(host=getattr(args, "host", None), port=getattr(args, "port", None))
        return 0
    except KeyboardInterrupt:
        print("\nServer stopped.")
        return 0
    except Exception as e:
        logger.exception("Server failed to start")
        print(f"Error starting server: {e}", file=sys.stderr)
        return 1


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="shiritori-server",
        description="Shiritori Server - a shared word-chain game",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser(
        "init-db",
        help="Initialize the database schema",
        description="Create the word table and insert the seed word if the table is empty.",
    )
    init_parser.set_defaults(func=cmd_init_db)

    run_parser = subparsers.add_parser(
        "run",
        help="Start the server",
        description="Bootstrap the database and serve the game over HTTP.",
    )
    run_parser.add_argument("--host", type=str, default=None, help="Host interface to bind")
    run_parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    run_parser.set_defaults(func=cmd_run)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
