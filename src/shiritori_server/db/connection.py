"""SQLite connection primitives for the word ledger.

This module owns connection creation and low-level SQLite runtime pragmas so
the ledger can stay focused on queries and transaction intent.

Connections are opened in autocommit mode (``isolation_level=None``) so that
transaction boundaries are explicit: read scopes run each statement on its
own snapshot, write scopes wrap the whole block in ``BEGIN IMMEDIATE``.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


def get_db_path() -> Path:
    """Resolve the absolute SQLite database path from runtime configuration."""
    from shiritori_server.config import config

    return config.database.absolute_path


def configure_connection(
    connection: sqlite3.Connection, *, busy_timeout_ms: int
) -> sqlite3.Connection:
    """Apply connection-level SQLite pragmas required by the application.

    ``busy_timeout`` makes a writer wait for a competing ``BEGIN IMMEDIATE``
    to finish instead of failing straight away with ``database is locked``.
    """
    connection.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
    return connection


class ConnectionFactory:
    """Open configured connections to one SQLite database file.

    The factory is the storage-access handle injected into the ledger. It is
    created once per process and holds no open connection itself.

    Args:
        db_path: Database file. ``None`` resolves the configured path on every
            call, so ``use_test_database`` redirects are honoured.
        busy_timeout_ms: Lock wait budget; ``None`` reads it from config.
    """

    def __init__(self, db_path: Path | str | None = None, *, busy_timeout_ms: int | None = None):
        self._db_path = Path(db_path) if db_path is not None else None
        self._busy_timeout_ms = busy_timeout_ms

    @property
    def db_path(self) -> Path:
        return self._db_path if self._db_path is not None else get_db_path()

    def connect(self) -> sqlite3.Connection:
        """Create and configure a new autocommit SQLite connection."""
        from shiritori_server.config import config

        timeout_ms = self._busy_timeout_ms
        if timeout_ms is None:
            timeout_ms = config.database.busy_timeout_ms

        path = self.db_path
        path.parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(str(path), isolation_level=None, timeout=timeout_ms / 1000)
        return configure_connection(connection, busy_timeout_ms=timeout_ms)

    @contextmanager
    def scope(self, *, write: bool = False) -> Iterator[sqlite3.Connection]:
        """Yield a configured connection with guaranteed cleanup semantics.

        Args:
            write: When True, hold a ``BEGIN IMMEDIATE`` transaction for the
                block, commit on success and roll back on exceptions.

        Behavior:
            - Always closes the connection in ``finally``.
            - ``BEGIN IMMEDIATE`` takes the database write lock up front, so
              two write scopes never interleave their reads and inserts.
        """
        connection = self.connect()
        try:
            if write:
                connection.execute("BEGIN IMMEDIATE")
            yield connection
            if write:
                connection.execute("COMMIT")
        except Exception:
            if write and connection.in_transaction:
                try:
                    connection.execute("ROLLBACK")
                except sqlite3.Error:
                    # Preserve the original exception while best-effort rolling back.
                    pass
            raise
        finally:
            connection.close()
