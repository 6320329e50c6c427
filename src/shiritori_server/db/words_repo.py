"""Word ledger operations for the SQLite backend.

The ledger is the single authoritative, append-only record of the chain.
Order is defined by ``(posted_at, rowid)`` and is fixed once an entry is
committed; entries are never updated or deleted.

Concurrency
-----------
Reads run on one autocommit statement each, which SQLite serves from a single
consistent snapshot. The only write path, :meth:`WordLedger.try_append`, runs
inside a ``BEGIN IMMEDIATE`` transaction: the duplicate check, the tail check
and the insert all happen while this connection holds the database write
lock, and the ``word`` primary key remains the last line of defence.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import NoReturn

from shiritori_server.db.connection import ConnectionFactory
from shiritori_server.db.errors import (
    LedgerError,
    LedgerOperationContext,
    LedgerReadError,
    LedgerWriteError,
)
from shiritori_server.db.schema import NOW_MS_SQL, init_database
from shiritori_server.db.types import AppendResult, AppendStatus, WordEntry

logger = logging.getLogger(__name__)

_ORDER_ASC = "ORDER BY posted_at ASC, rowid ASC"
_ORDER_DESC = "ORDER BY posted_at DESC, rowid DESC"


def _raise_read_error(operation: str, exc: Exception, *, details: str | None = None) -> NoReturn:
    """Raise a typed ledger read error while preserving chained cause."""
    if isinstance(exc, LedgerError):
        raise exc
    raise LedgerReadError(
        context=LedgerOperationContext(operation=operation, details=details),
        cause=exc,
    ) from exc


def _raise_write_error(operation: str, exc: Exception, *, details: str | None = None) -> NoReturn:
    """Raise a typed ledger write error while preserving chained cause."""
    if isinstance(exc, LedgerError):
        raise exc
    raise LedgerWriteError(
        context=LedgerOperationContext(operation=operation, details=details),
        cause=exc,
    ) from exc


def _row_to_entry(row: tuple) -> WordEntry:
    return WordEntry(word=str(row[0]), author=str(row[1]), posted_at=str(row[2]))


def _select_tail(conn: sqlite3.Connection) -> WordEntry | None:
    row = conn.execute(
        f"SELECT word, author, posted_at FROM words {_ORDER_DESC} LIMIT 1"
    ).fetchone()
    return _row_to_entry(row) if row else None


class WordLedger:
    """
    Ordered, append-only store of accepted words.

    Args:
        factory: Storage-access handle. Opened once per process and shared by
            every request; the ledger never caches connections or rows.
    """

    def __init__(self, factory: ConnectionFactory | None = None):
        self.factory = factory or ConnectionFactory()

    def bootstrap(self, *, seed_word: str | None = None) -> bool:
        """Create the schema and seed entry if missing. Safe on every startup."""
        try:
            return init_database(self.factory, seed_word=seed_word)
        except Exception as exc:
            _raise_write_error("words.bootstrap", exc, details=str(self.factory.db_path))

    def current_tail(self) -> WordEntry:
        """
        Return the most recently accepted entry.

        Raises:
            LedgerReadError: The store is unreachable, or holds no entries
                because bootstrap never ran.
        """
        try:
            with self.factory.scope() as conn:
                tail = _select_tail(conn)
        except Exception as exc:
            _raise_read_error("words.current_tail", exc)
        if tail is None:
            raise LedgerReadError(
                context=LedgerOperationContext(
                    operation="words.current_tail",
                    details="ledger has no entries; bootstrap has not run",
                )
            )
        return tail

    def ordered_words(self) -> list[str]:
        """Return every word in acceptance order, read from one snapshot."""
        try:
            with self.factory.scope() as conn:
                rows = conn.execute(f"SELECT word FROM words {_ORDER_ASC}").fetchall()
        except Exception as exc:
            _raise_read_error("words.ordered_words", exc)
        return [str(row[0]) for row in rows]

    def count(self) -> int:
        """Number of entries in the ledger, seed included."""
        try:
            with self.factory.scope() as conn:
                row = conn.execute("SELECT COUNT(*) FROM words").fetchone()
        except Exception as exc:
            _raise_read_error("words.count", exc)
        return int(row[0])

    def try_append(
        self, word: str, author: str, *, expected_tail: str | None = None
    ) -> AppendResult:
        """
        Atomically append ``word`` as the new tail.

        Checks run in this order inside one write transaction:

        1. ``word`` already exists anywhere in the ledger → ``DUPLICATE``.
        2. ``expected_tail`` is given and is no longer the tail word →
           ``TAIL_MOVED``.
        3. Otherwise the entry is inserted → ``ACCEPTED``.

        ``posted_at`` is the later of the current time and the tail's
        ``posted_at``, so timestamps never run backwards along the chain.

        Args:
            word: Normalized word to append.
            author: Session id of the submitter.
            expected_tail: Tail word the caller validated against.

        Raises:
            LedgerWriteError: The transaction could not be completed. Nothing
                is committed in that case.
        """
        try:
            with self.factory.scope(write=True) as conn:
                exists = conn.execute("SELECT 1 FROM words WHERE word = ?", (word,)).fetchone()
                if exists:
                    return AppendResult(AppendStatus.DUPLICATE)

                if expected_tail is not None:
                    tail = _select_tail(conn)
                    if tail is None or tail.word != expected_tail:
                        return AppendResult(AppendStatus.TAIL_MOVED)

                try:
                    conn.execute(
                        f"""
                        INSERT INTO words (word, author, posted_at)
                        VALUES (
                            ?, ?,
                            MAX({NOW_MS_SQL}, COALESCE((SELECT MAX(posted_at) FROM words), ''))
                        )
                        """,
                        (word, author),
                    )
                except sqlite3.IntegrityError:
                    return AppendResult(AppendStatus.DUPLICATE)

                row = conn.execute(
                    "SELECT word, author, posted_at FROM words WHERE word = ?", (word,)
                ).fetchone()
        except Exception as exc:
            _raise_write_error("words.try_append", exc, details=f"word={word!r}")

        entry = _row_to_entry(row)
        logger.debug("words: appended %r at %s", entry.word, entry.posted_at)
        return AppendResult(AppendStatus.ACCEPTED, entry)
