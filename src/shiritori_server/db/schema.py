"""Schema creation and seed bootstrap for the word ledger.

Bootstrap is idempotent and safe to run on every startup: the ``words`` table
is created only when missing, and the seed entry is written only while the
table is still empty.
"""

from __future__ import annotations

import logging

from shiritori_server.db.connection import ConnectionFactory

logger = logging.getLogger(__name__)

# Millisecond-resolution UTC timestamp. The fixed-width text form sorts
# lexicographically in time order.
NOW_MS_SQL = "strftime('%Y-%m-%d %H:%M:%f', 'now')"

# Sentinel author for the bootstrap entry.
SEED_AUTHOR = ""

CREATE_WORDS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS words (
        word       TEXT NOT NULL,
        author     TEXT NOT NULL,
        posted_at  TEXT NOT NULL DEFAULT ({NOW_MS_SQL}),
        PRIMARY KEY (word)
    )
"""

# Ledger order is (posted_at, rowid). SQLite appends the rowid to every index
# key, so this index serves both tail and list reads.
CREATE_ORDER_INDEX = "CREATE INDEX IF NOT EXISTS idx_words_posted_at ON words(posted_at)"


def init_database(
    factory: ConnectionFactory,
    *,
    seed_word: str | None = None,
    wal: bool | None = None,
) -> bool:
    """Create the ``words`` relation and seed it if necessary.

    Args:
        factory: Connection factory for the target database.
        seed_word: First word of the chain; defaults to ``config.game.seed_word``.
        wal: Switch the database to WAL journaling so readers never block on
            the writer; defaults to ``config.database.wal``.

    Returns:
        True when the seed entry was inserted by this call.
    """
    from shiritori_server.config import config

    if seed_word is None:
        seed_word = config.game.seed_word
    if wal is None:
        wal = config.database.wal

    if wal:
        # journal_mode cannot change inside a transaction.
        with factory.scope() as conn:
            conn.execute("PRAGMA journal_mode = WAL")

    with factory.scope(write=True) as conn:
        conn.execute(CREATE_WORDS_TABLE)
        conn.execute(CREATE_ORDER_INDEX)
        cursor = conn.execute(
            f"""
            INSERT INTO words (word, author, posted_at)
            SELECT ?, ?, {NOW_MS_SQL}
            WHERE NOT EXISTS (SELECT 1 FROM words)
            """,
            (seed_word, SEED_AUTHOR),
        )
        seeded = cursor.rowcount > 0

    if seeded:
        logger.info("Seeded word ledger at %s with %r", factory.db_path, seed_word)
    return seeded
