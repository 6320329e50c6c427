"""Focused tests for ``shiritori_server.db.words_repo``."""

from __future__ import annotations

import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest

from shiritori_server.db import words_repo
from shiritori_server.db.connection import ConnectionFactory
from shiritori_server.db.errors import (
    LedgerOperationContext,
    LedgerReadError,
    LedgerWriteError,
    StoreUnavailable,
)
from shiritori_server.db.types import AppendStatus
from shiritori_server.db.words_repo import WordLedger
from tests.constants import ALICE, BOB, CAROL, SEED_WORD


@pytest.mark.db
class TestReads:
    def test_fresh_ledger_holds_only_seed(self, ledger):
        tail = ledger.current_tail()

        assert tail.word == SEED_WORD
        assert tail.author == ""
        assert ledger.ordered_words() == [SEED_WORD]
        assert ledger.count() == 1

    def test_tail_follows_appends(self, ledger):
        ledger.try_append("りんご", ALICE)
        ledger.try_append("ごま", BOB)

        tail = ledger.current_tail()
        assert (tail.word, tail.author) == ("ごま", BOB)

    def test_ordered_words_follow_append_order(self, ledger):
        for word, author in [("りんご", ALICE), ("ごま", BOB), ("まり", CAROL)]:
            ledger.try_append(word, author)

        assert ledger.ordered_words() == [SEED_WORD, "りんご", "ごま", "まり"]

    def test_posted_at_is_non_decreasing(self, ledger, factory):
        for i in range(20):
            ledger.try_append(f"w{i}", ALICE if i % 2 else BOB)

        with factory.scope() as conn:
            stamps = [
                row[0]
                for row in conn.execute("SELECT posted_at FROM words ORDER BY rowid")
            ]
        assert stamps == sorted(stamps)

    def test_same_millisecond_entries_keep_insertion_order(self, ledger, factory):
        # Pin every timestamp to the seed's, leaving rowid as the only order.
        with factory.scope() as conn:
            seed_stamp = conn.execute("SELECT posted_at FROM words").fetchone()[0]
        with patch.object(words_repo, "NOW_MS_SQL", f"'{seed_stamp}'"):
            for word in ["c", "a", "b"]:
                assert ledger.try_append(word, ALICE).accepted

        assert ledger.ordered_words() == [SEED_WORD, "c", "a", "b"]
        assert ledger.current_tail().word == "b"

    def test_ordered_words_is_prefix_stable(self, ledger):
        snapshots = []
        for word in ["a", "b", "c"]:
            ledger.try_append(word, ALICE)
            snapshots.append(ledger.ordered_words())

        for earlier, later in zip(snapshots, snapshots[1:]):
            assert later[: len(earlier)] == earlier
            assert len(later) == len(earlier) + 1


@pytest.mark.db
class TestTryAppend:
    def test_accepts_new_word(self, ledger):
        result = ledger.try_append("りんご", ALICE)

        assert result.status is AppendStatus.ACCEPTED
        assert result.accepted
        assert result.entry is not None
        assert (result.entry.word, result.entry.author) == ("りんご", ALICE)

    def test_rejects_existing_word_from_any_author(self, ledger):
        ledger.try_append("りんご", ALICE)

        result = ledger.try_append("りんご", BOB)

        assert result.status is AppendStatus.DUPLICATE
        assert result.entry is None
        assert ledger.count() == 2

    def test_seed_word_cannot_be_reused(self, ledger):
        assert ledger.try_append(SEED_WORD, ALICE).status is AppendStatus.DUPLICATE

    def test_expected_tail_match_accepts(self, ledger):
        result = ledger.try_append("りんご", ALICE, expected_tail=SEED_WORD)
        assert result.accepted

    def test_stale_expected_tail_reports_tail_moved(self, ledger):
        ledger.try_append("りんご", ALICE)

        result = ledger.try_append("りす", BOB, expected_tail=SEED_WORD)

        assert result.status is AppendStatus.TAIL_MOVED
        assert ledger.ordered_words() == [SEED_WORD, "りんご"]

    def test_duplicate_reported_before_tail_moved(self, ledger):
        ledger.try_append("りんご", ALICE)

        result = ledger.try_append("りんご", BOB, expected_tail=SEED_WORD)

        assert result.status is AppendStatus.DUPLICATE

    def test_concurrent_appends_of_same_word_commit_once(self, ledger):
        authors = [f"{i:08X}-0000-4000-8000-000000000000" for i in range(8)]
        barrier = threading.Barrier(len(authors), timeout=10)

        def append(author: str) -> AppendStatus:
            barrier.wait()
            return ledger.try_append("りんご", author).status

        with ThreadPoolExecutor(max_workers=len(authors)) as pool:
            statuses = list(pool.map(append, authors))

        assert statuses.count(AppendStatus.ACCEPTED) == 1
        assert statuses.count(AppendStatus.DUPLICATE) == len(authors) - 1
        assert ledger.ordered_words() == [SEED_WORD, "りんご"]

    def test_concurrent_appends_against_same_tail_commit_once(self, ledger):
        words = ["りす", "りんご", "りか", "りゅう"]
        barrier = threading.Barrier(len(words), timeout=10)

        def append(word: str) -> AppendStatus:
            barrier.wait()
            return ledger.try_append(word, ALICE, expected_tail=SEED_WORD).status

        with ThreadPoolExecutor(max_workers=len(words)) as pool:
            statuses = list(pool.map(append, words))

        assert statuses.count(AppendStatus.ACCEPTED) == 1
        assert statuses.count(AppendStatus.TAIL_MOVED) == len(words) - 1
        assert ledger.count() == 2


@pytest.mark.db
class TestErrors:
    def test_write_paths_raise_typed_errors_on_connection_failure(self, ledger):
        with patch.object(ledger.factory, "connect", side_effect=sqlite3.OperationalError("boom")):
            with pytest.raises(LedgerWriteError):
                ledger.try_append("りんご", ALICE)
            with pytest.raises(LedgerWriteError):
                ledger.bootstrap()

    def test_read_paths_raise_typed_errors_on_connection_failure(self, ledger):
        with patch.object(ledger.factory, "connect", side_effect=sqlite3.OperationalError("boom")):
            with pytest.raises(LedgerReadError):
                ledger.current_tail()
            with pytest.raises(LedgerReadError):
                ledger.ordered_words()
            with pytest.raises(LedgerReadError):
                ledger.count()

    def test_typed_errors_are_store_unavailable(self, ledger):
        with patch.object(ledger.factory, "connect", side_effect=sqlite3.OperationalError("boom")):
            with pytest.raises(StoreUnavailable) as info:
                ledger.current_tail()

        assert info.value.context.operation == "words.current_tail"
        assert isinstance(info.value.cause, sqlite3.OperationalError)
        assert isinstance(info.value.__cause__, sqlite3.OperationalError)

    def test_unbootstrapped_store_is_unavailable(self, temp_db_path):
        ledger = WordLedger(ConnectionFactory(temp_db_path))
        with pytest.raises(LedgerReadError):
            ledger.current_tail()

    def test_empty_table_is_unavailable(self, factory):
        ledger = WordLedger(factory)
        ledger.bootstrap()
        with factory.scope(write=True) as conn:
            conn.execute("DELETE FROM words")

        with pytest.raises(LedgerReadError) as info:
            ledger.current_tail()
        assert "bootstrap" in str(info.value)

    def test_failed_insert_leaves_no_partial_entry(self, ledger):
        real_connect = ledger.factory.connect

        class FailingCommit:
            """Connection proxy that fails on COMMIT."""

            def __init__(self, conn):
                self._conn = conn

            def execute(self, sql, *args):
                if sql == "COMMIT":
                    raise sqlite3.OperationalError("disk I/O error")
                return self._conn.execute(sql, *args)

            def __getattr__(self, name):
                return getattr(self._conn, name)

        with patch.object(ledger.factory, "connect", lambda: FailingCommit(real_connect())):
            with pytest.raises(LedgerWriteError):
                ledger.try_append("りんご", ALICE)

        assert ledger.ordered_words() == [SEED_WORD]

    def test_error_helpers_re_raise_typed_errors(self):
        read_exc = LedgerReadError(context=LedgerOperationContext(operation="words.read"))
        with pytest.raises(LedgerReadError) as read_info:
            words_repo._raise_read_error("words.read", read_exc)
        assert read_info.value is read_exc

        write_exc = LedgerWriteError(context=LedgerOperationContext(operation="words.write"))
        with pytest.raises(LedgerWriteError) as write_info:
            words_repo._raise_write_error("words.write", write_exc)
        assert write_info.value is write_exc
