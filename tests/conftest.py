"""
Shared pytest fixtures for the shiritori server test suite.

This module provides fixtures that are automatically available to all test files:
- Temporary SQLite databases wired through ``use_test_database``
- A bootstrapped ``WordLedger`` seeded with the standard seed word
- A ``SubmissionCoordinator`` over that ledger
- A FastAPI ``TestClient`` for the HTTP surface

Every test gets its own database file, so tests never share chain state.
"""

import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from shiritori_server.api.server import create_app
from shiritori_server.config import use_test_database
from shiritori_server.core.coordinator import SubmissionCoordinator
from shiritori_server.db.connection import ConnectionFactory
from shiritori_server.db.words_repo import WordLedger
from tests.constants import SEED_WORD

# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[Path, None, None]:
    """
    Create a temporary database file path for testing.

    Uses the config system's ``use_test_database`` context manager so code
    that resolves the configured path also lands in the temporary file.

    Yields:
        Path to temporary database file
    """
    temp_dir = tempfile.mkdtemp()
    temp_db = Path(temp_dir) / "test_shiritori.db"

    with use_test_database(temp_db):
        yield temp_db

    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(scope="function")
def factory(temp_db_path: Path) -> ConnectionFactory:
    """Connection factory bound to the temporary database."""
    return ConnectionFactory(temp_db_path)


@pytest.fixture(scope="function")
def ledger(factory: ConnectionFactory) -> WordLedger:
    """
    Bootstrapped word ledger.

    The chain starts with the single seed entry ``しりとり`` by the empty author.
    """
    word_ledger = WordLedger(factory)
    word_ledger.bootstrap(seed_word=SEED_WORD)
    return word_ledger


@pytest.fixture(scope="function")
def coordinator(ledger: WordLedger) -> SubmissionCoordinator:
    return SubmissionCoordinator(ledger, max_attempts=5)


# ============================================================================
# API FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def app(ledger: WordLedger) -> FastAPI:
    """Application over the test ledger; bootstrap already ran in ``ledger``."""
    return create_app(ledger, bootstrap=False)


@pytest.fixture(scope="function")
def client(app: FastAPI) -> TestClient:
    """
    Test client that does not follow redirects.

    The base URL is plain HTTP, so the Secure session cookie is never sent
    back implicitly; tests present tokens with ``tests.helpers.as_player``.
    """
    return TestClient(app, follow_redirects=False)
