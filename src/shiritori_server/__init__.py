"""Shiritori Server: a shared, append-only word-chain game.

Players take turns appending a word that begins with the final character of
the previously accepted word. Every accepted word lives in a single ordered
ledger backed by SQLite; players are anonymous and identified only by a
long-lived session cookie.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("shiritori-server")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
