"""Shared DB-layer dataclasses for ledger contracts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class WordEntry:
    """
    One accepted move in the chain.

    Attributes:
        word: Normalized word; unique across the whole ledger.
        author: Session id of the submitter, ``""`` for the seed entry.
        posted_at: Ledger-assigned UTC timestamp (``YYYY-MM-DD HH:MM:SS.SSS``).
    """

    word: str
    author: str
    posted_at: str


class AppendStatus(Enum):
    """
    Outcome of a guarded append.

    ACCEPTED: The entry was committed and is now the tail.
    DUPLICATE: The word already exists anywhere in the ledger.
    TAIL_MOVED: Another entry was committed after the caller read the tail;
        the caller must re-validate against the new tail.
    """

    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    TAIL_MOVED = "tail_moved"


@dataclass(frozen=True, slots=True)
class AppendResult:
    """Result of :meth:`WordLedger.try_append`; ``entry`` is set only when accepted."""

    status: AppendStatus
    entry: WordEntry | None = None

    @property
    def accepted(self) -> bool:
        return self.status is AppendStatus.ACCEPTED
