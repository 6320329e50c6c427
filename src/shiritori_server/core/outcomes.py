"""Result values for chain validation and word submission.

Game outcomes travel as return values. Only storage failures are raised
(see :mod:`shiritori_server.db.errors`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from shiritori_server.db.types import WordEntry


class RejectionReason(Enum):
    """Why a well-formed submission was turned down. Always safe to retry with another word."""

    EMPTY_SUBMISSION = "empty_submission"
    CHAIN_MISMATCH = "chain_mismatch"
    SELF_CHAIN = "self_chain"
    DUPLICATE_WORD = "duplicate_word"

    @property
    def message(self) -> str:
        """Human-readable explanation shown to the player."""
        return _REJECTION_MESSAGES[self]


_REJECTION_MESSAGES = {
    RejectionReason.EMPTY_SUBMISSION: "The word is empty.",
    RejectionReason.CHAIN_MISMATCH: "The word does not fulfil the condition.",
    RejectionReason.SELF_CHAIN: "The previous word was submitted by yourself.",
    RejectionReason.DUPLICATE_WORD: "The word has already been used.",
}


@dataclass(frozen=True, slots=True)
class Accept:
    """The candidate may extend the chain."""


@dataclass(frozen=True, slots=True)
class Reject:
    """The candidate may not extend the chain."""

    reason: RejectionReason


ValidationResult = Accept | Reject


class MalformedKind(Enum):
    CONTENT_TYPE = "content_type"
    PAYLOAD = "payload"
    MISSING_WORD = "missing_word"


@dataclass(frozen=True, slots=True)
class Committed:
    """The word is now the tail of the chain."""

    entry: WordEntry


@dataclass(frozen=True, slots=True)
class Rejected:
    reason: RejectionReason

    @property
    def message(self) -> str:
        return self.reason.message


@dataclass(frozen=True, slots=True)
class Malformed:
    """The request could not be read as a word submission."""

    kind: MalformedKind
    detail: str


SubmissionOutcome = Committed | Rejected | Malformed
