"""Chain rules.

Everything here is pure: no I/O and no hidden state, so a submission can be
re-validated against a fresh tail as often as needed.

Characters are Unicode code points. A word ending in a combining sequence
therefore ends in the combining mark, not in the visible syllable.
"""

from __future__ import annotations

import unicodedata

from shiritori_server.core.outcomes import Accept, Reject, RejectionReason, ValidationResult
from shiritori_server.db.types import WordEntry


def normalize_word(raw: str) -> str:
    """NFC-normalize and strip surrounding whitespace."""
    return unicodedata.normalize("NFC", raw).strip()


def validate(tail: WordEntry, candidate_word: str, candidate_author: str) -> ValidationResult:
    """
    Decide whether ``candidate_word`` by ``candidate_author`` may follow ``tail``.

    Rules, first failure wins:

    1. The normalized word is non-empty (``EMPTY_SUBMISSION``).
    2. Its first character equals the last character of ``tail.word``
       (``CHAIN_MISMATCH``).
    3. The author differs from ``tail.author`` (``SELF_CHAIN``).

    Uniqueness is not checked here; the ledger enforces it on append.
    """
    word = normalize_word(candidate_word)
    if not word:
        return Reject(RejectionReason.EMPTY_SUBMISSION)

    if not tail.word or word[0] != tail.word[-1]:
        return Reject(RejectionReason.CHAIN_MISMATCH)

    if candidate_author == tail.author:
        return Reject(RejectionReason.SELF_CHAIN)

    return Accept()
