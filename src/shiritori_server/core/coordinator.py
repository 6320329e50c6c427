"""Submission flow: decode, validate, and append one word.

The coordinator reads the tail, runs the pure validator and hands the word to
:meth:`WordLedger.try_append` together with the tail it validated against.
The ledger's write transaction is the only concurrency boundary: if another
submission committed in between, the append reports ``TAIL_MOVED`` and the
coordinator re-validates against the new tail.

Two players racing with the same word both pass validation; the loser's
append reports ``DUPLICATE`` and it gets an ordinary ``DUPLICATE_WORD``
rejection. A submission that reads the tail only after a rival committed the
same word is judged against that new tail instead, and gets ``CHAIN_MISMATCH``
or ``SELF_CHAIN``.
"""

from __future__ import annotations

import logging

from shiritori_server.core.outcomes import (
    Committed,
    Malformed,
    MalformedKind,
    Reject,
    Rejected,
    RejectionReason,
    SubmissionOutcome,
)
from shiritori_server.core.validator import normalize_word, validate
from shiritori_server.db.types import AppendStatus
from shiritori_server.db.words_repo import WordLedger
from shiritori_server.forms import (
    FORM_CONTENT_TYPE,
    FormDecodeError,
    decode_form,
    is_form_content_type,
)

logger = logging.getLogger(__name__)

WORD_FIELD = "word"


class SubmissionCoordinator:
    """
    Run one word submission end to end.

    Args:
        ledger: The shared word ledger.
        max_attempts: Validate/append rounds before giving up on a tail that
            keeps moving; defaults to ``config.game.max_append_attempts``.
    """

    def __init__(self, ledger: WordLedger, *, max_attempts: int | None = None):
        if max_attempts is None:
            from shiritori_server.config import config

            max_attempts = config.game.max_append_attempts
        self.ledger = ledger
        self.max_attempts = max(1, max_attempts)

    def submit(
        self,
        raw_payload: bytes | str,
        session_id: str,
        *,
        content_type: str | None,
    ) -> SubmissionOutcome:
        """
        Decode a form-encoded submission and try to append its ``word``.

        Returns:
            ``Malformed`` for a wrong content type, an undecodable body or a
            missing ``word`` field; otherwise whatever :meth:`submit_word`
            returns.

        Raises:
            StoreUnavailable: The ledger could not be read or written.
        """
        if not is_form_content_type(content_type):
            return Malformed(
                MalformedKind.CONTENT_TYPE,
                f"Content-Type must be {FORM_CONTENT_TYPE}, got {content_type!r}",
            )

        try:
            fields = decode_form(raw_payload)
        except FormDecodeError as exc:
            return Malformed(MalformedKind.PAYLOAD, str(exc))

        if WORD_FIELD not in fields:
            return Malformed(MalformedKind.MISSING_WORD, "form field 'word' is required")

        return self.submit_word(fields[WORD_FIELD], session_id)

    def submit_word(self, raw_word: str, session_id: str) -> Committed | Rejected:
        """
        Validate ``raw_word`` against the current tail and append it.

        Creates at most one ledger entry. Rejections leave the ledger untouched.

        When the tail moves on every one of ``max_attempts`` rounds the word is
        rejected as ``CHAIN_MISMATCH``, even if it would chain onto the tail
        seen last. The player gets the ordinary chain-mismatch message and can
        resubmit against the current chain.
        """
        word = normalize_word(raw_word)

        for attempt in range(1, self.max_attempts + 1):
            tail = self.ledger.current_tail()
            verdict = validate(tail, word, session_id)
            if isinstance(verdict, Reject):
                logger.debug(
                    "Rejected %r from %s after %r: %s",
                    word,
                    session_id,
                    tail.word,
                    verdict.reason.value,
                )
                return Rejected(verdict.reason)

            result = self.ledger.try_append(word, session_id, expected_tail=tail.word)
            if result.accepted and result.entry is not None:
                logger.info("Committed %r from %s after %r", word, session_id, tail.word)
                return Committed(result.entry)
            if result.status is AppendStatus.DUPLICATE:
                logger.debug("Rejected %r from %s: duplicate word", word, session_id)
                return Rejected(RejectionReason.DUPLICATE_WORD)

            logger.debug(
                "Tail moved past %r while appending %r (attempt %d/%d)",
                tail.word,
                word,
                attempt,
                self.max_attempts,
            )

        logger.info("Gave up on %r from %s: tail kept moving", word, session_id)
        return Rejected(RejectionReason.CHAIN_MISMATCH)
