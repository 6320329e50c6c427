"""Route definitions for the word-chain page and health check."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from shiritori_server import __version__
from shiritori_server.api.session import get_session
from shiritori_server.core.coordinator import SubmissionCoordinator
from shiritori_server.core.outcomes import Committed, MalformedKind, Rejected
from shiritori_server.db.words_repo import WordLedger
from shiritori_server.web.rendering import render_word_list

logger = logging.getLogger(__name__)

# Carries the machine-readable rejection code next to the human message.
REASON_HEADER = "X-Shiritori-Reason"


def register_routes(app: FastAPI, ledger: WordLedger, coordinator: SubmissionCoordinator):
    """Register the chain page, word submission and health routes."""

    # Ledger reads block on SQLite; plain ``def`` routes run in the threadpool.
    @app.get("/", response_class=HTMLResponse)
    def show_chain(request: Request):
        """Render the whole chain, oldest word first."""
        return render_word_list(request, ledger.ordered_words())

    @app.post("/")
    async def submit_word(request: Request):
        """
        Submit the form field ``word`` as the next link in the chain.

        Responses:
            303: Committed; re-fetch ``GET /``.
            400: Body undecodable or ``word`` missing.
            415: Body is not form-encoded.
            422: Rejected by the chain rules; see ``X-Shiritori-Reason``.
            500: Storage failure.
        """
        session = get_session(request)
        body = await request.body()
        outcome = await run_in_threadpool(
            coordinator.submit,
            body,
            session.session_id,
            content_type=request.headers.get("content-type"),
        )

        if isinstance(outcome, Committed):
            return RedirectResponse("./", status_code=303)

        if isinstance(outcome, Rejected):
            raise HTTPException(
                status_code=422,
                detail=outcome.message,
                headers={REASON_HEADER: outcome.reason.value},
            )

        logger.debug("Malformed submission from %s: %s", session.session_id, outcome.detail)
        status_code = 415 if outcome.kind is MalformedKind.CONTENT_TYPE else 400
        raise HTTPException(
            status_code=status_code,
            detail=outcome.detail,
            headers={REASON_HEADER: f"malformed_{outcome.kind.value}"},
        )

    @app.get("/health")
    def health_check():
        """Liveness check including the current chain length."""
        return {"status": "ok", "version": __version__, "words": ledger.count()}
