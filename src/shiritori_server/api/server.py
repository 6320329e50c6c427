"""
FastAPI application for the shiritori game.

This module builds the application that serves the word chain. It sets up:
- The word ledger and the submission coordinator sharing one storage handle
- Session cookie middleware applied to every response
- Mapping of storage failures to HTTP 500
- The page, submission and health routes

The module-level ``app`` is what ``uvicorn shiritori_server.api.server:app``
serves; tests build their own instances with :func:`create_app`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from shiritori_server import __version__
from shiritori_server.api.routes import register_routes
from shiritori_server.api.session import install_session_middleware
from shiritori_server.config import ServerConfig, config
from shiritori_server.core.coordinator import SubmissionCoordinator
from shiritori_server.db.errors import StoreUnavailable
from shiritori_server.db.words_repo import WordLedger

logger = logging.getLogger(__name__)


def create_app(
    ledger: WordLedger | None = None,
    *,
    settings: ServerConfig | None = None,
    bootstrap: bool = True,
) -> FastAPI:
    """
    Build a configured FastAPI application.

    Args:
        ledger: Word ledger to serve; defaults to one on the configured database.
        settings: Configuration; defaults to the module-level ``config``.
        bootstrap: Run the idempotent schema/seed bootstrap on startup.
    """
    settings = settings or config
    ledger = ledger or WordLedger()
    coordinator = SubmissionCoordinator(ledger, max_attempts=settings.game.max_append_attempts)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if bootstrap:
            await run_in_threadpool(ledger.bootstrap, seed_word=settings.game.seed_word)
        logger.info("Serving word ledger at %s", ledger.factory.db_path)
        yield

    app = FastAPI(title="Shiritori Server", version=__version__, lifespan=lifespan)
    app.state.ledger = ledger
    app.state.coordinator = coordinator

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
        logger.error(
            "Storage failure during %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Storage unavailable"})

    install_session_middleware(app, settings.session)
    register_routes(app, ledger, coordinator)
    return app


app = create_app()


def start_server(host: str | None = None, port: int | None = None) -> None:
    """Serve the application with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(
        app,
        host=host or config.server.host,
        port=port or config.server.port,
        log_config=None,
    )
