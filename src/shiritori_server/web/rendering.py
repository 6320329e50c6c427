"""
Server-side rendering of the word chain.

The page is a single Jinja2 template fed with the ordered word list. It has
no knowledge of sessions or the ledger; callers pass plain strings.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

# Resolve paths relative to this file for predictable packaging.
_WEB_ROOT = Path(__file__).resolve().parent
_TEMPLATES_DIR = _WEB_ROOT / "templates"

templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))


def render_word_list(request: Request, words: Sequence[str]) -> HTMLResponse:
    """
    Render the chain page.

    Args:
        request: The inbound request (required by Jinja2 templates).
        words: Every accepted word, oldest first.
    """
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "words": list(words),
            # The next word must start with this character.
            "next_initial": words[-1][-1] if words and words[-1] else "",
        },
    )
