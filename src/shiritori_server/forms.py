"""Decoding helpers for ``application/x-www-form-urlencoded`` request bodies.

Form bodies are ``key=value`` pairs separated by ``&``, with ``+`` standing
for a space and everything else percent-encoded UTF-8.
"""

from __future__ import annotations

from urllib.parse import parse_qsl

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class FormDecodeError(ValueError):
    """The body is not a decodable form payload."""


def is_form_content_type(content_type: str | None) -> bool:
    """Return True when the media type is form-encoded, ignoring parameters like ``charset``."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == FORM_CONTENT_TYPE


def decode_form(body: bytes | str) -> dict[str, str]:
    """
    Decode a form body into a dict.

    Keys without ``=`` map to ``""``. When a key repeats, the last value wins.

    Raises:
        FormDecodeError: The body or one of its percent-escapes is not UTF-8.
    """
    try:
        text = body.decode("utf-8") if isinstance(body, bytes) else body
        pairs = parse_qsl(text, keep_blank_values=True, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise FormDecodeError(f"form body is not valid UTF-8: {exc.reason}") from exc
    return dict(pairs)
