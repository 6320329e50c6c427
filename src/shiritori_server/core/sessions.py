"""Anonymous session identity.

A session id is an uppercase UUIDv4 held entirely by the client in a cookie.
There is no server-side session table: any well-formed token the client
presents is trusted and reused verbatim as the player's identity.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass

# 8-4-4-4-12 hex digits, either case.
_TOKEN_RE = re.compile(
    r"[0-9A-Fa-f]{8}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{12}"
)


@dataclass(frozen=True, slots=True)
class SessionIdentity:
    """
    Resolved identity for one request.

    Attributes:
        session_id: Token used as the ``author`` of submitted words.
        is_new: True when the token was issued for this request and the
            transport layer must persist it.
    """

    session_id: str
    is_new: bool


def is_well_formed(token: str | None) -> bool:
    return token is not None and _TOKEN_RE.fullmatch(token) is not None


def generate_session_id() -> str:
    """Return a fresh uppercase UUIDv4 drawn from the OS CSPRNG."""
    return str(uuid.uuid4()).upper()


class SessionIdentityProvider:
    """Map a presented cookie value to a stable session id."""

    def resolve_or_create(self, presented_token: str | None) -> SessionIdentity:
        """
        Reuse ``presented_token`` when well-formed, otherwise issue a new one.

        Never fails; a garbled or missing token simply makes a new player.
        """
        if is_well_formed(presented_token):
            return SessionIdentity(session_id=presented_token, is_new=False)
        return SessionIdentity(session_id=generate_session_id(), is_new=True)
