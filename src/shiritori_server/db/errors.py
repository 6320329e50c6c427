"""Typed storage exceptions for the word ledger.

Only infrastructure failures (SQLite connection, query or transaction errors)
are raised. Game outcomes such as a duplicate word or a broken chain are
returned as values by the ledger and the submission coordinator, never raised.

The HTTP layer maps every :class:`StoreUnavailable` to a 500 response and logs
it; nothing else in the application treats it as recoverable.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class LedgerOperationContext:
    """Structured operation metadata carried by ledger exceptions.

    Attributes:
        operation: Stable operation identifier (for example
            ``"words.try_append"``).
        details: Optional human-readable context for logs and debugging.
    """

    operation: str
    details: str | None = None


class LedgerError(RuntimeError):
    """Base exception for ledger storage failures."""


class StoreUnavailable(LedgerError):
    """The underlying store could not complete an operation.

    Args:
        context: Structured operation metadata.
        cause: Optional underlying exception.
    """

    def __init__(
        self,
        *,
        context: LedgerOperationContext,
        cause: Exception | None = None,
    ) -> None:
        message = context.operation
        if context.details:
            message = f"{message}: {context.details}"
        super().__init__(message)
        self.context = context
        self.cause = cause


class LedgerReadError(StoreUnavailable):
    """Ledger read/query failure."""


class LedgerWriteError(StoreUnavailable):
    """Ledger mutation/transaction failure."""
