"""SQLite-backed word ledger."""
