from __future__ import annotations


class PersistenceError(RuntimeError):
    """Raised when a document store cannot read or write durable state."""


class DuplicateKeyError(PersistenceError):
    """Raised when an insert would violate a unique key."""
