"""Persistence layer exceptions.

All exceptions inherit from PersistenceError so callers can catch any
store failure with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""


class DatabaseConnectionError(PersistenceError):
    """Raised when the engine cannot be created or the database is unreachable."""


class RecordNotFoundError(PersistenceError):
    """Raised when an operation requires a row that does not exist."""


class DataIntegrityError(PersistenceError):
    """Raised on constraint violations (primary key, NOT NULL, ...)."""
