"""Exception hierarchy raised by the mapping layer."""

from __future__ import annotations


class DataBaseError(RuntimeError):
    """Base class for every error raised by tablemap."""


class SchemaError(DataBaseError):
    """Entity metadata is missing or malformed (programming error)."""


class MappingError(DataBaseError):
    """A value could not be moved between an entity field and a column."""


class StatementError(DataBaseError):
    """The storage engine rejected a statement.

    The engine exception is kept as `__cause__`; `sql` holds the statement
    text when it is known.
    """

    def __init__(self, message: str, *, sql: str | None = None):
        super().__init__(message)
        self.sql = sql
