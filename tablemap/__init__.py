"""tablemap: a small reflective mapper from dataclass entities to SQLite tables."""

from .core import (
    Column,
    ColumnMarker,
    DataBaseError,
    EntityMarker,
    MappingError,
    SchemaError,
    SchemaRegistry,
    SqlType,
    StatementError,
    Table,
    build_table,
    column,
    default_registry,
    entity,
    table_for,
)
from .ports import Database

__version__ = "0.1.0"

__all__ = [
    "Column",
    "ColumnMarker",
    "DataBaseError",
    "Database",
    "EntityMarker",
    "MappingError",
    "SchemaError",
    "SchemaRegistry",
    "SqlType",
    "StatementError",
    "Table",
    "build_table",
    "column",
    "default_registry",
    "entity",
    "table_for",
    "__version__",
]
