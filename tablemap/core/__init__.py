"""Public core API for schema reflection and table operations."""

from .codecs import from_storage, resolve_sql_type, to_storage
from .column import Column
from .errors import DataBaseError, MappingError, SchemaError, StatementError
from .markers import ColumnMarker, EntityMarker, column, column_marker, entity, entity_marker
from .registry import SchemaRegistry, build_table, default_registry, table_for
from .table import Table
from .types import SqlType, SqlValue

__all__ = [
    "Column",
    "ColumnMarker",
    "DataBaseError",
    "EntityMarker",
    "MappingError",
    "SchemaError",
    "SchemaRegistry",
    "SqlType",
    "SqlValue",
    "StatementError",
    "Table",
    "build_table",
    "column",
    "column_marker",
    "default_registry",
    "entity",
    "entity_marker",
    "from_storage",
    "resolve_sql_type",
    "table_for",
    "to_storage",
]
