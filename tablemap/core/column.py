"""Column descriptor: one mapped entity field."""

from __future__ import annotations

import copy
from typing import Any, List

from .codecs import from_storage, to_storage
from .errors import MappingError, SchemaError
from .types import RowMapping, SqlType, SqlValue, ValueMap


class Column:
    """Binds one dataclass field to one table column.

    Instances are built by the schema registry and owned by a `Table`. The
    only mutation after construction is `set_table_name`, used when the owning
    table gets a suffix.
    """

    def __init__(
        self,
        *,
        name: str,
        field_name: str,
        annotation: Any,
        sql_type: SqlType,
        table_name: str,
        primary_key: bool = False,
        indexed: bool = False,
        nullable: bool = True,
        default: Any = None,
    ):
        if not name:
            raise SchemaError(f"Column for field {field_name!r} has an empty name.")
        self.name = name
        self.field_name = field_name
        self.annotation = annotation
        self.sql_type = sql_type
        self.table_name = table_name
        self.primary_key = primary_key
        self.indexed = indexed
        self.nullable = nullable
        self.default = default

    def copy(self) -> Column:
        return copy.copy(self)

    def set_table_name(self, table_name: str) -> None:
        self.table_name = table_name

    def sql_definition(self) -> str:
        """Return the column definition used inside `CREATE TABLE`."""

        definition = f"{self.name} {self.sql_type.value}"
        if not self.nullable:
            definition += " NOT NULL"
        return definition

    def index_name(self) -> str:
        return f"{self.table_name}_{self.name}_index"

    def index_sql_definition(self) -> str:
        """Return the `CREATE INDEX` statement for an indexed column."""

        if not self.indexed:
            raise SchemaError(
                f"Column {self.table_name}.{self.name} is not declared as indexed."
            )
        return f"CREATE INDEX {self.index_name()} ON {self.table_name}({self.name});"

    def read(self, entity: Any) -> Any:
        """Return the raw field value of `entity`."""

        try:
            return getattr(entity, self.field_name)
        except AttributeError as exc:
            raise MappingError(
                f"Cannot read field {self.field_name!r} on "
                f"{type(entity).__name__} for column {self.table_name}.{self.name}."
            ) from exc

    def storage_value(self, entity: Any) -> SqlValue:
        """Return the field value of `entity` converted for the storage engine."""

        value = self.read(entity)
        if value is None:
            value = self.default
        return to_storage(
            value,
            annotation=self.annotation,
            sql_type=self.sql_type,
            field_name=self.field_name,
        )

    def add_value(self, values: ValueMap, entity: Any) -> None:
        """Store the converted field value of `entity` in `values`."""

        values[self.name] = self.storage_value(entity)

    def value_as_text(self, entity: Any) -> str | None:
        """Render the field value of `entity` as predicate argument text."""

        value = self.storage_value(entity)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.hex()
        return str(value)

    def append_predicate_if_present(
        self,
        clauses: List[str],
        entity: Any,
        args: List[Any],
    ) -> None:
        """Append `<name> = ?` and its argument when the field is set."""

        if self.read(entity) is None:
            return
        clauses.append(f"{self.name} = ?")
        args.append(self.storage_value(entity))

    def complete_entity(self, row: RowMapping, entity: Any) -> None:
        """Copy this column's value out of `row` into the field of `entity`."""

        try:
            stored = row[self.name]
        except (KeyError, IndexError) as exc:
            raise MappingError(
                f"Result row has no column {self.name!r} for table {self.table_name}."
            ) from exc
        value = from_storage(stored, annotation=self.annotation, field_name=self.field_name)
        try:
            setattr(entity, self.field_name, value)
        except AttributeError as exc:
            raise MappingError(
                f"Cannot write field {self.field_name!r} on {type(entity).__name__}."
            ) from exc

    def __repr__(self) -> str:
        flags = []
        if self.primary_key:
            flags.append("pk")
        if self.indexed:
            flags.append("indexed")
        if not self.nullable:
            flags.append("not null")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"<Column {self.table_name}.{self.name} {self.sql_type.value}{suffix}>"
