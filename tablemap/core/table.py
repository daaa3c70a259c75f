"""Table descriptor: statement synthesis and row marshaling for one entity."""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .column import Column
from .contracts import DatabasePort
from .errors import MappingError, SchemaError
from .types import ValueMap

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Table(Generic[T]):
    """Mapped shape of one entity type.

    A table owns its columns (in field declaration order) and memoizes the
    column-name list and the primary-key predicate. It may be renamed once
    with `add_suffix` before it is used to build a statement; `with_suffix`
    derives a renamed sibling and leaves this descriptor untouched.
    """

    def __init__(
        self,
        name: str,
        columns: Iterable[Column],
        factory: Callable[[], T],
        *,
        entity_type: type | None = None,
    ):
        self.name = name
        self.columns: List[Column] = list(columns)
        self.factory = factory
        self.entity_type = entity_type
        self.suffix: Optional[str] = None
        self._column_names: Optional[Tuple[str, ...]] = None
        self._primary_key_where: Optional[str] = None
        self._frozen = False

    def copy(self) -> Table[T]:
        """Return an unfrozen copy owning copies of every column."""

        other = Table(
            self.name,
            (column.copy() for column in self.columns),
            self.factory,
            entity_type=self.entity_type,
        )
        other.suffix = self.suffix
        other._column_names = self._column_names
        other._primary_key_where = self._primary_key_where
        return other

    def add_suffix(self, suffix: str) -> None:
        """Rename the table to `<name>_<suffix>` in place."""

        if not suffix:
            raise SchemaError("Table suffix must be a non-empty string.")
        if self.suffix is not None:
            raise SchemaError(
                f"Table {self.name} already carries suffix {self.suffix!r}."
            )
        if self._frozen:
            raise SchemaError(
                f"Table {self.name} was already used in a statement and cannot be renamed."
            )
        self.name = f"{self.name}_{suffix}"
        self.suffix = suffix
        for column in self.columns:
            column.set_table_name(self.name)

    def with_suffix(self, suffix: str) -> Table[T]:
        """Return a sibling descriptor named `<name>_<suffix>`."""

        sibling = self.copy()
        sibling.add_suffix(suffix)
        return sibling

    @property
    def column_names(self) -> Tuple[str, ...]:
        if self._column_names is None:
            self._column_names = tuple(column.name for column in self.columns)
        return self._column_names

    @property
    def primary_key_columns(self) -> List[Column]:
        return [column for column in self.columns if column.primary_key]

    @property
    def primary_key_where(self) -> str:
        """Return `pk1 = ? AND pk2 = ?` over primary-key columns in order."""

        if self._primary_key_where is None:
            self._primary_key_where = " AND ".join(
                f"{column.name} = ?" for column in self.primary_key_columns
            )
        return self._primary_key_where

    def new_entity(self) -> T:
        """Build a default-initialized entity with the cached factory."""

        try:
            return self.factory()
        except Exception as exc:
            raise MappingError(
                f"Entity factory for table {self.name} failed: {exc}"
            ) from exc

    def create_table_sql(self) -> str:
        definitions = [column.sql_definition() for column in self.columns]
        keys = [column.name for column in self.primary_key_columns]
        if keys:
            definitions.append(f"PRIMARY KEY ({','.join(keys)})")
        return f"CREATE TABLE {self.name} ({','.join(definitions)});"

    def create_index_sql(self) -> List[str]:
        return [column.index_sql_definition() for column in self.columns if column.indexed]

    def drop_table_sql(self) -> str:
        return f"DROP TABLE IF EXISTS {self.name};"

    def create_table(self, db: DatabasePort) -> None:
        """Create the table, then one index per indexed column."""

        self._frozen = True
        statements = [self.create_table_sql(), *self.create_index_sql()]
        for sql in statements:
            db.execute(sql).close()
        logger.debug("created table %s with %d statement(s)", self.name, len(statements))

    def drop_table(self, db: DatabasePort) -> None:
        self._frozen = True
        db.execute(self.drop_table_sql()).close()

    def delete_all(self, db: DatabasePort) -> int:
        """Delete every row and return the number of deleted rows."""

        self._frozen = True
        return db.delete(self.name)

    def primary_key_args(self, entity: T) -> List[Any]:
        """Return the primary-key values of `entity` in column order."""

        keys = self.primary_key_columns
        if not keys:
            raise MappingError(
                f"Table {self.name} has no primary key column; cannot address one row."
            )
        args = []
        for column in keys:
            value = column.storage_value(entity)
            if value is None:
                raise MappingError(
                    f"Primary key column {self.name}.{column.name} is not set."
                )
            args.append(value)
        return args

    def delete(self, db: DatabasePort, entity: T) -> int:
        """Delete the row identified by the primary key of `entity`."""

        self._frozen = True
        args = self.primary_key_args(entity)
        count = db.delete(self.name, self.primary_key_where, args)
        if logger.isEnabledFor(logging.DEBUG):
            key_text = ", ".join(
                f"{column.name}={column.value_as_text(entity)}"
                for column in self.primary_key_columns
            )
            logger.debug("deleted %d row(s) from %s where %s", count, self.name, key_text)
        return count

    def insert(self, db: DatabasePort, entity: T) -> T:
        """Insert every column of `entity`; constraint violations raise."""

        self._frozen = True
        values: ValueMap = {}
        for column in self.columns:
            column.add_value(values, entity)
        db.insert_or_raise(self.name, values)
        return entity

    def build_selection(
        self,
        example: T | None,
        where: str | None = None,
        args: Sequence[Any] | None = None,
    ) -> Tuple[Optional[str], List[Any]]:
        """Build the predicate text and arguments for `select`."""

        clauses: List[str] = []
        selection_args: List[Any] = []
        if example is not None:
            for column in self.columns:
                column.append_predicate_if_present(clauses, example, selection_args)
        if where:
            clauses.append(f"({where})")
        if args:
            selection_args.extend(args)
        return (" AND ".join(clauses) or None), selection_args

    def select(
        self,
        db: DatabasePort,
        example: T | None = None,
        where: str | None = None,
        args: Sequence[Any] | None = None,
        order_by: str | None = None,
    ) -> List[T]:
        """Select entities matching every set field of `example`.

        Args:
            db: Open storage connection.
            example: Entity whose non-`None` fields become `col = ?` terms.
            where: Extra predicate fragment ANDed after the example terms.
            args: Arguments for the `?` placeholders in `where`.
            order_by: Raw `ORDER BY` expression.

        Returns:
            Fresh entities in result order.
        """

        self._frozen = True
        selection, selection_args = self.build_selection(example, where, args)
        entities: List[T] = []
        with db.query(
            self.name,
            self.column_names,
            selection,
            selection_args,
            order_by,
        ) as rows:
            for row in rows:
                entity = self.new_entity()
                for column in self.columns:
                    column.complete_entity(row, entity)
                entities.append(entity)
        return entities

    def __repr__(self) -> str:
        return f"<Table {self.name} columns={list(self.column_names)!r}>"
