"""Schema registry: builds, caches and dispatches to table descriptors."""

from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import fields, is_dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar, get_type_hints

from .codecs import resolve_sql_type
from .column import Column
from .contracts import DatabasePort
from .errors import SchemaError
from .markers import column_marker, entity_marker
from .table import Table

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CacheKey = Tuple[type, Optional[str]]


class SchemaRegistry:
    """Owns one `Table` per entity type and suffix.

    Descriptors are built on first request. Concurrent first requests for the
    same key are serialized so a type is reflected once.
    """

    def __init__(self) -> None:
        self._tables: Dict[_CacheKey, Table[Any]] = {}
        self._lock = threading.RLock()

    def table_for(self, entity_type: Type[T], suffix: str | None = None) -> Table[T]:
        """Return the cached descriptor for `entity_type`, building it once.

        Args:
            entity_type: Class decorated with `@entity`.
            suffix: Optional physical table suffix; the descriptor is derived
                from the base descriptor without reflecting again.

        Raises:
            SchemaError: If the type is not a valid entity.
        """

        if not isinstance(entity_type, type):
            raise SchemaError(f"{entity_type!r} is not a class.")
        key = (entity_type, suffix or None)
        table = self._tables.get(key)
        if table is not None:
            return table

        with self._lock:
            table = self._tables.get(key)
            if table is not None:
                return table
            if suffix:
                table = self.table_for(entity_type).with_suffix(suffix)
            else:
                table = build_table(entity_type)
            self._tables[key] = table
            logger.info(
                "registered table %s for %s (%d columns)",
                table.name,
                _type_name(entity_type),
                len(table.columns),
            )
            return table

    def __contains__(self, entity_type: object) -> bool:
        return (entity_type, None) in self._tables

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()

    def create_table(self, db: DatabasePort, entity_type: Type[T], suffix: str | None = None) -> None:
        self.table_for(entity_type, suffix).create_table(db)

    def drop_table(self, db: DatabasePort, entity_type: Type[T], suffix: str | None = None) -> None:
        self.table_for(entity_type, suffix).drop_table(db)

    def delete_all(self, db: DatabasePort, entity_type: Type[T], suffix: str | None = None) -> int:
        return self.table_for(entity_type, suffix).delete_all(db)

    def insert(self, db: DatabasePort, entity: T, suffix: str | None = None) -> T:
        return self.table_for(type(entity), suffix).insert(db, entity)

    def delete(self, db: DatabasePort, entity: T, suffix: str | None = None) -> int:
        return self.table_for(type(entity), suffix).delete(db, entity)

    def select(
        self,
        db: DatabasePort,
        example: T,
        where: str | None = None,
        args: Sequence[Any] | None = None,
        order_by: str | None = None,
        suffix: str | None = None,
    ) -> List[T]:
        """Select entities of `type(example)` matching its set fields."""

        table = self.table_for(type(example), suffix)
        return table.select(db, example, where, args, order_by)


def build_table(entity_type: Type[T]) -> Table[T]:
    """Reflect an entity class into a new `Table` descriptor."""

    if not isinstance(entity_type, type):
        raise SchemaError(f"{entity_type!r} is not a class.")

    type_name = _type_name(entity_type)
    marker = entity_marker(entity_type)
    if marker is None:
        raise SchemaError(f"{type_name} is not marked with @entity.")
    if not is_dataclass(entity_type):
        raise SchemaError(f"{type_name} must be a dataclass.")
    if entity_type.__dataclass_params__.frozen:  # type: ignore[attr-defined]
        raise SchemaError(f"{type_name} is a frozen dataclass; rows cannot be loaded into it.")

    factory = marker.factory or entity_type
    _require_zero_argument_factory(entity_type, factory)

    name = marker.name or entity_type.__name__
    hints = _type_hints(entity_type)

    columns: List[Column] = []
    seen: set[str] = set()
    for model_field in fields(entity_type):
        column_meta = column_marker(model_field)
        if column_meta is None:
            continue
        column_name = column_meta.name if column_meta.name is not None else model_field.name
        if not isinstance(column_name, str) or not column_name:
            raise SchemaError(
                f"{type_name}.{model_field.name} declares an empty column name."
            )
        if column_name in seen:
            raise SchemaError(f"{type_name} declares column {column_name!r} twice.")
        seen.add(column_name)

        annotation = hints.get(model_field.name, model_field.type)
        columns.append(
            Column(
                name=column_name,
                field_name=model_field.name,
                annotation=annotation,
                sql_type=column_meta.sql_type or resolve_sql_type(annotation),
                table_name=name,
                primary_key=column_meta.primary_key,
                indexed=column_meta.index,
                nullable=column_meta.nullable,
                default=column_meta.default,
            )
        )

    if not columns:
        raise SchemaError(f"{type_name} has no field marked with column().")

    return Table(name, columns, factory, entity_type=entity_type)


def _require_zero_argument_factory(entity_type: type, factory: Any) -> None:
    type_name = _type_name(entity_type)
    if not callable(factory):
        raise SchemaError(f"Entity factory of {type_name} is not callable.")
    try:
        signature = inspect.signature(factory)
    except (TypeError, ValueError):
        return
    try:
        signature.bind()
    except TypeError as exc:
        raise SchemaError(
            f"{type_name} cannot be built without arguments: {exc}"
        ) from exc


def _type_hints(entity_type: type) -> Dict[str, Any]:
    try:
        return dict(get_type_hints(entity_type))
    except (NameError, TypeError):
        logger.debug("unresolved annotations on %s", _type_name(entity_type))
        return {}


def _type_name(entity_type: Any) -> str:
    return getattr(entity_type, "__qualname__", repr(entity_type))


default_registry = SchemaRegistry()


def table_for(entity_type: Type[T], suffix: str | None = None) -> Table[T]:
    """Resolve a descriptor from the process-wide default registry."""

    return default_registry.table_for(entity_type, suffix)
