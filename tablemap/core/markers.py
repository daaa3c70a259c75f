"""Declaration helpers attaching table and column markers to dataclasses."""

from __future__ import annotations

from dataclasses import Field, dataclass, field
from typing import Any, Callable, Optional, Type, TypeVar

from .types import SqlType

T = TypeVar("T")

COLUMN_METADATA_KEY = "column"


@dataclass(frozen=True)
class EntityMarker:
    """Table-level marker stored on an entity class as `__entity__`."""

    name: Optional[str] = None
    factory: Optional[Callable[[], Any]] = None


@dataclass(frozen=True)
class ColumnMarker:
    """Column-level marker stored in dataclass field metadata."""

    name: Optional[str] = None
    sql_type: Optional[SqlType] = None
    primary_key: bool = False
    index: bool = False
    nullable: bool = True
    default: Any = None


def entity(
    cls: Type[T] | None = None,
    *,
    name: str | None = None,
    factory: Callable[[], Any] | None = None,
) -> Any:
    """Mark a dataclass as a persisted entity.

    Works bare (`@entity`) or with arguments (`@entity(name="people")`).

    Args:
        cls: Decorated class when used without arguments.
        name: Explicit table name. Defaults to the class name.
        factory: Zero-argument callable building a default instance. Defaults
            to the class itself.
    """

    def decorator(target: Type[T]) -> Type[T]:
        target.__entity__ = EntityMarker(name=name, factory=factory)  # type: ignore[attr-defined]
        return target

    if cls is not None:
        return decorator(cls)
    return decorator


def column(
    *,
    name: str | None = None,
    sql_type: SqlType | str | None = None,
    primary_key: bool = False,
    index: bool = False,
    nullable: bool = True,
    default: Any = None,
    field_default: Any = None,
) -> Any:
    """Declare a mapped dataclass field.

    `default` is written to the database when the field value is `None`;
    `field_default` is the dataclass default used by the zero-argument
    constructor.
    """

    marker = ColumnMarker(
        name=name,
        sql_type=SqlType(sql_type) if sql_type is not None else None,
        primary_key=primary_key,
        index=index,
        nullable=nullable,
        default=default,
    )
    return field(default=field_default, metadata={COLUMN_METADATA_KEY: marker})


def entity_marker(cls: Any) -> Optional[EntityMarker]:
    """Return the table marker declared directly on `cls`, if any."""

    marker = vars(cls).get("__entity__") if isinstance(cls, type) else None
    return marker if isinstance(marker, EntityMarker) else None


def column_marker(model_field: Field[Any]) -> Optional[ColumnMarker]:
    """Return the column marker of a dataclass field, if any."""

    marker = model_field.metadata.get(COLUMN_METADATA_KEY)
    return marker if isinstance(marker, ColumnMarker) else None

