"""Conversion of entity field values to and from storage values."""

from __future__ import annotations

import json
import types
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Union, get_args, get_origin

from .errors import MappingError
from .types import SqlType, SqlValue


def resolve_sql_type(annotation: Any) -> SqlType:
    """Map a Python field annotation to a storage type."""

    if isinstance(annotation, str):
        lowered = annotation.lower()
        if "bytes" in lowered or "bytearray" in lowered:
            return SqlType.BLOB
        if "float" in lowered:
            return SqlType.REAL
        if "bool" in lowered or "int" in lowered:
            return SqlType.INTEGER
        return SqlType.TEXT

    base_type = unwrap_optional(annotation)

    enum_type = _enum_type(base_type)
    if enum_type is not None:
        if all(isinstance(member.value, int) for member in enum_type):
            return SqlType.INTEGER
        return SqlType.TEXT

    if base_type is bool or base_type is int:
        return SqlType.INTEGER
    if base_type is float:
        return SqlType.REAL
    if base_type in {bytes, bytearray, memoryview}:
        return SqlType.BLOB
    return SqlType.TEXT


def to_storage(
    value: Any,
    *,
    annotation: Any,
    sql_type: SqlType,
    field_name: str,
) -> SqlValue:
    """Convert one field value into a value the storage engine can bind."""

    if value is None:
        return None

    converted = _serialize_value(value, annotation=annotation, field_name=field_name)

    if sql_type is SqlType.REAL and isinstance(converted, int):
        converted = float(converted)

    if not sql_type.accepts(converted):
        raise MappingError(
            f"Field {field_name!r} holds {type(value).__name__} which cannot be "
            f"stored in a {sql_type.value} column."
        )
    return converted


def from_storage(value: Any, *, annotation: Any, field_name: str) -> Any:
    """Convert one storage value back into the field's runtime type."""

    if value is None:
        return None

    base = unwrap_optional(annotation)
    try:
        return _deserialize_value(value, base)
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise MappingError(
            f"Cannot convert stored value {value!r} for field {field_name!r} "
            f"to {getattr(base, '__name__', base)}."
        ) from exc


def _serialize_value(value: Any, *, annotation: Any, field_name: str) -> Any:
    enum_type = _enum_type(unwrap_optional(annotation))
    if enum_type is not None or isinstance(value, Enum):
        return _serialize_enum(value, enum_type=enum_type, field_name=field_name)

    if _is_json_field(annotation):
        return _serialize_json(value, field_name=field_name)

    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    return value


def _deserialize_value(value: Any, base: Any) -> Any:
    enum_type = _enum_type(base)
    if enum_type is not None:
        if isinstance(value, enum_type):
            return value
        return enum_type(value)

    if _is_json_field(base):
        if isinstance(value, (bytes, bytearray, memoryview)):
            value = bytes(value).decode("utf-8")
        return json.loads(value) if isinstance(value, str) else value

    if base is bool:
        return bool(int(value))
    if base is int:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{value!r} is not a whole number")
        return int(value)
    if base is float:
        return float(value)
    if base is datetime:
        return datetime.fromisoformat(value)
    if base is date:
        return date.fromisoformat(value)
    if base is time:
        return time.fromisoformat(value)
    if base is Decimal:
        return Decimal(str(value))
    if base in {bytes, bytearray, memoryview}:
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)
    if base is str:
        return value if isinstance(value, str) else str(value)
    return value


def _serialize_enum(
    value: Any,
    *,
    enum_type: type[Enum] | None,
    field_name: str,
) -> Any:
    if isinstance(value, Enum):
        return value.value
    if enum_type is None:  # pragma: no cover - guarded by caller
        return value
    try:
        return enum_type(value).value
    except ValueError as exc:
        raise MappingError(
            f"Invalid enum value {value!r} for field {field_name!r}."
        ) from exc


def _serialize_json(value: Any, *, field_name: str) -> Any:
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as exc:
        raise MappingError(
            f"Field {field_name!r} value is not JSON serializable."
        ) from exc


def _enum_type(base: Any) -> type[Enum] | None:
    if isinstance(base, type) and issubclass(base, Enum):
        return base
    return None


def _is_json_field(annotation: Any) -> bool:
    base = unwrap_optional(annotation)
    if base in {dict, list}:
        return True
    return get_origin(base) in {dict, list}


def unwrap_optional(annotation: Any) -> Any:
    """Extract `T` from `Optional[T]` / `T | None` annotations."""

    origin = get_origin(annotation)
    if origin is None:
        return annotation

    if origin not in {Union, types.UnionType}:
        return annotation

    all_args = get_args(annotation)
    args = [arg for arg in all_args if arg is not type(None)]
    if len(args) == 1 and len(all_args) == 2:
        return args[0]
    return annotation
