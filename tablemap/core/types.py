"""Shared core type aliases and the closed set of storage types."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Union

SqlValue = Union[str, int, float, bytes, None]

QueryParams = Optional[Sequence[Any]]

ValueMap = Dict[str, SqlValue]
RowMapping = Mapping[str, Any]


class SqlType(str, Enum):
    """Storage types a column can be declared with."""

    TEXT = "text"
    INTEGER = "integer"
    REAL = "real"
    BLOB = "blob"

    def accepts(self, value: Any) -> bool:
        """Return whether `value` is a valid storage value for this type."""

        if value is None:
            return True
        if self is SqlType.TEXT:
            return isinstance(value, str)
        if self is SqlType.INTEGER:
            return isinstance(value, int) and not isinstance(value, bool)
        if self is SqlType.REAL:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        return isinstance(value, bytes)
