"""Core port contract used by table descriptors."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Iterator, Mapping, Protocol, Sequence

from .types import QueryParams, RowMapping


class DatabasePort(Protocol):
    """Storage operations a `Table` needs from an open connection."""

    def transaction(self) -> AbstractContextManager[None]: ...

    def execute(self, sql: str, params: QueryParams = None) -> Any: ...

    def query(
        self,
        table: str,
        columns: Sequence[str],
        where: str | None = None,
        args: QueryParams = None,
        order_by: str | None = None,
    ) -> AbstractContextManager[Iterator[RowMapping]]: ...

    def insert_or_raise(self, table: str, values: Mapping[str, Any]) -> Any: ...

    def delete(self, table: str, where: str | None = None, args: QueryParams = None) -> int: ...
