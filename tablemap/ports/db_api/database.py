"""DB-API adapter implementation for the core storage port."""

from __future__ import annotations

import contextlib
import logging
import sqlite3
from typing import Any, Iterator, Mapping, Sequence

from ...core.errors import StatementError
from ...core.types import QueryParams, RowMapping

logger = logging.getLogger(__name__)


class Database:
    """Thin DB-API wrapper for `qmark` connections such as `sqlite3`.

    Every engine error is re-raised as `StatementError` with the original
    exception chained.
    """

    def __init__(self, conn: Any, *, error_types: tuple[type[BaseException], ...] | None = None):
        """Create database adapter.

        Args:
            conn: Open DB-API connection using `?` placeholders.
            error_types: Engine exception types translated to `StatementError`.
                Defaults to `sqlite3.Error`.
        """

        self._closed = False
        self.conn: Any | None = conn
        self._error_types = error_types or (sqlite3.Error,)

    def _require_open_connection(self) -> Any:
        if self._closed or self.conn is None:
            raise StatementError("connection is closed")
        return self.conn

    @contextlib.contextmanager
    def _translate_errors(self, sql: str) -> Iterator[None]:
        try:
            yield
        except self._error_types as exc:
            raise StatementError(f"{exc} [sql: {sql}]", sql=sql) from exc

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """Provide commit/rollback transaction scope."""

        conn = self._require_open_connection()
        try:
            if getattr(conn, "isolation_level", "") is None and not getattr(
                conn, "in_transaction", False
            ):
                conn.execute("BEGIN")
            yield
            conn.commit()
        except BaseException:
            conn.rollback()
            raise

    def execute(self, sql: str, params: QueryParams = None) -> Any:
        """Execute SQL with optional positional parameters and return cursor."""

        conn = self._require_open_connection()
        logger.debug("execute: %s params=%r", sql, params)
        cur = conn.cursor()
        try:
            with self._translate_errors(sql):
                if params is None:
                    cur.execute(sql)
                else:
                    cur.execute(sql, list(params))
        except BaseException:
            cur.close()
            raise
        return cur

    @contextlib.contextmanager
    def query(
        self,
        table: str,
        columns: Sequence[str],
        where: str | None = None,
        args: QueryParams = None,
        order_by: str | None = None,
    ) -> Iterator[Iterator[RowMapping]]:
        """Run a `SELECT` and yield its rows as name-addressable mappings.

        The cursor is closed when the `with` block exits, whether or not the
        rows were fully consumed.
        """

        sql = f"SELECT {', '.join(columns)} FROM {table}"
        if where:
            sql += f" WHERE {where}"
        if order_by:
            sql += f" ORDER BY {order_by}"
        cur = self.execute(sql, args if where else None)
        try:
            yield self._iter_rows(cur, sql)
        finally:
            cur.close()

    def _iter_rows(self, cursor: Any, sql: str) -> Iterator[RowMapping]:
        while True:
            with self._translate_errors(sql):
                row = cursor.fetchone()
            if row is None:
                return
            yield self._row_to_mapping(cursor, row)

    def _row_to_mapping(self, cursor: Any, row: Any) -> RowMapping:
        """Normalize row object to mapping.

        Supports mapping rows directly and tuple/list rows via
        `cursor.description`.
        """

        if isinstance(row, Mapping):
            return row

        if isinstance(row, (tuple, list)):
            desc = getattr(cursor, "description", None)
            if not desc:
                raise TypeError(
                    "Cursor has no description; cannot map tuple rows to dict."
                )
            cols = [d[0] for d in desc]
            return dict(zip(cols, row))

        if hasattr(row, "keys"):
            return {key: row[key] for key in row.keys()}

        raise TypeError(f"Unsupported row type: {type(row)}")

    def insert_or_raise(self, table: str, values: Mapping[str, Any]) -> Any:
        """Insert one row; constraint violations raise `StatementError`."""

        if values:
            names = list(values)
            placeholders = ",".join("?" for _ in names)
            sql = f"INSERT INTO {table} ({','.join(names)}) VALUES ({placeholders});"
            cur = self.execute(sql, [values[name] for name in names])
        else:
            cur = self.execute(f"INSERT INTO {table} DEFAULT VALUES;")
        row_id = cur.lastrowid
        cur.close()
        return row_id

    def delete(self, table: str, where: str | None = None, args: QueryParams = None) -> int:
        """Delete rows matching `where` (every row when omitted)."""

        sql = f"DELETE FROM {table}"
        if where:
            sql += f" WHERE {where}"
        cur = self.execute(sql + ";", args if where else None)
        count = cur.rowcount
        cur.close()
        return count

    def close(self) -> None:
        """Close underlying connection."""

        if self._closed:
            return
        conn = self.conn
        self._closed = True
        self.conn = None
        close = getattr(conn, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

