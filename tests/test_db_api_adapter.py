from __future__ import annotations

import contextlib
import sqlite3
import unittest
from typing import Any

from tablemap import Database, MappingError, SchemaError, SchemaRegistry, StatementError

from tests.entities import Entry, LooseCounter, Person


class _TrackingCursor:
    def __init__(self, rows: list[tuple[Any, ...]], description: list[tuple[str]]):
        self._rows = list(rows)
        self.description = description
        self.closed = False
        self.rowcount = -1
        self.lastrowid = None

    def execute(self, sql, params=None):  # noqa: ANN001,ANN201
        return self

    def fetchone(self):  # noqa: ANN201
        return self._rows.pop(0) if self._rows else None

    def close(self) -> None:
        self.closed = True


class _TrackingConnection:
    def __init__(self, rows: list[tuple[Any, ...]], columns: list[str]):
        self.cursor_obj = _TrackingCursor(rows, [(name,) for name in columns])

    def cursor(self) -> _TrackingCursor:
        return self.cursor_obj


class _RecordingDb:
    """Port double that records statements instead of running them."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    class _Cursor:
        def close(self) -> None:
            pass

    def transaction(self):  # noqa: ANN201
        return contextlib.nullcontext()

    def execute(self, sql, params=None):  # noqa: ANN001,ANN201
        self.calls.append(("execute", sql, params))
        return self._Cursor()

    @contextlib.contextmanager
    def query(self, table, columns, where=None, args=None, order_by=None):  # noqa: ANN001,ANN201
        self.calls.append(("query", table, tuple(columns), where, args, order_by))
        yield iter(())

    def insert_or_raise(self, table, values):  # noqa: ANN001,ANN201
        self.calls.append(("insert", table, dict(values)))
        return None

    def delete(self, table, where=None, args=None):  # noqa: ANN001,ANN201
        self.calls.append(("delete", table, where, args))
        return 1


class DatabaseAdapterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.conn = sqlite3.connect(":memory:")
        self.db = Database(self.conn)
        self.db.execute("CREATE TABLE items (id integer, label text);")

    def tearDown(self) -> None:
        self.db.close()

    def test_insert_or_raise_and_query(self) -> None:
        row_id = self.db.insert_or_raise("items", {"id": 1, "label": "a"})
        self.assertEqual(row_id, 1)
        with self.db.query("items", ["id", "label"], "id = ?", [1]) as rows:
            self.assertEqual(list(rows), [{"id": 1, "label": "a"}])

    def test_query_without_predicate_ignores_args(self) -> None:
        self.db.insert_or_raise("items", {"id": 1, "label": "a"})
        with self.db.query("items", ["label"], None, [99]) as rows:
            self.assertEqual(list(rows), [{"label": "a"}])

    def test_delete_returns_rowcount(self) -> None:
        self.db.insert_or_raise("items", {"id": 1, "label": "a"})
        self.db.insert_or_raise("items", {"id": 2, "label": "b"})
        self.assertEqual(self.db.delete("items", "id = ?", [1]), 1)
        self.assertEqual(self.db.delete("items"), 1)

    def test_engine_errors_become_statement_errors(self) -> None:
        with self.assertRaises(StatementError) as ctx:
            self.db.execute("SELECT * FROM nowhere")
        self.assertEqual(ctx.exception.sql, "SELECT * FROM nowhere")
        self.assertIsInstance(ctx.exception.__cause__, sqlite3.OperationalError)

    def test_transaction_rolls_back_on_error(self) -> None:
        with self.assertRaises(RuntimeError):
            with self.db.transaction():
                self.db.insert_or_raise("items", {"id": 1, "label": "a"})
                raise RuntimeError("boom")
        with self.db.query("items", ["id"]) as rows:
            self.assertEqual(list(rows), [])

    def test_transaction_commits(self) -> None:
        with self.db.transaction():
            self.db.insert_or_raise("items", {"id": 1, "label": "a"})
        self.assertFalse(self.conn.in_transaction)

    def test_closed_adapter_rejects_statements(self) -> None:
        self.db.close()
        self.db.close()
        with self.assertRaises(StatementError):
            self.db.execute("SELECT 1")

    def test_sqlite_row_factory_rows_are_supported(self) -> None:
        self.conn.row_factory = sqlite3.Row
        self.db.insert_or_raise("items", {"id": 3, "label": "c"})
        with self.db.query("items", ["id", "label"]) as rows:
            self.assertEqual([dict(row) for row in rows], [{"id": 3, "label": "c"}])


class CursorReleaseTests(unittest.TestCase):
    def test_cursor_closed_after_full_read(self) -> None:
        conn = _TrackingConnection([(1, "Ana", 30)], ["id", "name", "age"])
        table = SchemaRegistry().table_for(Person)
        found = table.select(Database(conn))
        self.assertEqual(found, [Person(id=1, name="Ana", age=30)])
        self.assertTrue(conn.cursor_obj.closed)

    def test_cursor_closed_when_row_reconstitution_fails(self) -> None:
        conn = _TrackingConnection([(1, "lots")], ["id", "hits"])
        table = SchemaRegistry().table_for(LooseCounter)
        with self.assertRaises(MappingError):
            table.select(Database(conn))
        self.assertTrue(conn.cursor_obj.closed)


class GeneratedStatementTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = _RecordingDb()
        self.table = SchemaRegistry().table_for(Entry)

    def test_create_table_emits_table_then_indexes(self) -> None:
        self.table.create_table(self.db)
        self.assertEqual(
            [call[1] for call in self.db.calls],
            [
                "CREATE TABLE shard_entry (region text,note text,seq integer,"
                "PRIMARY KEY (region,seq));",
                "CREATE INDEX shard_entry_seq_index ON shard_entry(seq);",
            ],
        )

    def test_drop_table_statement(self) -> None:
        self.table.drop_table(self.db)
        self.assertEqual(self.db.calls, [("execute", "DROP TABLE IF EXISTS shard_entry;", None)])

    def test_delete_by_key_uses_only_primary_key_columns(self) -> None:
        self.table.delete(self.db, Entry(region="eu", note="ignored", seq=4))
        self.assertEqual(
            self.db.calls, [("delete", "shard_entry", "region = ? AND seq = ?", ["eu", 4])]
        )

    def test_delete_all_has_no_predicate(self) -> None:
        self.table.delete_all(self.db)
        self.assertEqual(self.db.calls, [("delete", "shard_entry", None, None)])

    def test_insert_builds_full_value_map(self) -> None:
        self.table.insert(self.db, Entry(region="eu", seq=1))
        self.assertEqual(
            self.db.calls,
            [("insert", "shard_entry", {"region": "eu", "note": None, "seq": 1})],
        )

    def test_select_passes_columns_predicate_and_order(self) -> None:
        self.table.select(self.db, Entry(region="eu"), "seq > ?", [2], "seq")
        self.assertEqual(
            self.db.calls,
            [
                (
                    "query",
                    "shard_entry",
                    ("region", "note", "seq"),
                    "region = ? AND (seq > ?)",
                    ["eu", 2],
                    "seq",
                )
            ],
        )

    def test_descriptor_cannot_be_renamed_after_use(self) -> None:
        table = self.table.copy()
        table.select(self.db)
        with self.assertRaises(SchemaError) as ctx:
            table.add_suffix("late")
        self.assertIn("already used", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
