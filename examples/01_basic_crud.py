"""Basic create/insert/select/delete example for tablemap."""

from __future__ import annotations

import logging
import sqlite3
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "tablemap").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tablemap import Database, column, default_registry, entity


@entity
@dataclass
class Person:
    # Primary key columns form the delete predicate.
    id: Optional[int] = column(primary_key=True)
    name: Optional[str] = column(index=True)
    age: Optional[int] = column()


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    # 1) Wrap an open sqlite3 connection.
    db = Database(sqlite3.connect(":memory:"))

    try:
        # 2) Reflect the entity once and create its table + indexes.
        table = default_registry.table_for(Person)
        print("DDL:", table.create_table_sql(), *table.create_index_sql())
        table.create_table(db)

        # 3) Insert rows.
        default_registry.insert(db, Person(id=1, name="Ana", age=30))
        default_registry.insert(db, Person(id=2, name="Bo", age=12))

        # 4) Select by example: every set field becomes `col = ?`.
        print("Named Ana:", default_registry.select(db, Person(name="Ana")))

        # 5) Delete by primary key.
        print("Deleted:", default_registry.delete(db, Person(id=1)))
        print("Remaining:", default_registry.select(db, Person()))

        # 6) Drop is safe to repeat.
        table.drop_table(db)
        table.drop_table(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
