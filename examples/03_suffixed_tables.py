"""One mapped shape stored in several physical tables via name suffixes."""

from __future__ import annotations

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

from tablemap import Database, SchemaRegistry, StatementError, column, entity


@entity
@dataclass
class Favorite:
    id: Optional[int] = column(primary_key=True)
    label: Optional[str] = column()


def main() -> None:
    registry = SchemaRegistry()
    with Database(sqlite3.connect(":memory:")) as db:
        for network in ("rennes", "nantes"):
            # Derived from the cached base descriptor, no second reflection.
            table = registry.table_for(Favorite, network)
            table.create_table(db)
            registry.insert(db, Favorite(id=1, label=f"home in {network}"), suffix=network)

        for network in ("rennes", "nantes"):
            print(network, registry.select(db, Favorite(), suffix=network))

        try:
            registry.insert(db, Favorite(id=1, label="dup"), suffix="rennes")
        except StatementError as exc:
            print("Rejected duplicate:", exc)


if __name__ == "__main__":
    main()
