"""Select-by-example combined with extra predicates and ordering."""

from __future__ import annotations

import sqlite3
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "tablemap").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tablemap import Database, SchemaRegistry, column, entity


@entity(name="bus_stop_times")
@dataclass
class StopTime:
    line: Optional[str] = column(primary_key=True)
    stop: Optional[str] = column(primary_key=True)
    minute: Optional[int] = column(primary_key=True)
    service_day: Optional[date] = column()
    accessible: Optional[bool] = column(nullable=False, default=False)


def main() -> None:
    registry = SchemaRegistry()
    with Database(sqlite3.connect(":memory:")) as db:
        registry.create_table(db, StopTime)
        with db.transaction():
            for minute in (5, 20, 35, 50):
                registry.insert(
                    db,
                    StopTime(
                        line="C1",
                        stop="Republique",
                        minute=minute,
                        service_day=date(2024, 3, 4),
                        accessible=minute % 2 == 0,
                    ),
                )

        # Example fields and the caller fragment are ANDed together.
        later = registry.select(
            db,
            StopTime(line="C1", accessible=True),
            where="minute >= ?",
            args=[15],
            order_by="minute DESC",
        )
        for stop_time in later:
            print(stop_time)


if __name__ == "__main__":
    main()
