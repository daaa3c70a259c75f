from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from tablemap import column, entity


@entity
@dataclass
class Person:
    id: Optional[int] = column(primary_key=True)
    name: Optional[str] = column()
    age: Optional[int] = column()
    nickname: str = "unmapped"


@entity(name="shard_entry")
@dataclass
class Entry:
    region: Optional[str] = column(primary_key=True)
    note: Optional[str] = column()
    seq: Optional[int] = column(primary_key=True, index=True)


@entity(name="accounts")
@dataclass
class Account:
    id: Optional[int] = column(primary_key=True)
    email: Optional[str] = column(nullable=False, index=True)
    plan: Optional[str] = column(nullable=False, default="free")


@entity
@dataclass
class AuditLine:
    message: Optional[str] = column()
    level: Optional[int] = column(name="lvl")


class Color(Enum):
    RED = "red"
    BLUE = "blue"


class Priority(Enum):
    LOW = 1
    HIGH = 2


@entity
@dataclass
class Sample:
    id: Optional[int] = column(primary_key=True)
    active: Optional[bool] = column()
    created_at: Optional[datetime] = column()
    birthday: Optional[date] = column()
    amount: Optional[Decimal] = column()
    payload: Optional[bytes] = column()
    color: Optional[Color] = column()
    priority: Optional[Priority] = column()
    tags: Optional[dict] = column()
    ratio: Optional[float] = column()


@entity
@dataclass
class LooseCounter:
    id: Optional[int] = column(primary_key=True)
    hits: Optional[int] = column(sql_type="text")
