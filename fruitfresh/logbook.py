"""Fruit log entries and their calendar grouping."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


def date_key(day: date) -> str:
    """Calendar key for a day, e.g. ``2025-9-13`` (no zero padding)."""
    return f"{day.year}-{day.month}-{day.day}"


def parse_date_key(key: str) -> date:
    year, month, day = (int(part) for part in key.split("-"))
    return date(year, month, day)


@dataclass
class FruitLogEntry:
    """A persisted, date-keyed summary of one analysis."""

    date: str
    fruit_name: str
    nutrition_score: int
    user_id: str
    created_at: str
    nutrition: str = ""
    ripeness: str = ""
    shelf_period: str = ""
    wait_time: str = ""
    id: int | None = None

    @classmethod
    def from_row(cls, row: dict) -> FruitLogEntry:
        return cls(
            id=row["id"],
            date=row["date_key"],
            fruit_name=row["fruit_name"],
            nutrition_score=row["nutrition_score"],
            user_id=row["user_id"],
            created_at=row["created_at"],
            nutrition=row["nutrition"] or "",
            ripeness=row["ripeness"] or "",
            shelf_period=row["shelf_period"] or "",
            wait_time=row["wait_time"] or "",
        )

    @property
    def created(self) -> datetime:
        return datetime.fromisoformat(self.created_at)


@dataclass
class FruitMark:
    name: str
    score: int


@dataclass
class DayLog:
    fruits: list[FruitMark] = field(default_factory=list)


def group_by_date(entries: list[FruitLogEntry]) -> dict[str, DayLog]:
    """Group entries into a date key → DayLog mapping.

    Input order is preserved inside each day. Entries without a date key
    are skipped.
    """
    grouped: dict[str, DayLog] = {}
    for entry in entries:
        if not entry.date:
            continue
        grouped.setdefault(entry.date, DayLog()).fruits.append(
            FruitMark(name=entry.fruit_name, score=entry.nutrition_score)
        )
    return grouped
