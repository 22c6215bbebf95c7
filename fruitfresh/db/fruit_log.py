"""Append-only fruit log storage with live subscriptions."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import DEFAULT_DB_PATH
from ..errors import PersistenceFailure
from ..logbook import DayLog, FruitLogEntry, date_key, group_by_date
from .schema import ensure_schema

if TYPE_CHECKING:
    from ..parser import FruitAnalysis

logger = logging.getLogger(__name__)

EntriesCallback = Callable[[list[FruitLogEntry]], None]


class Subscription:
    """Handle for a live query; call :meth:`unsubscribe` when done."""

    def __init__(
        self, db: FruitLogDB, callback: EntriesCallback, user_id: str | None
    ) -> None:
        self._db = db
        self._callback = callback
        self.user_id = user_id
        self.active = True

    def deliver(self, entries: list[FruitLogEntry]) -> None:
        if self.active:
            self._callback(entries)

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._db._remove_subscription(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class FruitLogDB:
    """Manages the fruit_logs table.

    Entries are only ever inserted. Subscribers receive the full result set,
    newest day first, once on subscribe and again after every change.
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._subscriptions: list[Subscription] = []
        self._last_seen: tuple[int, int] | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        for sub in list(self._subscriptions):
            sub.unsubscribe()
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def append(
        self,
        analysis: FruitAnalysis,
        user_id: str,
        *,
        today: date | None = None,
        now: datetime | None = None,
    ) -> FruitLogEntry:
        """Store a log entry derived from *analysis* for today's date.

        Raises:
            PersistenceFailure: If the database rejects the write.
        """
        today = today or date.today()
        now = now or datetime.now()
        entry = FruitLogEntry(
            date=date_key(today),
            fruit_name=analysis.fruit_name,
            nutrition_score=analysis.nutrition_score,
            user_id=user_id,
            created_at=now.isoformat(),
            nutrition=analysis.nutrition,
            ripeness=analysis.ripeness,
            shelf_period=analysis.shelf_period,
            wait_time=analysis.wait_time,
        )

        try:
            conn = self._get_conn()
            cur = conn.execute(
                """INSERT INTO fruit_logs
                   (date_key, logged_on, fruit_name, nutrition_score,
                    nutrition, ripeness, shelf_period, wait_time,
                    user_id, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    entry.date,
                    today.isoformat(),
                    entry.fruit_name,
                    entry.nutrition_score,
                    entry.nutrition,
                    entry.ripeness,
                    entry.shelf_period,
                    entry.wait_time,
                    entry.user_id,
                    entry.created_at,
                ),
            )
            conn.commit()
        except sqlite3.Error as exc:
            logger.error("Failed to log %s: %s", analysis.fruit_name, exc)
            raise PersistenceFailure(str(exc)) from exc

        entry.id = cur.lastrowid
        logger.info("Logged %s for %s on %s", entry.fruit_name, user_id, entry.date)
        self._publish()
        return entry

    def list_entries(self, user_id: str | None = None) -> list[FruitLogEntry]:
        """Return entries ordered by date descending, newest entry first."""
        conn = self._get_conn()
        if user_id is None:
            rows = conn.execute(
                "SELECT * FROM fruit_logs ORDER BY logged_on DESC, id DESC"
            ).fetchall()
        else:
            rows = conn.execute(
                """SELECT * FROM fruit_logs WHERE user_id = ?
                   ORDER BY logged_on DESC, id DESC""",
                (user_id,),
            ).fetchall()
        return [FruitLogEntry.from_row(dict(r)) for r in rows]

    def subscribe(
        self, callback: EntriesCallback, user_id: str | None = None
    ) -> Subscription:
        """Register *callback* and push the current result set to it."""
        sub = Subscription(self, callback, user_id)
        self._subscriptions.append(sub)
        self._last_seen = self._snapshot()
        sub.deliver(self.list_entries(user_id))
        return sub

    def subscribe_calendar(
        self,
        callback: Callable[[dict[str, DayLog]], None],
        user_id: str | None = None,
    ) -> Subscription:
        """Like :meth:`subscribe`, but pushes entries grouped by date key."""
        return self.subscribe(
            lambda entries: callback(group_by_date(entries)), user_id
        )

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def refresh(self) -> bool:
        """Re-query and notify subscribers if another writer changed the log.

        Returns:
            True if subscribers were notified.
        """
        if self._snapshot() == self._last_seen:
            return False
        self._publish()
        return True

    def _snapshot(self) -> tuple[int, int]:
        row = self._get_conn().execute(
            "SELECT COUNT(*) AS n, COALESCE(MAX(id), 0) AS last_id FROM fruit_logs"
        ).fetchone()
        return (row["n"], row["last_id"])

    def _publish(self) -> None:
        self._last_seen = self._snapshot()
        for sub in list(self._subscriptions):
            sub.deliver(self.list_entries(sub.user_id))

    def _remove_subscription(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)
