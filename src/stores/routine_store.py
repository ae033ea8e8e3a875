"""Daily routine persistence. Items are always returned in time order."""

from __future__ import annotations

import re

from sqlalchemy import select

from src.core.domain import RoutineItem
from src.db.database import SessionFactory, session_scope
from src.db.models import RoutineRow

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class RoutineStore:
    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def list(self) -> list[RoutineItem]:
        with session_scope(self._session_factory) as session:
            rows = session.scalars(select(RoutineRow).order_by(RoutineRow.time, RoutineRow.id)).all()
            return [_to_item(r) for r in rows]

    def add(self, item: RoutineItem) -> RoutineItem:
        if not TIME_PATTERN.match(item.time):
            raise ValueError(f"Routine time must be HH:MM, got {item.time!r}")
        with session_scope(self._session_factory) as session:
            row = RoutineRow(time=item.time, activity=item.activity, completed=item.completed)
            session.add(row)
            session.flush()
            return _to_item(row)

    def remove(self, item_id: int) -> bool:
        """Delete an item. Returns False if it did not exist."""
        with session_scope(self._session_factory) as session:
            row = session.get(RoutineRow, item_id)
            if row is None:
                return False
            session.delete(row)
            return True

    def set_completed(self, item_id: int, completed: bool) -> RoutineItem | None:
        with session_scope(self._session_factory) as session:
            row = session.get(RoutineRow, item_id)
            if row is None:
                return None
            row.completed = bool(completed)
            return _to_item(row)


def _to_item(row: RoutineRow) -> RoutineItem:
    return RoutineItem(id=row.id, time=row.time, activity=row.activity, completed=bool(row.completed))
