"""Guardian contact persistence."""

from __future__ import annotations

from sqlalchemy import select

from src.core.domain import Guardian
from src.db.database import SessionFactory, session_scope
from src.db.models import GuardianRow


class GuardianStore:
    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def list(self) -> list[Guardian]:
        with session_scope(self._session_factory) as session:
            rows = session.scalars(select(GuardianRow).order_by(GuardianRow.id)).all()
            return [Guardian(id=r.id, name=r.name, phone=r.phone or "", email=r.email or "") for r in rows]

    def add(self, guardian: Guardian) -> Guardian:
        with session_scope(self._session_factory) as session:
            row = GuardianRow(name=guardian.name, phone=guardian.phone, email=guardian.email)
            session.add(row)
            session.flush()
            return Guardian(id=row.id, name=row.name, phone=row.phone, email=row.email)
