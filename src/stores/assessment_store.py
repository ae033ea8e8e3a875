"""Fatigue assessment history."""

from __future__ import annotations

from sqlalchemy import select

from src.core.domain import AdvisoryResult, AdvisorySource
from src.db.database import SessionFactory, session_scope
from src.db.models import FatigueAssessment


class AssessmentStore:
    """Append-only history of oracle advisories."""

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def add(self, result: AdvisoryResult) -> None:
        with session_scope(self._session_factory) as session:
            session.add(
                FatigueAssessment(
                    timestamp=result.generated_at,
                    fatigue_score=result.score,
                    recommendation=result.recommendation,
                )
            )

    def recent(self, limit: int = 20) -> list[AdvisoryResult]:
        with session_scope(self._session_factory) as session:
            rows = session.scalars(
                select(FatigueAssessment)
                .order_by(FatigueAssessment.timestamp.desc(), FatigueAssessment.id.desc())
                .limit(limit)
            ).all()
            return [
                AdvisoryResult(
                    score=r.fatigue_score,
                    recommendation=r.recommendation,
                    source=AdvisorySource.ORACLE,
                    generated_at=r.timestamp,
                )
                for r in rows
            ]

    def latest(self) -> AdvisoryResult | None:
        rows = self.recent(limit=1)
        return rows[0] if rows else None
