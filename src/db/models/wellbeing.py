"""
Wellbeing Models.

SQLAlchemy models backing the usage engine and its collaborators:
- Usage log (append-only usage events)
- User profile (singleton)
- Guardians (emergency notify-set)
- Routines (daily schedule context for advisories)
- Fatigue assessments (advisory history)
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class UsageLog(Base):
    """A single usage event. Rows are inserted once and never updated."""

    __tablename__ = "usage_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    app_name: Mapped[str] = mapped_column(Text, nullable=False)
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (Index("idx_usage_logs_timestamp", "timestamp"),)

    def __repr__(self) -> str:
        return f"<UsageLog {self.app_name} {self.duration_seconds}s at {self.timestamp}>"


class UserProfile(Base):
    """The single user profile of a deployment."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False)  # 'student' or 'it_worker'
    daily_limit_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=360)


class GuardianRow(Base):
    """A trusted contact notified on emergencies."""

    __tablename__ = "guardians"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, default="")
    email: Mapped[str] = mapped_column(Text, default="")


class RoutineRow(Base):
    """A scheduled activity in the user's daily routine."""

    __tablename__ = "routines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    activity: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)


class FatigueAssessment(Base):
    """An advisory result returned by the oracle."""

    __tablename__ = "fatigue_assessments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    fatigue_score: Mapped[int] = mapped_column(Integer, nullable=False)
    recommendation: Mapped[str] = mapped_column(Text, nullable=False)
