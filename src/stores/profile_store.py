"""Singleton user profile persistence."""

from __future__ import annotations

from loguru import logger
from sqlalchemy import delete, select

from src.core.domain import Profile, Role
from src.db.database import SessionFactory, session_scope
from src.db.models import UserProfile


class ProfileStore:
    """Reads and replaces the single profile row."""

    def __init__(self, session_factory: SessionFactory, default_limit_minutes: int = 360):
        self._session_factory = session_factory
        self.default_limit_minutes = default_limit_minutes

    def get(self) -> Profile:
        """Return the stored profile, or a guest profile if none was saved."""
        with session_scope(self._session_factory) as session:
            row = session.scalars(select(UserProfile).limit(1)).first()
            if row is None:
                return Profile(daily_limit_minutes=self.default_limit_minutes)
            return Profile(
                name=row.name,
                role=Role.parse(row.role),
                daily_limit_minutes=row.daily_limit_minutes,
            )

    def put(self, profile: Profile) -> None:
        if profile.daily_limit_minutes <= 0:
            raise ValueError("daily_limit_minutes must be positive")
        with session_scope(self._session_factory) as session:
            session.execute(delete(UserProfile))
            session.add(
                UserProfile(
                    name=profile.name,
                    role=Role.parse(profile.role).value,
                    daily_limit_minutes=profile.daily_limit_minutes,
                )
            )
        logger.info(f"Profile saved: {profile.name} ({profile.daily_limit_minutes} min/day)")
