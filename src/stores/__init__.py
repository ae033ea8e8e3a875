"""
Stores - persistence for the engine's collaborators.

Simple CRUD surfaces over SQLAlchemy; no policy lives here.
"""

from src.stores.assessment_store import AssessmentStore
from src.stores.guardian_store import GuardianStore
from src.stores.profile_store import ProfileStore
from src.stores.routine_store import RoutineStore

__all__ = [
    "AssessmentStore",
    "GuardianStore",
    "ProfileStore",
    "RoutineStore",
]
