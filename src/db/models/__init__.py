# SQLAlchemy models
from .base import Base
from .wellbeing import (
    FatigueAssessment,
    GuardianRow,
    RoutineRow,
    UsageLog,
    UserProfile,
)

__all__ = [
    "Base",
    "FatigueAssessment",
    "GuardianRow",
    "RoutineRow",
    "UsageLog",
    "UserProfile",
]
