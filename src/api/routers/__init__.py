"""API routers for the Vigilant wellbeing service."""

from src.api.routers import (
    advisory_router,
    emergency_router,
    guardians_router,
    profile_router,
    routines_router,
    usage_router,
)

__all__ = [
    "advisory_router",
    "emergency_router",
    "guardians_router",
    "profile_router",
    "routines_router",
    "usage_router",
]
