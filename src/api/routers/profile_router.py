"""
Profile router.

Endpoints for reading and replacing the single user profile.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.api.deps import get_wellbeing_engine
from src.core.domain import Profile, Role
from src.core.engine import WellbeingEngine

router = APIRouter()


class ProfileModel(BaseModel):
    """Profile payload."""

    name: str = Field(min_length=1)
    role: Literal["student", "it_worker", "worker"] = "it_worker"
    daily_limit_minutes: int = Field(gt=0, le=24 * 60)


@router.get("", response_model=ProfileModel, summary="Get user profile")
def get_profile(engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> ProfileModel:
    profile = engine.profiles.get()
    return ProfileModel(name=profile.name, role=profile.role.value, daily_limit_minutes=profile.daily_limit_minutes)


@router.post("", summary="Replace user profile")
def put_profile(body: ProfileModel, engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    engine.profiles.put(
        Profile(name=body.name, role=Role.parse(body.role), daily_limit_minutes=body.daily_limit_minutes)
    )
    # A lower limit may already be exceeded
    state = engine.evaluate_lock()
    return {"success": True, "lock_state": state.value}
