"""
Emergency router.

SOS trigger, available whether or not access is locked.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.deps import get_wellbeing_engine
from src.core.engine import WellbeingEngine

router = APIRouter()


@router.post("", summary="Alert all guardians")
async def trigger_emergency(engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    outcome = await engine.trigger_emergency()
    return outcome.to_dict()


@router.get("", summary="Current incident state")
def emergency_state(engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    last = engine.dispatcher.last_outcome
    return {
        "active": engine.dispatcher.active,
        "last_outcome": last.to_dict() if last else None,
    }
