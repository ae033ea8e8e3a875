"""
Advisory router.

Fatigue score and recommendation. Failures degrade to a neutral result and
are never returned as errors.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from src.api.deps import get_wellbeing_engine
from src.core.engine import WellbeingEngine

router = APIRouter()


@router.get("", summary="Last known advisory")
def get_advisory(engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    return engine.latest_advisory.to_dict()


@router.post("/refresh", summary="Request a fresh advisory")
async def refresh_advisory(engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    result = await engine.refresh_advisory()
    return result.to_dict()


@router.get("/history", summary="Stored advisory history")
def advisory_history(
    limit: int = Query(20, ge=1, le=200),
    engine: WellbeingEngine = Depends(get_wellbeing_engine),
) -> list[dict]:
    if engine.assessments is None:
        return []
    return [r.to_dict() for r in engine.assessments.recent(limit)]
