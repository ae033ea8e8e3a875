"""
Usage router.

Usage recording, period totals and the lockout state.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from loguru import logger
from pydantic import BaseModel

from src.api.deps import get_wellbeing_engine
from src.core.domain import OverrideActor
from src.core.engine import WellbeingEngine

router = APIRouter()


class UsageIn(BaseModel):
    """Usage report. Non-positive durations are ignored by the ledger."""

    duration_seconds: int
    app_name: str | None = None


class UsageLogOut(BaseModel):
    id: int | None
    timestamp: datetime
    app_name: str
    duration_seconds: int


class UnlockRequest(BaseModel):
    actor: OverrideActor = OverrideActor.USER


@router.get("/usage", response_model=list[UsageLogOut], summary="Recent usage events")
def list_usage(
    limit: int = Query(100, ge=1, le=1000),
    engine: WellbeingEngine = Depends(get_wellbeing_engine),
) -> list[UsageLogOut]:
    return [
        UsageLogOut(id=e.id, timestamp=e.timestamp, app_name=e.source_label, duration_seconds=e.duration_seconds)
        for e in engine.ledger.recent_events(limit)
    ]


@router.post("/usage", summary="Record usage")
def record_usage(body: UsageIn, engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    status = engine.record_usage(body.duration_seconds, body.app_name)
    return {"success": True, **status.to_dict()}


@router.get("/stats", summary="Usage totals for the current day")
def get_stats(engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    return engine.status().to_dict()


@router.get("/lock", summary="Current lock state")
def get_lock(
    limit: int = Query(20, ge=1, le=100),
    engine: WellbeingEngine = Depends(get_wellbeing_engine),
) -> dict:
    return {
        "lock_state": engine.get_lock_state().value,
        "history": [
            {
                "at": t.at.isoformat(),
                "from": t.from_state.value,
                "to": t.to_state.value,
                "reason": t.reason,
            }
            for t in engine.lockout.history[-limit:]
        ],
    }


@router.post("/lock/unlock", summary="Override an active lock")
def unlock(body: UnlockRequest | None = None, engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    actor = body.actor if body else OverrideActor.USER
    logger.info(f"Unlock requested by {actor.value}")
    return {"lock_state": engine.request_unlock(actor).value}
