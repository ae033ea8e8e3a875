"""
Routines router.

Daily routine items used as advisory context.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.api.deps import get_wellbeing_engine
from src.core.domain import RoutineItem
from src.core.engine import WellbeingEngine

router = APIRouter()


class RoutineIn(BaseModel):
    time: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    activity: str = Field(min_length=1)


class RoutineOut(RoutineIn):
    id: int
    completed: bool


class RoutinePatch(BaseModel):
    completed: bool


@router.get("", response_model=list[RoutineOut], summary="List routine in time order")
def list_routines(engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> list[RoutineOut]:
    return [
        RoutineOut(id=r.id, time=r.time, activity=r.activity, completed=r.completed)
        for r in engine.routines.list()
    ]


@router.post("", summary="Add routine item")
def add_routine(body: RoutineIn, engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    item = engine.routines.add(RoutineItem(time=body.time, activity=body.activity))
    return {"success": True, "id": item.id}


@router.delete("/{routine_id}", summary="Remove routine item")
def delete_routine(routine_id: int, engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    if not engine.routines.remove(routine_id):
        raise HTTPException(status_code=404, detail=f"Routine {routine_id} not found")
    return {"success": True}


@router.patch("/{routine_id}", summary="Mark routine item done or pending")
def patch_routine(
    routine_id: int,
    body: RoutinePatch,
    engine: WellbeingEngine = Depends(get_wellbeing_engine),
) -> dict:
    if engine.routines.set_completed(routine_id, body.completed) is None:
        raise HTTPException(status_code=404, detail=f"Routine {routine_id} not found")
    return {"success": True}
