"""
Guardians router.

Trusted contacts who receive emergency alerts.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.api.deps import get_wellbeing_engine
from src.core.domain import Guardian
from src.core.engine import WellbeingEngine

router = APIRouter()


class GuardianIn(BaseModel):
    name: str = Field(min_length=1)
    phone: str = ""
    email: str = ""


class GuardianOut(GuardianIn):
    id: int


@router.get("", response_model=list[GuardianOut], summary="List guardians")
def list_guardians(engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> list[GuardianOut]:
    return [GuardianOut(id=g.id, name=g.name, phone=g.phone, email=g.email) for g in engine.guardians.list()]


@router.post("", summary="Add guardian")
def add_guardian(body: GuardianIn, engine: WellbeingEngine = Depends(get_wellbeing_engine)) -> dict:
    guardian = engine.guardians.add(Guardian(name=body.name, phone=body.phone, email=body.email))
    return {"success": True, "id": guardian.id}
