"""FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from src.core.engine import WellbeingEngine


def get_wellbeing_engine(request: Request) -> WellbeingEngine:
    """The engine owned by this application instance."""
    return request.app.state.engine
