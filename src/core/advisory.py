"""
Advisory Client: fatigue score + recommendation from an external oracle.

The oracle is opaque and unreliable. Every response passes a strict schema
step; anything that fails (timeout, transport error, unparseable or
ill-typed JSON) resolves to the last known good result, or to a neutral
baseline on first run. Advisory output is display-only and never drives the
lockout state machine.
"""

from __future__ import annotations

import asyncio
import json
import math
import re
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any, Protocol

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from src.core.domain import AdvisoryResult, AdvisorySource, Role, RoutineItem

DEFAULT_RECOMMENDATION = "System learning your patterns..."
MISSING_RECOMMENDATION = "Take a short break."
SCORE_MIN = 0
SCORE_MAX = 100

# =============================================================================
# Prompts
# =============================================================================

ADVISORY_PROMPT = """Analyze the following digital usage data for a {role}.
Total usage today: {minutes_used} minutes.
Daily limit: {limit_minutes} minutes.
Current time: {current_time}.
User's Daily Routine: {routine}.

Provide a fatigue score (0-100) and a brief, intelligent recommendation (max 15 words).
Respond in JSON format: {{ "score": number, "recommendation": string }}"""


def build_advisory_prompt(
    usage_seconds: int,
    limit_minutes: int,
    now_local: datetime,
    routine_snapshot: Sequence[RoutineItem],
    role: Role | None = None,
) -> str:
    """Render the oracle context summary. Routine items are listed in time order."""
    ordered = sorted(routine_snapshot, key=lambda item: item.time)
    routine = ", ".join(item.describe() for item in ordered) or "No routine set"
    return ADVISORY_PROMPT.format(
        role=(role or Role.IT_WORKER).label,
        minutes_used=math.floor(usage_seconds / 60 + 0.5),
        limit_minutes=limit_minutes,
        current_time=now_local.strftime("%H:%M"),
        routine=routine,
    )


# =============================================================================
# Response Schema
# =============================================================================


class AdvisoryPayload(BaseModel):
    """Strict shape of the oracle's JSON answer."""

    model_config = ConfigDict(extra="ignore")

    score: float
    recommendation: str | None = None

    @field_validator("score", mode="before")
    @classmethod
    def _finite_number(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("score must be a number")
        try:
            value = float(value)
        except OverflowError:
            raise ValueError("score out of range") from None
        if not math.isfinite(value):
            raise ValueError("score must be finite")
        return value


def clamp_score(score: float) -> int:
    return max(SCORE_MIN, min(SCORE_MAX, int(round(score))))


def parse_advisory_payload(text: str | None) -> AdvisoryPayload:
    """
    Parse oracle output into a validated payload.

    Raises:
        ValueError: if no JSON object can be recovered or it fails validation
    """
    if not text or not text.strip():
        raise ValueError("empty oracle response")
    text = text.strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # Models sometimes wrap the object in prose or code fences
        match = re.search(r"\{[^{}]*\}", text, re.DOTALL)
        if not match:
            raise ValueError("no JSON object in oracle response") from None
        try:
            data = json.loads(match.group())
        except json.JSONDecodeError as e:
            raise ValueError(f"unparseable oracle JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"oracle JSON is {type(data).__name__}, expected object")

    try:
        return AdvisoryPayload.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"oracle JSON failed validation: {e.error_count()} error(s)") from e


# =============================================================================
# Client
# =============================================================================


class AdvisoryOracle(Protocol):
    """Anything that can answer a text prompt asynchronously."""

    async def generate(self, prompt: str) -> str: ...


class AdvisoryClient:
    """Requests, validates and caches fatigue advisories."""

    def __init__(
        self,
        oracle: AdvisoryOracle | None,
        timeout_seconds: float = 15.0,
        on_result: Callable[[AdvisoryResult], None] | None = None,
    ):
        """
        Initialize the advisory client.

        Args:
            oracle: External scoring provider (None means always fall back)
            timeout_seconds: Upper bound on one oracle round trip
            on_result: Optional sink for fresh oracle results (e.g. history store)
        """
        self.oracle = oracle
        self.timeout_seconds = timeout_seconds
        self.on_result = on_result
        self._last_good: AdvisoryResult | None = None

    @property
    def last_result(self) -> AdvisoryResult:
        """Last known good result, or the neutral baseline."""
        return self._last_good or self.neutral_default()

    @staticmethod
    def neutral_default() -> AdvisoryResult:
        return AdvisoryResult(
            score=SCORE_MIN,
            recommendation=DEFAULT_RECOMMENDATION,
            source=AdvisorySource.DEFAULT,
        )

    async def refresh(
        self,
        usage_seconds: int,
        limit_minutes: int,
        now_local: datetime,
        routine_snapshot: Sequence[RoutineItem],
        role: Role | None = None,
    ) -> AdvisoryResult:
        """Ask the oracle for a fresh advisory. Never raises."""
        if self.oracle is None:
            logger.debug("No advisory oracle configured; using fallback")
            return self._fallback()

        prompt = build_advisory_prompt(usage_seconds, limit_minutes, now_local, routine_snapshot, role)

        try:
            text = await asyncio.wait_for(self.oracle.generate(prompt), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Advisory oracle timed out after {self.timeout_seconds}s")
            return self._fallback()
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Advisory oracle call failed: {e}")
            return self._fallback()

        try:
            payload = parse_advisory_payload(text)
        except ValueError as e:
            logger.warning(f"Discarding malformed advisory: {e}")
            return self._fallback()

        recommendation = (payload.recommendation or "").strip() or MISSING_RECOMMENDATION
        result = AdvisoryResult(
            score=clamp_score(payload.score),
            recommendation=recommendation,
            source=AdvisorySource.ORACLE,
            generated_at=now_local,
        )
        if result.score != payload.score:
            logger.debug(f"Advisory score {payload.score} normalized to {result.score}")

        self._last_good = result
        if self.on_result is not None:
            try:
                self.on_result(result)
            except Exception as e:  # History is best effort
                logger.error(f"Failed to store advisory result: {e}")
        return result

    def _fallback(self) -> AdvisoryResult:
        if self._last_good is None:
            return self.neutral_default()
        return AdvisoryResult(
            score=self._last_good.score,
            recommendation=self._last_good.recommendation,
            source=AdvisorySource.FALLBACK,
            generated_at=self._last_good.generated_at,
        )
