"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import asyncio
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import Settings  # noqa: E402
from src.core.clock import ManualClock  # noqa: E402
from src.core.domain import Guardian  # noqa: E402
from src.core.engine import build_engine  # noqa: E402
from src.db.database import create_db_engine, init_db, make_session_factory  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory database + API)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# =============================================================================
# Test doubles
# =============================================================================


class ScriptedOracle:
    """Advisory oracle returning scripted answers in order."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts: list[str] = []
        self.release: asyncio.Event | None = None

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.release is not None:
            await self.release.wait()
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, BaseException):
            raise answer
        return answer


class RecordingChannel:
    """Notification channel that records every attempt."""

    def __init__(self, fail_for: set[str] | None = None, raise_for: set[str] | None = None):
        self.fail_for = fail_for or set()
        self.raise_for = raise_for or set()
        self.attempts: list[str] = []
        self.release: asyncio.Event | None = None

    async def notify(self, guardian: Guardian, message: str) -> bool:
        self.attempts.append(guardian.name)
        if self.release is not None:
            await self.release.wait()
        if guardian.name in self.raise_for:
            raise ConnectionError("sms gateway down")
        return guardian.name not in self.fail_for


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        gemini_api_key=None,
        notification_webhook_url=None,
        scheduler_enabled=False,
        default_daily_limit_minutes=360,
        lock_clears_at_rollover=False,
    )


@pytest.fixture
def session_factory():
    """Fresh in-memory database per test."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def clock():
    """Manual clock starting mid-morning."""
    return ManualClock(datetime(2024, 3, 10, 9, 0, 0))


@pytest.fixture
def oracle():
    return ScriptedOracle('{"score": 42, "recommendation": "Stretch and drink water."}')


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def engine(settings, session_factory, oracle, channel, clock):
    """Fully wired engine on an in-memory database and a manual clock."""
    return build_engine(settings, session_factory, oracle=oracle, channel=channel, clock=clock)


@pytest.fixture
def sample_guardians():
    """Two guardians for emergency tests."""
    return [
        Guardian(name="Ana", phone="+15550001", email="ana@example.com"),
        Guardian(name="Ben", phone="+15550002", email="ben@example.com"),
    ]


@pytest.fixture
def make_oracle():
    """Factory for scripted oracles."""
    return ScriptedOracle


@pytest.fixture
def make_channel():
    """Factory for recording notification channels."""
    return RecordingChannel
