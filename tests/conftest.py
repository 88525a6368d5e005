"""Shared test fixtures for GTD Bot tests.

This module provides common fixtures used across all test modules:
- Storage isolation with temporary data and log directories
- A controllable clock
- Wired engine, stats and dispatcher instances

Usage:
    def test_something(engine, mock_user_id):
        engine.capture(mock_user_id, "Buy milk")
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from gtdbot.activity import ActivityLog
from gtdbot.channels.dispatcher import CommandDispatcher
from gtdbot.tasks.lifecycle import TaskLifecycle
from gtdbot.tasks.stats import StatsAggregator
from gtdbot.tasks.store import TaskRepository


# ─────────────────────────────────────────────────────────────────────────────
# Clock
# ─────────────────────────────────────────────────────────────────────────────


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2024-05-01 09:00 UTC."""
    return FakeClock(datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc))


# ─────────────────────────────────────────────────────────────────────────────
# Storage Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Temporary directory for task documents."""
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


@pytest.fixture
def temp_log_dir(tmp_path: Path) -> Path:
    """Temporary directory for activity logs."""
    log_dir = tmp_path / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


@pytest.fixture
def repository(temp_data_dir: Path) -> TaskRepository:
    return TaskRepository(temp_data_dir)


@pytest.fixture
def activity_log(temp_log_dir: Path, clock: FakeClock) -> ActivityLog:
    return ActivityLog(temp_log_dir, clock=clock)


# ─────────────────────────────────────────────────────────────────────────────
# User Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_user_id() -> str:
    """Standard test user ID."""
    return "U1"


@pytest.fixture
def other_user_id() -> str:
    return "U2"


# ─────────────────────────────────────────────────────────────────────────────
# Engine Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def engine(repository: TaskRepository, activity_log: ActivityLog, clock: FakeClock) -> TaskLifecycle:
    return TaskLifecycle(repository, activity_log, clock=clock)


@pytest.fixture
def stats(repository: TaskRepository, activity_log: ActivityLog, clock: FakeClock) -> StatsAggregator:
    return StatsAggregator(repository, activity_log, clock=clock)


@pytest.fixture
def dispatcher(engine: TaskLifecycle, stats: StatsAggregator, activity_log: ActivityLog) -> CommandDispatcher:
    return CommandDispatcher(engine, stats, activity_log)


@pytest.fixture
def recorded_events(activity_log: ActivityLog):
    """Returns a function listing the event types recorded for a user, oldest first."""

    def _events(user_id: str) -> list[str]:
        return [entry.event_type for entry in activity_log.read(user_id)]

    return _events
