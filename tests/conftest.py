"""Shared pytest configuration for the project test suite."""
from __future__ import annotations

import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

import pytest


# Ensure the repository root (``app``) and ``src`` (``budget_pace``) are importable.
ROOT = Path(__file__).resolve().parent.parent
for path in (ROOT, ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from budget_pace.config import Config  # noqa: E402
from budget_pace.schema import TimeEntry  # noqa: E402


HOUR = 3600
WORK_DAY = 8 * HOUR

NOW = datetime(2024, 3, 10, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant; the engine never reads the clock."""
    return NOW


@pytest.fixture
def config() -> Config:
    """Default thresholds, independent of the environment."""
    return Config()


@pytest.fixture
def make_entry() -> Callable[..., TimeEntry]:
    """
    Build a TimeEntry ``days_ago`` calendar days before NOW.

    Entries start at 09:00 on their day so they sit inside a 7-day window
    measured from NOW (12:00) whenever ``days_ago`` < 7.
    """
    counter = {"n": 0}

    def _make(
        days_ago: float,
        seconds: Optional[int] = WORK_DAY,
        work_item_id: Optional[str] = None,
        start: Optional[datetime] = None,
    ) -> TimeEntry:
        counter["n"] += 1
        if start is None:
            start = (NOW - timedelta(days=days_ago)).replace(hour=9)
        return TimeEntry(
            id=f"e{counter['n']}",
            start_time=start,
            duration_seconds=seconds,
            work_item_id=work_item_id,
        )

    return _make


@pytest.fixture
def entry_dict() -> Callable[[TimeEntry], dict]:
    """Serialize a TimeEntry into the camelCase request shape."""

    def _dump(entry: TimeEntry) -> dict:
        return {
            "id": entry.id,
            "workItemId": entry.work_item_id,
            "startTime": entry.start_time.isoformat() if entry.start_time else None,
            "durationSeconds": entry.duration_seconds,
        }

    return _dump
