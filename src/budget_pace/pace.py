"""
Pace estimator.

Derives a recent work-rate, in work-days consumed per elapsed calendar day,
from a bounded window of the most recent closed sessions.

Two candidate windows are built for the project as a whole:
- "recent-days": every session started within the last N calendar days
- "recent-sessions": the last M sessions, whatever their age

A window needs at least ``min_window_entries`` sessions to be usable. When
both are usable the larger one wins, ties go to "recent-sessions". Per-item
pace only ever uses the "recent-sessions" window.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from .config import Config, get_config, get_logger
from .consumption import closed_entries, sum_work_days
from .schema import PaceEstimate, TimeEntry


WINDOW_RECENT_DAYS = "recent-days"
WINDOW_RECENT_SESSIONS = "recent-sessions"

REASON_INSUFFICIENT_HISTORY = "insufficient history"
REASON_NOT_COMPUTABLE = "pace not computable"

logger = get_logger()


@dataclass
class Window:
    """A recency-ordered (newest first) subset of sessions."""

    label: str
    entries: List[TimeEntry]

    def __len__(self) -> int:
        return len(self.entries)

    def is_valid(self, config: Config) -> bool:
        return len(self.entries) >= config.min_window_entries

    def work_days(self, config: Config) -> float:
        return sum_work_days(self.entries, config)

    def calendar_span(self, now: datetime, config: Config) -> int:
        oldest = self.entries[-1].start_time
        end = self.entries[0].start_time
        if config.span_through_now and now > end:
            end = now
        return max(1, days_between(oldest, end) + 1)


def days_between(start: datetime, end: datetime) -> int:
    """Whole calendar days from ``start`` to ``end`` (date difference)."""
    return (end.date() - start.date()).days


def pace_entries(
    entries: Iterable[TimeEntry],
    work_item_id: Optional[str] = None,
) -> List[TimeEntry]:
    """Closed sessions with a start time, newest first."""
    dated = [e for e in closed_entries(entries, work_item_id) if e.start_time is not None]
    # Python's sort is stable, ties keep ledger order
    return sorted(dated, key=lambda e: e.start_time, reverse=True)


def build_windows(
    ordered: List[TimeEntry],
    now: datetime,
    config: Config,
) -> Tuple[Window, Window]:
    cutoff = now - timedelta(days=config.recent_days_window)
    recent_days = Window(
        WINDOW_RECENT_DAYS,
        [e for e in ordered if e.start_time >= cutoff],
    )
    recent_sessions = Window(
        WINDOW_RECENT_SESSIONS,
        ordered[: config.recent_sessions_window],
    )
    return recent_days, recent_sessions


def select_window(
    recent_days: Window,
    recent_sessions: Window,
    config: Config,
) -> Optional[Window]:
    """
    Pick the window to estimate from.

    Both valid: strictly larger count wins, equal counts pick
    "recent-sessions". One valid: that one. Neither: None.
    """
    days_ok = recent_days.is_valid(config)
    sessions_ok = recent_sessions.is_valid(config)
    if days_ok and sessions_ok:
        if len(recent_days) > len(recent_sessions):
            return recent_days
        return recent_sessions
    if days_ok:
        return recent_days
    if sessions_ok:
        return recent_sessions
    return None


def _estimate_from_window(
    window: Optional[Window],
    now: datetime,
    epsilon: float,
    config: Config,
) -> PaceEstimate:
    if window is None:
        return PaceEstimate(available=False, reason=REASON_INSUFFICIENT_HISTORY)

    work_days = window.work_days(config)
    span = window.calendar_span(now, config)
    pace = work_days / span
    if pace <= epsilon:
        return PaceEstimate(
            available=False,
            reason=REASON_NOT_COMPUTABLE,
            window_label=window.label,
            entry_count=len(window),
            calendar_span=span,
        )
    return PaceEstimate(
        available=True,
        pace_per_calendar_day=pace,
        window_label=window.label,
        entry_count=len(window),
        calendar_span=span,
    )


def estimate_pace(
    entries: Iterable[TimeEntry],
    now: datetime,
    config: Optional[Config] = None,
) -> PaceEstimate:
    """Project-wide pace, choosing between the two candidate windows."""
    cfg = config or get_config()
    ordered = pace_entries(entries)
    recent_days, recent_sessions = build_windows(ordered, now, cfg)
    window = select_window(recent_days, recent_sessions, cfg)
    logger.debug(
        "pace windows: %s=%d %s=%d -> %s",
        recent_days.label,
        len(recent_days),
        recent_sessions.label,
        len(recent_sessions),
        window.label if window else None,
    )
    return _estimate_from_window(window, now, cfg.global_pace_epsilon, cfg)


def estimate_item_pace(
    entries: Iterable[TimeEntry],
    work_item_id: str,
    now: datetime,
    config: Optional[Config] = None,
) -> PaceEstimate:
    """Pace of one work item, from its own last sessions only."""
    cfg = config or get_config()
    ordered = pace_entries(entries, work_item_id)
    window = Window(WINDOW_RECENT_SESSIONS, ordered[: cfg.recent_sessions_window])
    if not window.is_valid(cfg):
        window = None
    return _estimate_from_window(window, now, cfg.item_pace_epsilon, cfg)
