"""
Consumption calculator.

Aggregates logged time into consumed-vs-budgeted ratios, globally and per
work item. Pure functions, no I/O.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import numpy as np

from .config import Config, get_config
from .schema import ConsumptionSummary, TimeEntry, TimeHealth, WorkItemBudget


def is_closed(entry: TimeEntry) -> bool:
    """True if the entry has a positive, known duration."""
    return entry.duration_seconds is not None and entry.duration_seconds > 0


def closed_entries(
    entries: Iterable[TimeEntry],
    work_item_id: Optional[str] = None,
) -> List[TimeEntry]:
    """
    Entries that count towards consumption.

    Open sessions and non-positive durations are dropped. If
    ``work_item_id`` is given, only entries attributed to it are kept.
    """
    return [
        e
        for e in entries
        if is_closed(e) and (work_item_id is None or e.work_item_id == work_item_id)
    ]


def sum_work_days(entries: Sequence[TimeEntry], config: Config) -> float:
    if not entries:
        return 0.0
    seconds = np.fromiter((e.duration_seconds for e in entries), dtype=float)
    return float(seconds.sum()) / config.work_day_seconds


def consumed_work_days(
    entries: Iterable[TimeEntry],
    work_item_id: Optional[str] = None,
    config: Optional[Config] = None,
) -> float:
    """Sum of qualifying durations expressed in work-days (0 for no input)."""
    cfg = config or get_config()
    return sum_work_days(closed_entries(entries, work_item_id), cfg)


def uncategorized_work_days(
    entries: Iterable[TimeEntry],
    config: Optional[Config] = None,
) -> float:
    cfg = config or get_config()
    uncategorized = [e for e in closed_entries(entries) if e.work_item_id is None]
    return sum_work_days(uncategorized, cfg)


def consumption_percent(consumed: float, estimated: float) -> Optional[float]:
    """
    Percentage of the estimate consumed.

    Returns None when no budget is configured (estimate <= 0).
    """
    if estimated <= 0:
        return None
    return consumed / estimated * 100


def resolve_estimated_work_days(
    work_items: Sequence[WorkItemBudget],
    fallback: Optional[float] = None,
) -> float:
    """
    Total project budget.

    Sum of scope-item estimates when any scope item exists, otherwise the
    project-level fallback. Missing or negative values resolve to 0.
    """
    if work_items:
        total = sum(item.estimated_work_days for item in work_items)
    else:
        total = fallback or 0.0
    return max(0.0, float(total))


def summarize_consumption(
    entries: Sequence[TimeEntry],
    estimated_work_days: float,
    config: Optional[Config] = None,
) -> ConsumptionSummary:
    """Consumed, remaining and percent; budget-relative fields are None without a budget."""
    cfg = config or get_config()
    consumed = consumed_work_days(entries, config=cfg)
    uncategorized = uncategorized_work_days(entries, config=cfg)
    has_budget = estimated_work_days > 0
    return ConsumptionSummary(
        consumed_work_days=consumed,
        estimated_work_days=estimated_work_days,
        remaining_work_days=estimated_work_days - consumed if has_budget else None,
        consumption_percent=consumption_percent(consumed, estimated_work_days),
        uncategorized_percent=(uncategorized / consumed * 100) if consumed > 0 else 0.0,
    )


def time_score(overrun_percent: float) -> float:
    """
    Map a time overrun percentage to the 0..20 time-respect score.

    Bands: on budget earns full marks, then linear decay through the
    10 / 25 / 50 percent breakpoints, bottoming out at 100 percent overrun.
    """
    p = overrun_percent
    if p <= 0:
        return 20.0
    if p <= 10:
        return 15 + ((10 - p) / 10) * 5
    if p <= 25:
        return 10 + ((25 - p) / 15) * 5
    if p <= 50:
        return 5 + ((50 - p) / 25) * 5
    return max(0.0, 5 - (p - 50) / 50 * 5)


def time_health(summary: ConsumptionSummary) -> TimeHealth:
    estimated = summary.estimated_work_days
    consumed = summary.consumed_work_days
    overrun = (consumed - estimated) / estimated * 100 if estimated > 0 else 0.0
    has_data = estimated > 0 and consumed > 0
    return TimeHealth(
        has_time_data=has_data,
        time_overrun_percent=round(overrun, 1),
        time_score=int(round(time_score(overrun))) if has_data else 0,
    )
