"""
Projection engine.

Extrapolates completion dates and overage from pace and remaining budget:
- Global projection (project-wide pace)
- Per-item projection (each item re-projected from its own pace)
- Project overage reconciliation against an optional deadline
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from .config import Config, get_config
from .consumption import consumed_work_days, consumption_percent
from .pace import estimate_item_pace
from .schema import GlobalProjection, ItemProjection, PaceEstimate, TimeEntry, WorkItemBudget


REASON_NO_BUDGET = "no budget"
REASON_PACE_UNAVAILABLE = "pace unavailable"


def calendar_days_for(remaining_work_days: float, pace: float) -> int:
    """
    Calendar days needed to burn ``remaining_work_days`` at ``pace``.

    The quotient is rounded to 9 decimals before the ceiling so that float
    noise (21.000000000000004) does not add a day.
    """
    return int(math.ceil(round(remaining_work_days / pace, 9)))


def project_global(
    estimated_work_days: float,
    consumed: float,
    pace: PaceEstimate,
    now: datetime,
) -> GlobalProjection:
    if estimated_work_days <= 0:
        return GlobalProjection(available=False, reason=REASON_NO_BUDGET)

    remaining = estimated_work_days - consumed
    if remaining <= 0:
        return GlobalProjection(
            available=True,
            already_exceeded=True,
            exceeded_by=abs(remaining),
        )

    if not pace.available:
        return GlobalProjection(available=False, reason=REASON_PACE_UNAVAILABLE)

    days_needed = calendar_days_for(remaining, pace.pace_per_calendar_day)
    return GlobalProjection(
        available=True,
        estimated_end_date=now + timedelta(days=days_needed),
        calendar_days_needed=days_needed,
    )


def project_item(
    item: WorkItemBudget,
    entries: Sequence[TimeEntry],
    now: datetime,
    config: Optional[Config] = None,
) -> ItemProjection:
    """Re-project one work item from its own consumption and pace."""
    cfg = config or get_config()
    consumed = consumed_work_days(entries, item.id, config=cfg)
    estimated = item.estimated_work_days
    result = ItemProjection(
        work_item_id=item.id,
        label=item.label,
        estimated_work_days=estimated,
        consumed_work_days=consumed,
        consumption_percent=consumption_percent(consumed, estimated),
    )

    if estimated <= 0:
        result.applicable = False
        return result

    remaining = estimated - consumed
    if remaining <= 0:
        result.exceeded = True
        result.exceeded_by = abs(remaining)
        return result

    pace = estimate_item_pace(entries, item.id, now, config=cfg)
    if not pace.available:
        result.insufficient_data = True
        return result

    days = calendar_days_for(remaining, pace.pace_per_calendar_day)
    percent = result.consumption_percent
    result.pace = pace.pace_per_calendar_day
    result.days_to_exceed = days
    result.projected_exceed_date = now + timedelta(days=days)
    result.is_critical = (
        days < cfg.critical_horizon_days and percent > cfg.item_alert_consumption_pct
    )
    result.is_warning = (
        days < cfg.warning_horizon_days
        and percent > cfg.item_alert_consumption_pct
        and not result.is_critical
    )
    return result


def project_items(
    items: Sequence[WorkItemBudget],
    entries: Sequence[TimeEntry],
    now: datetime,
    config: Optional[Config] = None,
) -> List[ItemProjection]:
    cfg = config or get_config()
    return [project_item(item, entries, now, config=cfg) for item in items]


def reconcile_overage(
    items: Sequence[ItemProjection],
    estimated_work_days: float,
    consumed: float,
    pace: PaceEstimate,
    now: datetime,
    deadline: Optional[date] = None,
) -> float:
    """
    Projected overage in work-days.

    The larger of the overage already realised on exceeded items and the
    budget that cannot be consumed before the deadline at the current pace.
    """
    actual = sum(item.exceeded_by for item in items if item.exceeded)
    if deadline is None or not pace.available:
        return actual

    days_to_deadline = max(0, (deadline - now.date()).days)
    capacity = days_to_deadline * pace.pace_per_calendar_day
    budget_remaining = estimated_work_days - consumed
    deadline_overage = max(0.0, budget_remaining - capacity)
    return max(actual, deadline_overage)
