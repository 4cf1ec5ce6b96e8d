"""
Data schemas for the budget-pace engine.

Defines:
- TimeEntry: a logged work session from the time ledger
- WorkItemBudget: a budgeted unit of scope (estimated work-days)
- AnalysisRequest: one engine invocation snapshot
- Result records returned by the pipeline, each with a ``to_dict()`` that
  produces the camelCase JSON contract consumed by callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional


@dataclass
class TimeEntry:
    """
    A logged work session.

    ``duration_seconds`` left as None means the session is still open,
    unless ``end_time`` is known, in which case the duration is derived
    from it. ``work_item_id`` None means "uncategorized".
    """

    id: str
    start_time: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    work_item_id: Optional[str] = None
    end_time: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.id = str(self.id)
        if self.work_item_id is not None:
            self.work_item_id = str(self.work_item_id) or None
        if self.duration_seconds is None and self.start_time and self.end_time:
            start, end = self.start_time, self.end_time
            # a naive end is read in the start's zone, and vice versa
            if start.tzinfo is not None and end.tzinfo is None:
                end = end.replace(tzinfo=start.tzinfo)
            elif start.tzinfo is None and end.tzinfo is not None:
                start = start.replace(tzinfo=end.tzinfo)
            self.duration_seconds = int((end - start).total_seconds())
        if self.duration_seconds is not None:
            self.duration_seconds = int(self.duration_seconds)


@dataclass
class WorkItemBudget:
    """One budgeted scope item. A work-day is 8 hours of logged time."""

    id: str
    label: str = ""
    estimated_work_days: float = 0.0

    def __post_init__(self) -> None:
        self.id = str(self.id)
        self.estimated_work_days = float(self.estimated_work_days or 0.0)


@dataclass
class AnalysisRequest:
    project_id: Optional[str]
    now: datetime
    estimated_work_days: float = 0.0
    time_entries: List[TimeEntry] = field(default_factory=list)
    work_items: List[WorkItemBudget] = field(default_factory=list)
    deadline: Optional[date] = None


# --- Results -----------------------------------------------------------------


@dataclass
class ConsumptionSummary:
    consumed_work_days: float
    estimated_work_days: float
    remaining_work_days: Optional[float]
    consumption_percent: Optional[float]
    uncategorized_percent: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "consumedWorkDays": self.consumed_work_days,
            "estimatedWorkDays": self.estimated_work_days,
            "remainingWorkDays": self.remaining_work_days,
            "consumptionPercent": self.consumption_percent,
            "uncategorizedPercent": self.uncategorized_percent,
        }


@dataclass
class PaceEstimate:
    """
    Recent work-rate in work-days per calendar day.

    When ``available`` is False, ``reason`` explains why and the rate
    fields are None.
    """

    available: bool
    pace_per_calendar_day: Optional[float] = None
    window_label: Optional[str] = None
    reason: Optional[str] = None
    entry_count: int = 0
    calendar_span: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"available": self.available}
        if self.available:
            out["pacePerCalendarDay"] = self.pace_per_calendar_day
            out["windowLabel"] = self.window_label
        else:
            out["reason"] = self.reason
        return out


@dataclass
class GlobalProjection:
    available: bool
    already_exceeded: bool = False
    exceeded_by: Optional[float] = None
    estimated_end_date: Optional[datetime] = None
    calendar_days_needed: Optional[int] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"available": self.available}
        if self.already_exceeded:
            out["alreadyExceeded"] = True
            out["exceededBy"] = self.exceeded_by
        elif self.available:
            out["alreadyExceeded"] = False
            out["estimatedEndDate"] = self.estimated_end_date.isoformat()
            out["calendarDaysNeeded"] = self.calendar_days_needed
        else:
            out["reason"] = self.reason
        return out


@dataclass
class ItemProjection:
    work_item_id: str
    label: str
    estimated_work_days: float
    consumed_work_days: float
    consumption_percent: Optional[float]
    applicable: bool = True
    exceeded: bool = False
    exceeded_by: Optional[float] = None
    insufficient_data: bool = False
    is_critical: bool = False
    is_warning: bool = False
    days_to_exceed: Optional[int] = None
    projected_exceed_date: Optional[datetime] = None
    pace: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "workItemId": self.work_item_id,
            "label": self.label,
            "consumptionPercent": self.consumption_percent,
            "applicable": self.applicable,
            "exceeded": self.exceeded,
            "insufficientData": self.insufficient_data,
        }
        if self.exceeded:
            out["exceededBy"] = self.exceeded_by
        if self.days_to_exceed is not None:
            out["isCritical"] = self.is_critical
            out["isWarning"] = self.is_warning
            out["daysToExceed"] = self.days_to_exceed
            out["projectedExceedDate"] = self.projected_exceed_date.isoformat()
        return out


@dataclass
class Recommendation:
    id: str
    horizon: str  # immediate | adjustment | learning
    severity: str  # info | warning | critical
    title: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "horizon": self.horizon,
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
        }


@dataclass
class TimeHealth:
    """Time-respect axis of the project health score (0..20 points)."""

    has_time_data: bool
    time_overrun_percent: float
    time_score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasTimeData": self.has_time_data,
            "timeOverrunPercent": self.time_overrun_percent,
            "timeScore": self.time_score,
        }


@dataclass
class AnalysisResult:
    project_id: Optional[str]
    now: datetime
    consumption: ConsumptionSummary
    pace: PaceEstimate
    projection: GlobalProjection
    per_item: List[ItemProjection]
    projected_overage: float
    trajectory: str
    recommendations: List[Recommendation]
    health: TimeHealth

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectId": self.project_id,
            "now": self.now.isoformat(),
            "consumption": self.consumption.to_dict(),
            "pace": self.pace.to_dict(),
            "projection": self.projection.to_dict(),
            "perItem": [item.to_dict() for item in self.per_item],
            "projectedOverage": self.projected_overage,
            "trajectory": self.trajectory,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "health": self.health.to_dict(),
        }
