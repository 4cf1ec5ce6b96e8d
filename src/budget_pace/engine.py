"""
Analysis pipeline.

Validates a request snapshot and runs it through the calculators:

    consumption -> pace -> projection -> trajectory -> recommendations

Every call takes ``now`` from the request; nothing here reads the clock,
so identical requests produce identical results.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .config import Config, get_config, get_logger
from .consumption import resolve_estimated_work_days, summarize_consumption, time_health
from .pace import estimate_pace
from .projection import project_global, project_items, reconcile_overage
from .recommendations import generate_recommendations
from .schema import AnalysisRequest, AnalysisResult, TimeEntry, WorkItemBudget
from .trajectory import classify_trajectory


logger = get_logger()


class RequestValidationError(ValueError):
    """The request does not honour the input contract."""


# --- Parsing -----------------------------------------------------------------


def parse_datetime(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
    raise RequestValidationError(f"{field_name}: invalid timestamp {value!r}")


def parse_date(value: Any, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_datetime(value, field_name).date()


def _optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return parse_datetime(value, field_name)
    except RequestValidationError:
        # An unreadable start/end makes the entry malformed, not the request.
        return None


def _number(value: Any, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise RequestValidationError(f"{field_name}: not a number: {value!r}")
    if not math.isfinite(number):
        raise RequestValidationError(f"{field_name}: not a finite number: {value!r}")
    return number


def _entry_from_dict(raw: Mapping[str, Any], index: int) -> TimeEntry:
    if not isinstance(raw, Mapping):
        raise RequestValidationError(f"timeEntries[{index}]: expected an object")
    if raw.get("id") in (None, ""):
        raise RequestValidationError(f"timeEntries[{index}]: missing id")
    duration = raw.get("durationSeconds")
    if duration is not None:
        duration = int(_number(duration, f"timeEntries[{index}].durationSeconds"))
    return TimeEntry(
        id=raw["id"],
        work_item_id=raw.get("workItemId"),
        start_time=_optional_datetime(raw.get("startTime"), "startTime"),
        end_time=_optional_datetime(raw.get("endTime"), "endTime"),
        duration_seconds=duration,
    )


def _item_from_dict(raw: Mapping[str, Any], index: int) -> WorkItemBudget:
    if not isinstance(raw, Mapping):
        raise RequestValidationError(f"workItems[{index}]: expected an object")
    if raw.get("id") in (None, ""):
        raise RequestValidationError(f"workItems[{index}]: missing id")
    estimate = raw.get("estimatedWorkDays")
    return WorkItemBudget(
        id=raw["id"],
        label=raw.get("label") or "",
        estimated_work_days=(
            0.0
            if estimate is None
            else _number(estimate, f"workItems[{index}].estimatedWorkDays")
        ),
    )


def request_from_dict(payload: Mapping[str, Any]) -> AnalysisRequest:
    """
    Build an AnalysisRequest from the camelCase JSON contract.

    Example:
    {
      "projectId": "p-1",
      "now": "2024-03-10T12:00:00",
      "estimatedWorkDays": 10,
      "timeEntries": [{"id": "e1", "startTime": "...", "durationSeconds": 28800}],
      "workItems": [{"id": "w1", "label": "Design", "estimatedWorkDays": 4}],
      "deadline": "2024-04-01"
    }
    """
    if not isinstance(payload, Mapping):
        raise RequestValidationError("request must be an object")
    if payload.get("now") in (None, ""):
        raise RequestValidationError("now: required")

    entries = payload.get("timeEntries") or []
    items = payload.get("workItems") or []
    if not isinstance(entries, list) or not isinstance(items, list):
        raise RequestValidationError("timeEntries and workItems must be lists")

    estimate = payload.get("estimatedWorkDays")
    deadline = payload.get("deadline")
    request = AnalysisRequest(
        project_id=payload.get("projectId"),
        now=parse_datetime(payload["now"], "now"),
        estimated_work_days=0.0 if estimate is None else _number(estimate, "estimatedWorkDays"),
        time_entries=[_entry_from_dict(raw, i) for i, raw in enumerate(entries)],
        work_items=[_item_from_dict(raw, i) for i, raw in enumerate(items)],
        deadline=None if deadline in (None, "") else parse_date(deadline, "deadline"),
    )
    validate_request(request)
    return request


# --- Validation --------------------------------------------------------------


def validate_request(request: AnalysisRequest) -> None:
    """Raise RequestValidationError on contract violations."""
    if not isinstance(request.now, datetime):
        raise RequestValidationError("now: must be a datetime")
    estimate = request.estimated_work_days
    if estimate is not None and (not math.isfinite(estimate) or estimate < 0):
        raise RequestValidationError("estimatedWorkDays: must be a non-negative number")

    seen = set()
    for item in request.work_items:
        if item.estimated_work_days < 0 or not math.isfinite(item.estimated_work_days):
            raise RequestValidationError(
                f"workItems[{item.id}]: estimatedWorkDays must be non-negative"
            )
        if item.id in seen:
            raise RequestValidationError(f"workItems: duplicate id {item.id!r}")
        seen.add(item.id)

    for entry in request.time_entries:
        if not entry.id:
            raise RequestValidationError("timeEntries: entry without id")


def _align(value: Optional[datetime], now: datetime) -> Optional[datetime]:
    """
    Express ``value`` in ``now``'s zone so they compare and share calendar days.

    Naive values are read in ``now``'s zone. Against a naive ``now``, aware
    values become naive UTC.
    """
    if value is None:
        return None
    if now.tzinfo is None:
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    if value.tzinfo is None:
        return value.replace(tzinfo=now.tzinfo)
    return value.astimezone(now.tzinfo)


def _aligned_entries(entries: List[TimeEntry], now: datetime) -> List[TimeEntry]:
    return [
        replace(e, start_time=_align(e.start_time, now), end_time=_align(e.end_time, now))
        for e in entries
    ]


# --- Pipeline ----------------------------------------------------------------


def analyze(
    request: AnalysisRequest,
    config: Optional[Config] = None,
) -> AnalysisResult:
    """Run the full pipeline on one request snapshot."""
    cfg = config or get_config()
    validate_request(request)

    now = request.now
    entries = _aligned_entries(request.time_entries, now)
    estimated = resolve_estimated_work_days(request.work_items, request.estimated_work_days)
    deadline = request.deadline
    if isinstance(deadline, datetime):
        deadline = deadline.date()

    consumption = summarize_consumption(entries, estimated, config=cfg)
    pace = estimate_pace(entries, now, config=cfg)
    projection = project_global(estimated, consumption.consumed_work_days, pace, now)
    items = project_items(request.work_items, entries, now, config=cfg)
    overage = reconcile_overage(
        items,
        estimated,
        consumption.consumed_work_days,
        pace,
        now,
        deadline=deadline,
    )
    trajectory = classify_trajectory(pace, projection, items, overage, estimated, config=cfg)
    recommendations = generate_recommendations(consumption, pace, projection, items, config=cfg)

    logger.debug(
        "project %s: consumed=%.3f/%.3f pace=%s trajectory=%s recommendations=%d",
        request.project_id,
        consumption.consumed_work_days,
        estimated,
        pace.pace_per_calendar_day,
        trajectory,
        len(recommendations),
    )

    return AnalysisResult(
        project_id=request.project_id,
        now=now,
        consumption=consumption,
        pace=pace,
        projection=projection,
        per_item=items,
        projected_overage=overage,
        trajectory=trajectory,
        recommendations=recommendations,
        health=time_health(consumption),
    )


def analyze_payload(
    payload: Mapping[str, Any],
    config: Optional[Config] = None,
) -> Dict[str, Any]:
    """JSON-in, JSON-out convenience wrapper around ``analyze``."""
    return analyze(request_from_dict(payload), config=config).to_dict()
