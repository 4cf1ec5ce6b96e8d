"""Trajectory classifier: maps projection and consumption to a risk tier."""

from __future__ import annotations

from typing import Optional, Sequence

from .config import Config, get_config
from .schema import GlobalProjection, ItemProjection, PaceEstimate


UNKNOWN = "unknown"
EXCEEDED = "exceeded"
CRITICAL = "critical"
WARNING = "warning"
OK = "ok"

TRAJECTORIES = (UNKNOWN, EXCEEDED, CRITICAL, WARNING, OK)


def classify_trajectory(
    pace: PaceEstimate,
    projection: GlobalProjection,
    items: Sequence[ItemProjection],
    projected_overage: float,
    estimated_work_days: float,
    config: Optional[Config] = None,
) -> str:
    """
    First matching tier wins, in the order of ``TRAJECTORIES``.

    Overage ratios are only evaluated when a budget is configured.
    """
    cfg = config or get_config()
    if not pace.available:
        return UNKNOWN
    if projection.already_exceeded:
        return EXCEEDED

    ratio = projected_overage / estimated_work_days if estimated_work_days > 0 else 0.0
    if ratio > cfg.overage_critical_ratio or any(i.is_critical for i in items):
        return CRITICAL
    if ratio > cfg.overage_warning_ratio or any(i.is_warning for i in items):
        return WARNING
    return OK
