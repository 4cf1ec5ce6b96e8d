"""
Recommendation generator.

A fixed, ordered table of threshold rules evaluated against the current
consumption and projection state. Rules are independent; each one that
matches contributes a single Recommendation. Only the item-risk rule
cascades internally (critical, then warning, then "good trajectory").
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .config import Config, get_config
from .schema import (
    ConsumptionSummary,
    GlobalProjection,
    ItemProjection,
    PaceEstimate,
    Recommendation,
)


IMMEDIATE = "immediate"
ADJUSTMENT = "adjustment"
LEARNING = "learning"

INFO = "info"
WARNING = "warning"
CRITICAL = "critical"


@dataclass
class RuleContext:
    consumption: ConsumptionSummary
    pace: PaceEstimate
    projection: GlobalProjection
    items: Sequence[ItemProjection]
    config: Config

    @property
    def has_budget(self) -> bool:
        return self.consumption.consumption_percent is not None


def _fmt_days(value: float) -> str:
    return f"{value:.1f} d"


def _name_items(items: Sequence[ItemProjection], limit: int) -> str:
    names = [item.label or item.work_item_id for item in items[:limit]]
    extra = len(items) - len(names)
    text = ", ".join(names)
    if extra > 0:
        text += f" (+{extra} more)"
    return text


# --- Rules -------------------------------------------------------------------


def drift_anticipation(ctx: RuleContext) -> Optional[Recommendation]:
    pct = ctx.consumption.consumption_percent
    if not ctx.has_budget or not (ctx.config.drift_warning_pct <= pct < 100):
        return None
    return Recommendation(
        id="drift-anticipation",
        horizon=IMMEDIATE,
        severity=WARNING,
        title="Anticipate budget drift",
        description=(
            f"{pct:.0f}% of the time budget is consumed. Review the remaining "
            "scope with the client before the budget runs out."
        ),
    )


def imminent_overflow(ctx: RuleContext) -> Optional[Recommendation]:
    remaining = ctx.consumption.remaining_work_days
    if not ctx.has_budget or not (0 <= remaining < ctx.config.imminent_remaining_days):
        return None
    return Recommendation(
        id="imminent-overflow",
        horizon=IMMEDIATE,
        severity=CRITICAL,
        title="Budget overflow imminent",
        description=(
            f"Only {_fmt_days(remaining)} of budget left. Decide now whether to "
            "extend the budget or freeze the scope."
        ),
    )


def budget_exceeded(ctx: RuleContext) -> Optional[Recommendation]:
    pct = ctx.consumption.consumption_percent
    if not ctx.has_budget or pct <= 100:
        return None
    return Recommendation(
        id="budget-exceeded",
        horizon=IMMEDIATE,
        severity=CRITICAL,
        title="Time budget exceeded",
        description=(
            f"The time budget is exceeded by {pct - 100:.0f}%. Renegotiate the "
            "budget or bill the additional work."
        ),
    )


def ahead_of_schedule(ctx: RuleContext) -> Optional[Recommendation]:
    pct = ctx.consumption.consumption_percent
    if not ctx.has_budget or not (0 < pct < ctx.config.ahead_of_schedule_pct):
        return None
    return Recommendation(
        id="ahead-of-schedule",
        horizon=LEARNING,
        severity=INFO,
        title="Ahead of schedule",
        description=(
            f"Only {pct:.0f}% of the budget is consumed. Note what worked well "
            "to sharpen future estimates."
        ),
    )


def item_imbalance(ctx: RuleContext) -> Optional[Recommendation]:
    over = [
        item
        for item in ctx.items
        if item.consumption_percent is not None and item.consumption_percent > 100
    ]
    if not over:
        return None
    return Recommendation(
        id="item-imbalance",
        horizon=ADJUSTMENT,
        severity=WARNING,
        title="Unbalanced scope items",
        description=(
            f"Over budget: {_name_items(over, ctx.config.max_named_items)}. "
            "Rebalance the estimates across the remaining items."
        ),
    )


def uncategorized_time(ctx: RuleContext) -> Optional[Recommendation]:
    share = ctx.consumption.uncategorized_percent
    if share <= ctx.config.uncategorized_share * 100:
        return None
    return Recommendation(
        id="uncategorized-time",
        horizon=ADJUSTMENT,
        severity=INFO,
        title="Uncategorized time",
        description=(
            f"{share:.0f}% of logged time is not attached to a scope item. "
            "Attribute sessions to items to improve per-item projections."
        ),
    )


BASE_RULES: List[Callable[[RuleContext], Optional[Recommendation]]] = [
    drift_anticipation,
    imminent_overflow,
    budget_exceeded,
    ahead_of_schedule,
    item_imbalance,
    uncategorized_time,
]


def item_risk(ctx: RuleContext, base_fired: bool) -> Optional[Recommendation]:
    """Critical items, else warning items, else a "good trajectory" note."""
    if not ctx.pace.available or ctx.projection.already_exceeded:
        return None

    limit = ctx.config.max_named_items
    critical = [item for item in ctx.items if item.is_critical]
    if critical:
        return Recommendation(
            id="item-critical",
            horizon=IMMEDIATE,
            severity=CRITICAL,
            title="Scope items about to overflow",
            description=(
                f"At the current pace, {_name_items(critical, limit)} will exceed "
                f"their estimate within {ctx.config.critical_horizon_days} days."
            ),
        )

    warning = [item for item in ctx.items if item.is_warning]
    if warning:
        return Recommendation(
            id="item-warning",
            horizon=ADJUSTMENT,
            severity=WARNING,
            title="Scope items at risk",
            description=(
                f"At the current pace, {_name_items(warning, limit)} will exceed "
                f"their estimate within {ctx.config.warning_horizon_days} days."
            ),
        )

    end_date = ctx.projection.estimated_end_date
    if not base_fired and ctx.consumption.consumed_work_days > 0 and end_date is not None:
        return Recommendation(
            id="good-trajectory",
            horizon=LEARNING,
            severity=INFO,
            title="Good trajectory",
            description=(
                "At the current pace the budget will be consumed around "
                f"{end_date.date().isoformat()}."
            ),
        )
    return None


def generate_recommendations(
    consumption: ConsumptionSummary,
    pace: PaceEstimate,
    projection: GlobalProjection,
    items: Sequence[ItemProjection],
    config: Optional[Config] = None,
) -> List[Recommendation]:
    ctx = RuleContext(
        consumption=consumption,
        pace=pace,
        projection=projection,
        items=items,
        config=config or get_config(),
    )
    recommendations = [rec for rec in (rule(ctx) for rule in BASE_RULES) if rec]
    risk = item_risk(ctx, base_fired=bool(recommendations))
    if risk:
        recommendations.append(risk)
    return recommendations
