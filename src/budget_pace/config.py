"""
Configuration module for the budget-pace engine.

Single source of truth for:
- Pace / projection / classification thresholds
- Azure connection settings for the ledger loaders
- The package logger

All values can be overridden via environment variables (prefix ``BP_``).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
import logging
import os
from typing import Optional


LOGGER_NAME = "budget_pace"
ENV_PREFIX = "BP_"


def get_logger() -> logging.Logger:
    """Create or return the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def _get_env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class Config:
    """
    Runtime configuration for the budget-pace engine.

    Defaults reproduce the reference behavior; every threshold can be
    overridden programmatically (``Config(warning_horizon_days=10)``) or
    through ``BP_<FIELD_NAME>`` environment variables.
    """

    # Unit conversion
    work_day_seconds: int = 28800

    # Pace windows
    recent_days_window: int = 7
    recent_sessions_window: int = 5
    min_window_entries: int = 2
    global_pace_epsilon: float = 0.0
    item_pace_epsilon: float = 0.001
    # Measure the window span up to ``now`` instead of the newest entry.
    span_through_now: bool = True

    # Per-item horizons (calendar days) and alert gate (% consumed)
    critical_horizon_days: int = 3
    warning_horizon_days: int = 7
    item_alert_consumption_pct: float = 50.0

    # Trajectory overage ratios (fraction of the total budget)
    overage_warning_ratio: float = 0.10
    overage_critical_ratio: float = 0.20

    # Recommendation rules
    drift_warning_pct: float = 80.0
    imminent_remaining_days: float = 2.0
    ahead_of_schedule_pct: float = 50.0
    uncategorized_share: float = 0.20
    max_named_items: int = 2

    # Azure Blob Storage for the ledger loaders
    azure_blob_connection_string: Optional[str] = None
    azure_blob_container_name: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Config":
        """
        Construct a Config object by reading environment variables.

        Each field maps to ``BP_`` + the upper-cased field name, e.g.
        ``BP_RECENT_DAYS_WINDOW=14`` or ``BP_SPAN_THROUGH_NOW=false``.
        Unparsable values keep the default.
        """
        values = {}
        for f in fields(cls):
            name = ENV_PREFIX + f.name.upper()
            default = f.default
            if f.type in ("bool", bool):
                values[f.name] = _get_env_bool(name, default)
            elif f.type in ("int", int):
                values[f.name] = _get_env_int(name, default)
            elif f.type in ("float", float):
                values[f.name] = _get_env_float(name, default)
            else:
                values[f.name] = os.getenv(name, default)
        return cls(**values)


# Convenience singleton-style accessor if you want a shared config
_DEFAULT_CONFIG: Optional[Config] = None


def get_config(force_reload: bool = False) -> Config:
    """
    Return a process-wide Config instance.

    Use `force_reload=True` if environment variables changed at runtime
    and you want to refresh.
    """
    global _DEFAULT_CONFIG
    if _DEFAULT_CONFIG is None or force_reload:
        _DEFAULT_CONFIG = Config.from_env()
    return _DEFAULT_CONFIG
