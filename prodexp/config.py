"""TOML configuration loader for prodexp."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .analysis import AnalysisThresholds, NotificationThresholds

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_DB_PATH = "~/.config/prodexp/products.db"


@dataclass
class DatabaseConfig:
    path: str = DEFAULT_DB_PATH


@dataclass
class AnalysisConfig:
    urgent_days: int = 3
    fast_pace_ratio: float = 1.5

    def thresholds(self) -> AnalysisThresholds:
        return AnalysisThresholds(
            urgent_days=self.urgent_days,
            fast_pace_ratio=self.fast_pace_ratio,
        )


@dataclass
class NotificationConfig:
    daily_within_days: int = 7
    weekly_within_days: int = 30
    low_remaining: float = 2.0

    def thresholds(self) -> NotificationThresholds:
        return NotificationThresholds(
            daily_within_days=self.daily_within_days,
            weekly_within_days=self.weekly_within_days,
            low_remaining=self.low_remaining,
        )


@dataclass
class SchedulerConfig:
    recompute_schedule: str = "0 0 * * *"
    user_ids: list[str] = field(default_factory=list)  # empty: all users


@dataclass
class AppConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The database path can be overridden via PRODEXP_DB_PATH when the file
    leaves it unset.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    dbs = raw.get("database", {})
    ana = raw.get("analysis", {})
    ntf = raw.get("notifications", {})
    sch = raw.get("scheduler", {})

    # Resolve database path: config file → environment variable → default
    db_path = dbs.get("path", "") or os.environ.get("PRODEXP_DB_PATH", "") or DEFAULT_DB_PATH

    return AppConfig(
        database=DatabaseConfig(path=db_path),
        analysis=AnalysisConfig(
            urgent_days=ana.get("urgent_days", 3),
            fast_pace_ratio=ana.get("fast_pace_ratio", 1.5),
        ),
        notifications=NotificationConfig(
            daily_within_days=ntf.get("daily_within_days", 7),
            weekly_within_days=ntf.get("weekly_within_days", 30),
            low_remaining=ntf.get("low_remaining", 2.0),
        ),
        scheduler=SchedulerConfig(
            recompute_schedule=sch.get("recompute_schedule", "0 0 * * *"),
            user_ids=[str(u) for u in sch.get("user_ids", [])],
        ),
    )
