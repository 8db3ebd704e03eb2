"""Tunable analytics thresholds, resolved from settings once per request."""

from __future__ import annotations

from dataclasses import dataclass

from progress_companion.core.config import Settings
from progress_companion.core.constants import (
    CALORIE_TARGET,
    DIRECTION_THRESHOLD,
    PROTEIN_TARGET,
    RAPID_CHANGE_DAYS,
    RAPID_CHANGE_POINTS,
    TREND_THRESHOLD_PCT,
)


@dataclass(frozen=True)
class AnalyticsPolicy:
    trend_threshold_pct: float = TREND_THRESHOLD_PCT
    direction_threshold: float = DIRECTION_THRESHOLD
    rapid_change_points: float = RAPID_CHANGE_POINTS
    rapid_change_days: int = RAPID_CHANGE_DAYS
    completeness_weight_window_days: int = 30
    calorie_target: float = CALORIE_TARGET
    protein_target: float = PROTEIN_TARGET

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalyticsPolicy":
        return cls(
            trend_threshold_pct=settings.trend_threshold_pct,
            direction_threshold=settings.direction_threshold,
            rapid_change_points=settings.rapid_change_points,
            rapid_change_days=settings.rapid_change_days,
            completeness_weight_window_days=settings.completeness_weight_window_days,
            calorie_target=settings.calorie_target,
            protein_target=settings.protein_target,
        )
