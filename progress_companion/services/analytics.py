"""Analytics dashboard: metric series, body composition, nutrition, training.

Carb timing, fat quality, recovery, sleep and stress scores are not derived
from any data and are reported as None.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional
from zoneinfo import ZoneInfo

from progress_companion.core.enums import MetricType, Trend
from progress_companion.services.aggregation import (
    UTC,
    NutritionTotals,
    bucket_by_day,
    daily_averages,
    filter_window,
    last_two,
    trailing_window,
    values_of,
)
from progress_companion.services.change import ChangeResult, compute_series_change
from progress_companion.services.evolution import EvolutionPoint, load_evolution
from progress_companion.services.policy import AnalyticsPolicy
from progress_companion.services.records import FoodLogEntry, Sample, UserContext, WorkoutSummary
from progress_companion.services.trends import classify_recent_trend, classify_trend, percent_change

if TYPE_CHECKING:
    from progress_companion.services.stores import SampleStore

RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_RANGE_DAYS = 30
COMPOSITION_WINDOW_DAYS = 30

# Query-string names used by the dashboard -> stored metric type
METRIC_ALIASES = {
    "bodyFat": MetricType.BODY_FAT,
    "leanMass": MetricType.LEAN_MASS,
}


def resolve_range(range_key: Optional[str]) -> int:
    return RANGE_DAYS.get(range_key or "", DEFAULT_RANGE_DAYS)


def resolve_metric(name: Optional[str]) -> MetricType:
    """Dashboard alias or stored metric name; unknown names fall back to weight."""
    if not name:
        return MetricType.WEIGHT
    if name in METRIC_ALIASES:
        return METRIC_ALIASES[name]
    try:
        return MetricType(name)
    except ValueError:
        return MetricType.WEIGHT


@dataclass(frozen=True)
class MetricPair:
    current: Optional[float] = None
    previous: Optional[float] = None

    @property
    def change(self) -> Optional[float]:
        if self.current is None or self.previous is None:
            return None
        return self.current - self.previous


@dataclass(frozen=True)
class BodyCompositionSnapshot:
    weight: MetricPair = field(default_factory=MetricPair)
    body_fat: MetricPair = field(default_factory=MetricPair)
    lean_mass: MetricPair = field(default_factory=MetricPair)


@dataclass(frozen=True)
class NutritionSummary:
    avg_calories: int = 0
    avg_protein: int = 0
    avg_carbs: int = 0
    avg_fat: int = 0
    days_logged: int = 0
    caloric_balance_score: int = 0
    protein_score: int = 0
    metabolic_stability: int = 0
    carb_timing_score: Optional[int] = None
    fat_quality_score: Optional[int] = None


@dataclass(frozen=True)
class TrainingSummary:
    total_workouts: int = 0
    total_volume: int = 0
    total_duration: int = 0
    avg_workout_duration: int = 0
    volume_trend: Trend = Trend.STABLE
    volume_score: float = 0.0
    recovery_score: Optional[int] = None
    sleep_score: Optional[int] = None
    stress_score: Optional[int] = None


@dataclass(frozen=True)
class AnalyticsReport:
    metric: MetricType
    range_days: int
    graph_data: list[Sample]
    trend: Trend
    recent_trend: Trend
    percent_change: float
    change: Optional[ChangeResult]
    body_composition: BodyCompositionSnapshot
    nutrition: NutritionSummary
    training: TrainingSummary
    evolution: list[EvolutionPoint]


def _pair(samples: list[Sample]) -> MetricPair:
    current, previous = last_two(samples)
    return MetricPair(
        current=current.value if current else None,
        previous=previous.value if previous else None,
    )


def caloric_balance_score(avg_calories: float, target: float) -> float:
    """100 on target, losing 50 points per 100% deviation, clamped to [0, 100]."""
    if target <= 0:
        return 0.0
    return min(100.0, max(0.0, 100 - abs(avg_calories - target) / target * 50))


def protein_score(avg_protein: float, target: float) -> float:
    if target <= 0:
        return 0.0
    return min(100.0, avg_protein / target * 100)


def summarize_nutrition(
    entries: list[FoodLogEntry],
    policy: AnalyticsPolicy = AnalyticsPolicy(),
    tz: ZoneInfo = UTC,
) -> NutritionSummary:
    buckets = bucket_by_day(entries, tz)
    avg: NutritionTotals = daily_averages(buckets)
    balance = caloric_balance_score(avg.calories, policy.calorie_target) if buckets else 0.0
    protein = protein_score(avg.protein, policy.protein_target)
    return NutritionSummary(
        avg_calories=round(avg.calories),
        avg_protein=round(avg.protein),
        avg_carbs=round(avg.carbs),
        avg_fat=round(avg.fat),
        days_logged=len(buckets),
        caloric_balance_score=round(balance),
        protein_score=round(protein),
        metabolic_stability=round((balance + protein) / 2),
    )


def summarize_training(workouts: list[WorkoutSummary], policy: AnalyticsPolicy = AnalyticsPolicy()) -> TrainingSummary:
    total = len(workouts)
    volume = sum(w.total_volume for w in workouts)
    duration = sum(w.duration_minutes for w in workouts)
    volumes = [w.total_volume for w in sorted(workouts, key=lambda w: w.started_at)]
    return TrainingSummary(
        total_workouts=total,
        total_volume=round(volume),
        total_duration=round(duration),
        avg_workout_duration=round(duration / total) if total else 0,
        volume_trend=classify_trend(volumes, policy.trend_threshold_pct),
        volume_score=min(100.0, volume / 100),
    )


def build_report(
    ctx: UserContext,
    metric: MetricType,
    range_days: int,
    series: list[Sample],
    composition: dict[MetricType, list[Sample]],
    food: list[FoodLogEntry],
    workouts: list[WorkoutSummary],
    evolution: list[EvolutionPoint],
    policy: AnalyticsPolicy = AnalyticsPolicy(),
    tz: ZoneInfo = UTC,
) -> AnalyticsReport:
    """Assemble the dashboard from already-fetched data."""
    ordered = sorted(series, key=lambda s: s.captured_at)
    values = values_of(ordered)
    return AnalyticsReport(
        metric=metric,
        range_days=range_days,
        graph_data=ordered,
        trend=classify_trend(values, policy.trend_threshold_pct),
        recent_trend=classify_recent_trend(values, threshold_pct=policy.trend_threshold_pct),
        percent_change=percent_change(values),
        change=compute_series_change(ordered, ctx.goal, policy.direction_threshold),
        body_composition=BodyCompositionSnapshot(
            weight=_pair(composition.get(MetricType.WEIGHT, [])),
            body_fat=_pair(composition.get(MetricType.BODY_FAT, [])),
            lean_mass=_pair(composition.get(MetricType.LEAN_MASS, [])),
        ),
        nutrition=summarize_nutrition(food, policy, tz),
        training=summarize_training(workouts, policy),
        evolution=evolution,
    )


async def load_report(
    ctx: UserContext,
    store: "SampleStore",
    metric: MetricType = MetricType.WEIGHT,
    range_days: int = DEFAULT_RANGE_DAYS,
    policy: AnalyticsPolicy = AnalyticsPolicy(),
    tz: ZoneInfo = UTC,
) -> AnalyticsReport:
    """Issue every independent read concurrently, then build the report."""
    window = trailing_window(ctx.now, range_days)
    composition_window = trailing_window(ctx.now, COMPOSITION_WINDOW_DAYS)
    composition_metrics = (MetricType.WEIGHT, MetricType.BODY_FAT, MetricType.LEAN_MASS)
    series, food, workouts, evolution, *composition = await asyncio.gather(
        store.find_samples(ctx.user_id, metric, window),
        store.find_food_entries(ctx.user_id, window),
        store.find_workouts(ctx.user_id, window),
        load_evolution(store, ctx),
        *(store.find_samples(ctx.user_id, m, composition_window) for m in composition_metrics),
    )
    return build_report(
        ctx,
        metric,
        range_days,
        filter_window(series, window),
        dict(zip(composition_metrics, composition)),
        food,
        workouts,
        evolution,
        policy,
        tz,
    )
