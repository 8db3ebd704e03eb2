"""Behavioral context snapshot stored alongside each scan."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, Optional

from progress_companion.core.constants import (
    BEHAVIOR_WINDOW_DAYS,
    WEIGHT_TREND_KG,
    WEIGHT_TREND_WINDOW_DAYS,
)
from progress_companion.core.enums import MetricType, Trend
from progress_companion.services.aggregation import trailing_window
from progress_companion.services.records import (
    BehavioralContext,
    FoodLogEntry,
    Sample,
    UserContext,
    WorkoutSummary,
)

if TYPE_CHECKING:
    from progress_companion.services.stores import SampleStore


def weekly_average(entries: Sequence[FoodLogEntry], attr: str, days: int = BEHAVIOR_WINDOW_DAYS) -> Optional[float]:
    """Sum over the window divided by its length in days; None when nothing was logged."""
    if not entries:
        return None
    return sum(getattr(e, attr) or 0 for e in entries) / days


def weight_trend(weights: Sequence[Sample], threshold_kg: float = WEIGHT_TREND_KG) -> Trend:
    """First vs last weight in absolute kg (not percent)."""
    if len(weights) < 2:
        return Trend.STABLE
    ordered = sorted(weights, key=lambda s: s.captured_at)
    change = ordered[-1].value - ordered[0].value
    if change > threshold_kg:
        return Trend.UP
    if change < -threshold_kg:
        return Trend.DOWN
    return Trend.STABLE


def behavioral_context(
    food_entries: Sequence[FoodLogEntry],
    weights: Sequence[Sample],
    workouts: Sequence[WorkoutSummary],
) -> BehavioralContext:
    return BehavioralContext(
        avg_calories=weekly_average(food_entries, "calories"),
        avg_protein=weekly_average(food_entries, "protein"),
        weight_trend=weight_trend(weights).value,
        training_volume=len(workouts),
    )


async def load_behavioral_context(store: "SampleStore", ctx: UserContext) -> BehavioralContext:
    week = trailing_window(ctx.now, BEHAVIOR_WINDOW_DAYS)
    month = trailing_window(ctx.now, WEIGHT_TREND_WINDOW_DAYS)
    food, weights, workouts = await asyncio.gather(
        store.find_food_entries(ctx.user_id, week),
        store.find_samples(ctx.user_id, MetricType.WEIGHT, month),
        store.find_workouts(ctx.user_id, week),
    )
    return behavioral_context(food, weights, workouts)
