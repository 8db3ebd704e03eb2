"""Analytics dashboard Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from progress_companion.core.enums import ChangeDirection, MetricType, NumericDirection, SampleSource, Trend


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ── Series ───────────────────────────────────────────────────────────────

class SampleRead(_FromAttributes):
    metric: MetricType
    value: float
    unit: str
    source: SampleSource
    confidence: float
    captured_at: datetime


class ChangeRead(BaseModel):
    change: float
    days: int
    weekly_rate: float
    numeric_direction: NumericDirection
    direction: ChangeDirection


# ── Body composition block ───────────────────────────────────────────────

class MetricPairRead(_FromAttributes):
    current: Optional[float] = None
    previous: Optional[float] = None
    change: Optional[float] = None


class BodyCompositionBlock(_FromAttributes):
    weight: MetricPairRead
    body_fat: MetricPairRead
    lean_mass: MetricPairRead


# ── Nutrition / training ─────────────────────────────────────────────────

class NutritionRead(_FromAttributes):
    avg_calories: int
    avg_protein: int
    avg_carbs: int
    avg_fat: int
    days_logged: int
    caloric_balance_score: int
    protein_score: int
    metabolic_stability: int
    carb_timing_score: Optional[int] = None
    fat_quality_score: Optional[int] = None


class TrainingRead(_FromAttributes):
    total_workouts: int
    total_volume: int
    total_duration: int
    avg_workout_duration: int
    volume_trend: Trend
    volume_score: float
    recovery_score: Optional[int] = None
    sleep_score: Optional[int] = None
    stress_score: Optional[int] = None


# ── Evolution ────────────────────────────────────────────────────────────

class EvolutionPointRead(_FromAttributes):
    month: datetime
    weight: Optional[float] = None
    body_fat: Optional[float] = None
    lean_mass: Optional[float] = None


class AnalyticsResponse(BaseModel):
    metric: MetricType
    range_days: int
    graph_data: list[SampleRead]
    trend: Trend
    recent_trend: Trend
    percent_change: float
    change: Optional[ChangeRead] = None
    body_composition: BodyCompositionBlock
    nutrition: NutritionRead
    training: TrainingRead
    evolution: list[EvolutionPointRead]
