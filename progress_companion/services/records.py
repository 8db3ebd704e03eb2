"""Plain records passed into and out of the analytics engine.

No framework types cross this boundary: stores convert ORM rows into these
dataclasses, routes convert results into Pydantic response schemas.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from progress_companion.core.enums import Goal, MetricType, SampleSource


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive [start, end] time range."""

    start: datetime
    end: datetime

    def contains(self, at: datetime) -> bool:
        return self.start <= at <= self.end


@dataclass(frozen=True)
class Sample:
    metric: MetricType
    value: float
    captured_at: datetime
    unit: str = "kg"
    source: SampleSource = SampleSource.MANUAL
    confidence: float = 1.0


@dataclass(frozen=True)
class FoodLogEntry:
    logged_at: datetime
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


@dataclass(frozen=True)
class WorkoutSummary:
    started_at: datetime
    duration_minutes: float = 0.0
    total_volume: float = 0.0


@dataclass(frozen=True)
class BehavioralContext:
    avg_calories: Optional[float] = None
    avg_protein: Optional[float] = None
    weight_trend: Optional[str] = None
    training_volume: Optional[int] = None


@dataclass(frozen=True)
class ScanRecord:
    """A persisted body-composition scan."""

    id: uuid.UUID
    captured_at: datetime
    body_fat_min: float
    body_fat_max: float
    body_fat_confidence: float
    lean_mass_min: Optional[float] = None
    lean_mass_max: Optional[float] = None
    body_fat_change: Optional[float] = None
    change_direction: Optional[str] = None
    ai_commentary: Optional[str] = None
    photo_clarity: Optional[float] = None
    lighting_quality: Optional[float] = None
    pose_quality: Optional[float] = None
    rapid_change_detected: bool = False
    safety_alert: Optional[str] = None
    data_completeness: Optional[float] = None
    front_photo_url: Optional[str] = None
    definition: Optional[float] = None
    muscle_fullness: Optional[float] = None
    behavior: BehavioralContext = field(default_factory=BehavioralContext)

    @property
    def body_fat_mid(self) -> float:
        return (self.body_fat_min + self.body_fat_max) / 2

    @property
    def lean_mass_mid(self) -> Optional[float]:
        """Midpoint of the lean mass range; a missing max falls back to min."""
        if not self.lean_mass_min:
            return None
        upper = self.lean_mass_max or self.lean_mass_min
        return (self.lean_mass_min + upper) / 2


@dataclass(frozen=True)
class UserProfileSnapshot:
    height_cm: Optional[float] = None
    birth_date: Optional[date] = None
    biological_sex: Optional[str] = None
    activity_level: Optional[str] = None
    primary_goal: Optional[Goal] = None


@dataclass(frozen=True)
class UserContext:
    """The single user, resolved once per request and passed explicitly."""

    user_id: uuid.UUID
    now: datetime
    profile: Optional[UserProfileSnapshot] = None

    @property
    def goal(self) -> Optional[Goal]:
        return self.profile.primary_goal if self.profile else None
