"""Body-composition scan Pydantic schemas: create, read, history, comparison."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from progress_companion.core.enums import ChangeDirection, GoalAlignment, NumericDirection


class ScanCreate(BaseModel):
    front_photo_url: str = Field(..., min_length=1, description="Front view photo URL (required)")
    side_photo_url: Optional[str] = None
    back_photo_url: Optional[str] = None
    lighting: str = Field("moderate", description="Photo lighting: poor, moderate, good")
    clothing: str = Field("light", description="Clothing worn in the photo")
    fasted_state: Optional[bool] = None
    time_of_day: Optional[str] = None


class BehavioralContextRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    avg_calories: Optional[float] = None
    avg_protein: Optional[float] = None
    weight_trend: Optional[str] = None
    training_volume: Optional[int] = None


class ScanRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
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
    behavior: BehavioralContextRead


class ProvenanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    source: str
    method: str
    model_name: Optional[str] = None
    data_points_used: list[str] = []


class InsightRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    text: str
    confidence: float
    direction: ChangeDirection
    goal_alignment: GoalAlignment
    provenance: ProvenanceRead


class ScanCreateResponse(BaseModel):
    scan: ScanRead
    insight: InsightRead
    disclaimer: str


# ── History ──────────────────────────────────────────────────────────────

class TrendPointRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime
    value: float
    confidence: float


class HistoryTrendsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    body_fat_trend: list[TrendPointRead]
    avg_change: float
    direction: ChangeDirection


class MonthlySummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period: str
    scan_count: int
    body_fat_change: float
    direction: str
    summary: str


class ScanHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    scans: list[ScanRead]
    trends: HistoryTrendsRead
    monthly_summary: Optional[MonthlySummaryRead] = None


# ── Comparison ───────────────────────────────────────────────────────────

class ChangeZoneRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    area: str
    direction: str
    confidence: int


class ScanComparisonResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    earlier: ScanRead
    later: ScanRead
    body_fat_change: float
    lean_mass_change: Optional[float] = None
    days_between: int
    weekly_rate: float
    direction: NumericDirection
    goal_direction: ChangeDirection
    rapid_change_detected: bool
    insight: str
    change_zones: list[ChangeZoneRead] = []
