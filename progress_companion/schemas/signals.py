"""Signal composer Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel

from progress_companion.core.enums import Effort


class RecommendedInputRead(BaseModel):
    rank: int
    type: str
    description: str
    confidence_improvement: int
    effort: Effort
    action: str
    rationale: str


class DataQualityRead(BaseModel):
    score: int
    level: str


class SignalsResponse(BaseModel):
    recommended_inputs: list[RecommendedInputRead]
    total_potential_improvement: int
    data_quality: DataQualityRead
