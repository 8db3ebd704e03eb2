"""Confidence and data-completeness scoring for vision-model estimates.

Vision output is noisy, so nothing here rejects input: every numeric field is
clamped to policy bounds, and missing or non-finite values fall back to
conservative defaults.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

from progress_companion.core.constants import (
    BODY_FAT_CEILING,
    BODY_FAT_FLOOR,
    CONFIDENCE_BASE_WEIGHT,
    CONFIDENCE_CEILING,
    CONFIDENCE_COMPLETENESS_WEIGHT,
    CONFIDENCE_FLOOR,
    DEFAULT_BODY_FAT_MIN,
    DEFAULT_BODY_FAT_SPREAD,
    DEFAULT_CONFIDENCE,
    DEFAULT_PHOTO_QUALITY,
    PROFILE_FIELD_WEIGHT,
    RECENT_WEIGHT_BONUS,
)
from progress_companion.core.enums import ConfidenceTier
from progress_companion.services.records import UserProfileSnapshot

PROFILE_FIELDS = ("height_cm", "birth_date", "biological_sex", "primary_goal", "activity_level")

# (lower bound inclusive, tier), checked from the top
CONFIDENCE_TIERS: tuple[tuple[float, ConfidenceTier], ...] = (
    (70, ConfidenceTier.GOOD),
    (50, ConfidenceTier.MODERATE),
    (float("-inf"), ConfidenceTier.LOW),
)


@dataclass(frozen=True)
class ScanEstimate:
    """Vision-model estimate after clamping."""

    body_fat_min: int
    body_fat_max: int
    confidence: float
    photo_clarity: float
    lighting_quality: float
    pose_quality: float
    observations: Optional[str] = None
    definition: Optional[float] = None
    muscle_fullness: Optional[float] = None

    @property
    def body_fat_mid(self) -> float:
        return (self.body_fat_min + self.body_fat_max) / 2


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up (76.5 -> 77), unlike round()."""
    return math.floor(value + 0.5)


def _number(value: Any) -> Optional[float]:
    """Finite, non-zero number or None. Zero counts as missing, as the model never means 0%."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number == 0:
        return None
    return number


def data_completeness(profile: Optional[UserProfileSnapshot], has_recent_weight: bool) -> float:
    """Fraction of calibration context available, in [0, 1].

    Each present profile field adds 0.2 (the profile counts as one factor), a
    recent weight adds 0.3, and the sum is normalized by (factors + 1).
    """
    score = 0.0
    factors = 0
    if profile is not None:
        factors += 1
        for name in PROFILE_FIELDS:
            if getattr(profile, name) is not None:
                score += PROFILE_FIELD_WEIGHT
    if has_recent_weight:
        score += RECENT_WEIGHT_BONUS
    return _clamp(score / (factors + 1), 0.0, 1.0)


def adjust_confidence(raw_confidence: float, completeness: float) -> int:
    """Scale confidence by completeness: 70% of raw at none, 100% at full."""
    completeness = _clamp(completeness, 0.0, 1.0)
    return round_half_up(raw_confidence * (CONFIDENCE_BASE_WEIGHT + completeness * CONFIDENCE_COMPLETENESS_WEIGHT))


def clamp_body_fat(raw_min: Any, raw_max: Any) -> tuple[int, int]:
    """Clamp a body fat range to [5, 40] with min <= max. Idempotent."""
    low = _number(raw_min)
    body_fat_min = int(_clamp(round_half_up(low if low is not None else DEFAULT_BODY_FAT_MIN), BODY_FAT_FLOOR, BODY_FAT_CEILING))
    high = _number(raw_max)
    if high is None:
        high = body_fat_min + DEFAULT_BODY_FAT_SPREAD
    body_fat_max = int(max(body_fat_min, min(BODY_FAT_CEILING, round_half_up(high))))
    return body_fat_min, body_fat_max


def clamp_confidence(raw: Any) -> float:
    value = _number(raw)
    return _clamp(value if value is not None else DEFAULT_CONFIDENCE, CONFIDENCE_FLOOR, CONFIDENCE_CEILING)


def _quality(raw: Any) -> float:
    value = _number(raw)
    return _clamp(value if value is not None else DEFAULT_PHOTO_QUALITY, 0, 100) / 100


def _score(raw: Any) -> Optional[float]:
    value = _number(raw)
    return _clamp(value, 0, 100) if value is not None else None


def clamp_scan_estimate(payload: dict[str, Any]) -> ScanEstimate:
    """Turn a parsed vision payload into a ScanEstimate within policy bounds."""
    body_fat_min, body_fat_max = clamp_body_fat(payload.get("bodyFatMin"), payload.get("bodyFatMax"))
    observations = payload.get("observations")
    return ScanEstimate(
        body_fat_min=body_fat_min,
        body_fat_max=body_fat_max,
        confidence=clamp_confidence(payload.get("confidence")),
        photo_clarity=_quality(payload.get("photoQuality")),
        lighting_quality=_quality(payload.get("lightingQuality")),
        pose_quality=_quality(payload.get("poseAlignment")),
        observations=observations if isinstance(observations, str) and observations.strip() else None,
        definition=_score(payload.get("definition")),
        muscle_fullness=_score(payload.get("muscleFullness")),
    )


def confidence_tier(confidence: float) -> ConfidenceTier:
    for lower, tier in CONFIDENCE_TIERS:
        if confidence >= lower:
            return tier
    return ConfidenceTier.LOW


def estimate_lean_mass(weight_kg: Optional[float], body_fat_min: float, body_fat_max: float) -> tuple[Optional[float], Optional[float]]:
    """Lean mass range from a weight and a body fat range; (None, None) without weight."""
    if not weight_kg:
        return None, None
    return (
        round(weight_kg * (1 - body_fat_max / 100), 1),
        round(weight_kg * (1 - body_fat_min / 100), 1),
    )
