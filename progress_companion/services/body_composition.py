"""Body-composition scans: assessment of a new scan, history and comparison.

assess_scan, summarize_history and compare_scans are pure; create_scan does
the fetching (all reads up front, concurrently) and the single write.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Optional

from progress_companion.core.constants import CHANGE_ZONE_THRESHOLD, SUMMARY_WINDOW_DAYS
from progress_companion.core.enums import ChangeDirection, MetricType, NumericDirection
from progress_companion.services.behavior import load_behavioral_context
from progress_companion.services.change import ChangeResult, Observation, compute_change, goal_direction, numeric_direction
from progress_companion.services.confidence import (
    ScanEstimate,
    adjust_confidence,
    clamp_scan_estimate,
    data_completeness,
    estimate_lean_mass,
)
from progress_companion.services.narrative import (
    Insight,
    Provenance,
    build_insight,
    comparison_insight,
    monthly_summary,
    scan_commentary,
)
from progress_companion.services.policy import AnalyticsPolicy
from progress_companion.services.records import BehavioralContext, Sample, ScanRecord, UserContext
from progress_companion.services.safety import SafetyAssessment, detect_rapid_change, is_rapid_change
from progress_companion.services.vision import PhotoSet, build_scan_prompt
from progress_companion.services.vision_parsing import parse_model_json

if TYPE_CHECKING:
    from progress_companion.services.stores import SampleStore, ScanStore
    from progress_companion.services.vision import VisionProvider

logger = logging.getLogger(__name__)

VISION_PROVENANCE = Provenance(
    source="model",
    method="Vision estimate clamped and calibrated by profile completeness",
    model_name="Body Composition Vision",
    data_points_used=("progress_photo", "profile", "weight"),
)


# ── New scan ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ScanAssessment:
    estimate: ScanEstimate
    data_completeness: float
    adjusted_confidence: int
    lean_mass_min: Optional[float]
    lean_mass_max: Optional[float]
    change: Optional[ChangeResult]
    safety: SafetyAssessment
    commentary: str
    insight: Insight
    behavior: BehavioralContext = field(default_factory=BehavioralContext)

    @property
    def body_fat_change(self) -> Optional[float]:
        return self.change.change_display if self.change else None

    @property
    def change_direction(self) -> Optional[ChangeDirection]:
        return self.change.direction if self.change else None


def has_recent_weight(latest_weight: Optional[Sample], now: datetime, window_days: int) -> bool:
    return latest_weight is not None and latest_weight.captured_at >= now - timedelta(days=window_days)


def assess_scan(
    ctx: UserContext,
    payload: dict[str, Any],
    previous: Optional[ScanRecord],
    latest_weight: Optional[Sample],
    behavior: Optional[BehavioralContext] = None,
    policy: AnalyticsPolicy = AnalyticsPolicy(),
) -> ScanAssessment:
    """Everything derived from one parsed vision payload."""
    estimate = clamp_scan_estimate(payload)
    completeness = data_completeness(
        ctx.profile,
        has_recent_weight(latest_weight, ctx.now, policy.completeness_weight_window_days),
    )
    confidence = adjust_confidence(estimate.confidence, completeness)
    lean_min, lean_max = estimate_lean_mass(
        latest_weight.value if latest_weight else None,
        estimate.body_fat_min,
        estimate.body_fat_max,
    )

    change = None
    if previous is not None:
        change = compute_change(
            Observation(previous.captured_at, previous.body_fat_mid),
            Observation(ctx.now, estimate.body_fat_mid),
            ctx.goal,
            policy.direction_threshold,
        )
    safety = detect_rapid_change(
        estimate.body_fat_mid,
        previous,
        ctx.now,
        policy.rapid_change_points,
        policy.rapid_change_days,
    )
    commentary = scan_commentary(
        estimate.body_fat_min,
        estimate.body_fat_max,
        confidence,
        estimate.observations,
        change.change if change else None,
        change.numeric_direction if change else None,
        ctx.goal,
    )
    return ScanAssessment(
        estimate=estimate,
        data_completeness=completeness,
        adjusted_confidence=confidence,
        lean_mass_min=lean_min,
        lean_mass_max=lean_max,
        change=change,
        safety=safety,
        commentary=commentary,
        insight=build_insight(commentary, confidence, change.direction if change else None, VISION_PROVENANCE),
        behavior=behavior or BehavioralContext(),
    )


def scan_fields(assessment: ScanAssessment, photos: PhotoSet, captured_at: datetime) -> dict[str, Any]:
    """Column values for persisting an assessed scan."""
    est = assessment.estimate
    behavior = assessment.behavior
    return {
        "captured_at": captured_at,
        "front_photo_url": photos.front_photo_url,
        "side_photo_url": photos.side_photo_url,
        "back_photo_url": photos.back_photo_url,
        "lighting": photos.lighting,
        "clothing": photos.clothing,
        "fasted_state": photos.fasted_state,
        "time_of_day": photos.time_of_day,
        "body_fat_min": est.body_fat_min,
        "body_fat_max": est.body_fat_max,
        "body_fat_confidence": assessment.adjusted_confidence,
        "lean_mass_min": assessment.lean_mass_min,
        "lean_mass_max": assessment.lean_mass_max,
        "lean_mass_confidence": assessment.adjusted_confidence if assessment.lean_mass_min is not None else None,
        "body_fat_change": assessment.body_fat_change,
        "change_direction": assessment.change_direction.value if assessment.change_direction else None,
        "ai_commentary": assessment.commentary,
        "photo_clarity": est.photo_clarity,
        "lighting_quality": est.lighting_quality,
        "pose_quality": est.pose_quality,
        "definition": est.definition,
        "muscle_fullness": est.muscle_fullness,
        "data_completeness": assessment.data_completeness,
        "avg_calories": behavior.avg_calories,
        "avg_protein": behavior.avg_protein,
        "weight_trend": behavior.weight_trend,
        "training_volume": behavior.training_volume,
        "rapid_change_detected": assessment.safety.rapid_change,
        "safety_alert": assessment.safety.alert,
    }


async def create_scan(
    ctx: UserContext,
    photos: PhotoSet,
    samples: "SampleStore",
    scans: "ScanStore",
    vision: "VisionProvider",
    policy: AnalyticsPolicy = AnalyticsPolicy(),
) -> tuple[ScanRecord, ScanAssessment]:
    """Analyze photos and persist the scan.

    MalformedUpstreamResponse from parsing propagates before anything is written.
    """
    started = time.monotonic()
    behavior, latest_weight, recent = await asyncio.gather(
        load_behavioral_context(samples, ctx),
        samples.find_latest(ctx.user_id, MetricType.WEIGHT),
        scans.find_scans(ctx.user_id, limit=1),
    )
    prompt = build_scan_prompt(ctx.profile, latest_weight, photos)
    payload = parse_model_json(await vision.analyze(prompt, photos.image_urls))

    assessment = assess_scan(ctx, payload, recent[0] if recent else None, latest_weight, behavior, policy)
    fields = scan_fields(assessment, photos, ctx.now)
    fields["processing_time_ms"] = int((time.monotonic() - started) * 1000)
    record = await scans.create_scan(ctx.user_id, fields)
    logger.info(
        "Scan %s: body fat %s-%s%%, confidence %s",
        record.id,
        record.body_fat_min,
        record.body_fat_max,
        record.body_fat_confidence,
    )
    return record, assessment


# ── History ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TrendPoint:
    date: datetime
    value: float
    confidence: float


@dataclass(frozen=True)
class HistoryTrends:
    body_fat_trend: list[TrendPoint] = field(default_factory=list)
    avg_change: float = 0.0
    direction: ChangeDirection = ChangeDirection.STABLE


@dataclass(frozen=True)
class MonthlySummary:
    period: str
    scan_count: int
    body_fat_change: float
    direction: str
    summary: str


@dataclass(frozen=True)
class ScanHistory:
    scans: list[ScanRecord]
    trends: HistoryTrends
    monthly_summary: Optional[MonthlySummary] = None


SUMMARY_WORDS = {
    NumericDirection.DECREASING: "decreased",
    NumericDirection.INCREASING: "increased",
    NumericDirection.STABLE: "stable",
}


def history_trends(scans: list[ScanRecord], ctx: UserContext, policy: AnalyticsPolicy = AnalyticsPolicy()) -> HistoryTrends:
    """Body fat midpoint series (oldest first) with goal-relative direction."""
    if len(scans) < 2:
        return HistoryTrends()
    ordered = sorted(scans, key=lambda s: s.captured_at)
    points = [TrendPoint(s.captured_at, s.body_fat_mid, s.body_fat_confidence) for s in ordered]
    avg_change = ordered[-1].body_fat_mid - ordered[0].body_fat_mid
    return HistoryTrends(
        body_fat_trend=points,
        avg_change=avg_change,
        direction=goal_direction(avg_change, ctx.goal, policy.direction_threshold),
    )


def summarize_month(scans: list[ScanRecord], now: datetime, policy: AnalyticsPolicy = AnalyticsPolicy()) -> Optional[MonthlySummary]:
    """Needs at least two scans in the last 30 days."""
    cutoff = now - timedelta(days=SUMMARY_WINDOW_DAYS)
    recent = sorted((s for s in scans if s.captured_at >= cutoff), key=lambda s: s.captured_at)
    if len(recent) < 2:
        return None
    change = recent[-1].body_fat_mid - recent[0].body_fat_mid
    return MonthlySummary(
        period=f"{SUMMARY_WINDOW_DAYS} days",
        scan_count=len(recent),
        body_fat_change=round(change, 1),
        direction=SUMMARY_WORDS[numeric_direction(change, policy.direction_threshold)],
        summary=monthly_summary(change, len(recent), policy.direction_threshold),
    )


def summarize_history(
    scans: list[ScanRecord],
    ctx: UserContext,
    include_summary: bool = False,
    policy: AnalyticsPolicy = AnalyticsPolicy(),
) -> ScanHistory:
    return ScanHistory(
        scans=scans,
        trends=history_trends(scans, ctx, policy),
        monthly_summary=summarize_month(scans, ctx.now, policy) if include_summary else None,
    )


# ── Comparison ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ChangeZone:
    area: str
    direction: str
    confidence: int


# (scan attribute, area, confidence) for the muscle scores a reply may carry
ZONE_RULES: tuple[tuple[str, str, int], ...] = (
    ("definition", "Overall Definition", 70),
    ("muscle_fullness", "Muscle Fullness", 65),
)
FALLBACK_ZONE = ChangeZone(area="Overall Physique", direction="stable", confidence=50)


def detect_change_zones(
    earlier: ScanRecord,
    later: ScanRecord,
    threshold: float = CHANGE_ZONE_THRESHOLD,
) -> list[ChangeZone]:
    """Areas whose muscle score moved by more than threshold, else the fallback zone."""
    zones = []
    for attr, area, confidence in ZONE_RULES:
        before, after = getattr(earlier, attr), getattr(later, attr)
        if not before or not after:
            continue
        delta = after - before
        if abs(delta) > threshold:
            zones.append(ChangeZone(area, "improved" if delta > 0 else "reduced", confidence))
    return zones or [FALLBACK_ZONE]


@dataclass(frozen=True)
class ScanComparison:
    earlier: ScanRecord
    later: ScanRecord
    body_fat_change: float
    lean_mass_change: Optional[float]
    days_between: int
    weekly_rate: float
    direction: NumericDirection
    goal_direction: ChangeDirection
    rapid_change_detected: bool
    insight: str
    change_zones: list[ChangeZone] = field(default_factory=list)


def compare_scans(
    first: ScanRecord,
    second: ScanRecord,
    ctx: UserContext,
    policy: AnalyticsPolicy = AnalyticsPolicy(),
) -> ScanComparison:
    """Compare two scans in either argument order; display values are rounded."""
    change = compute_change(
        Observation(first.captured_at, first.body_fat_mid),
        Observation(second.captured_at, second.body_fat_mid),
        ctx.goal,
        policy.direction_threshold,
    )
    earlier, later = sorted((first, second), key=lambda s: (s.captured_at, s.body_fat_mid))
    lean_change = None
    if earlier.lean_mass_mid is not None and later.lean_mass_mid is not None:
        lean_change = later.lean_mass_mid - earlier.lean_mass_mid
    return ScanComparison(
        earlier=earlier,
        later=later,
        body_fat_change=change.change_display,
        lean_mass_change=round(lean_change, 1) if lean_change is not None else None,
        days_between=change.days,
        weekly_rate=change.weekly_rate_display,
        direction=change.numeric_direction,
        goal_direction=change.direction,
        rapid_change_detected=is_rapid_change(
            earlier.body_fat_mid,
            later.body_fat_mid,
            change.days,
            policy.rapid_change_points,
            policy.rapid_change_days,
        ),
        insight=comparison_insight(change.change, change.days, change.weekly_rate, lean_change),
        change_zones=detect_change_zones(earlier, later),
    )
