"""Signal composer: which missing inputs would most raise insight confidence.

The gap table lists every signal we know how to ask for; a gap applies when
its predicate says the user's data lacks that signal. Top gaps are ranked by
confidence improvement, then by effort.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional
from zoneinfo import ZoneInfo

from progress_companion.core.enums import Effort, MetricType
from progress_companion.services.aggregation import UTC, day_key, trailing_window
from progress_companion.services.records import UserContext

if TYPE_CHECKING:
    from progress_companion.services.stores import SampleStore, ScanStore

CONSISTENCY_WINDOW_DAYS = 30
CONSISTENT_PCT = 80
RECENT_DAYS = 7
BODY_MEASUREMENT_METRICS = (MetricType.WAIST, MetricType.HIPS, MetricType.CHEST)
TOP_N = 3

EFFORT_ORDER = {Effort.LOW: 0, Effort.MEDIUM: 1, Effort.HIGH: 2}


@dataclass(frozen=True)
class DataAvailability:
    meals_logged_today: bool = False
    meal_consistency: float = 0.0  # % of the last 30 days with a food entry
    last_photo_at: Optional[datetime] = None
    photo_count: int = 0
    last_weight_at: Optional[datetime] = None
    has_body_measurements: bool = False
    workouts_this_week: bool = False
    has_goal: bool = False


@dataclass(frozen=True)
class DataGap:
    type: str
    description: str
    confidence_improvement: int
    effort: Effort
    action: str


@dataclass(frozen=True)
class RecommendedInput:
    rank: int
    gap: DataGap

    @property
    def rationale(self) -> str:
        return f"Adding this data point would improve insight accuracy by {self.gap.confidence_improvement}%"


@dataclass(frozen=True)
class DataQuality:
    score: int
    level: str


@dataclass(frozen=True)
class SignalPlan:
    recommended: list[RecommendedInput] = field(default_factory=list)
    total_potential_improvement: int = 0
    data_quality: DataQuality = DataQuality(0, "needs_attention")


def _days_since(at: Optional[datetime], now: datetime) -> Optional[int]:
    return (now - at).days if at is not None else None


def _photo_action(avail: DataAvailability, now: datetime) -> str:
    days = _days_since(avail.last_photo_at, now)
    if days is None or days > 14:
        return "Take a progress photo today"
    return "Schedule your weekly progress photo"


GapRule = tuple[DataGap, Callable[[DataAvailability, datetime], bool]]

GAP_RULES: tuple[GapRule, ...] = (
    (
        DataGap("meal_log", "Log breakfast consistently", 15, Effort.LOW, "Log your breakfast tomorrow morning"),
        lambda a, now: not a.meals_logged_today or a.meal_consistency < CONSISTENT_PCT,
    ),
    (
        DataGap("progress_photo", "Add a progress photo this week", 12, Effort.LOW, ""),
        lambda a, now: a.last_photo_at is None or _days_since(a.last_photo_at, now) > RECENT_DAYS,
    ),
    (
        DataGap("measurement", "Log your weight this week", 10, Effort.LOW, "Weigh yourself tomorrow morning"),
        lambda a, now: a.last_weight_at is None or now - a.last_weight_at >= timedelta(days=RECENT_DAYS),
    ),
    (
        DataGap("food_label", "Scan a food label for verified data", 8, Effort.LOW,
                "Use the barcode scanner on your next packaged food"),
        lambda a, now: True,
    ),
    (
        DataGap("workout_log", "Log your workout sessions", 7, Effort.LOW, "Record your next workout"),
        lambda a, now: not a.workouts_this_week,
    ),
    (
        DataGap("body_measurements", "Add circumference measurements", 11, Effort.MEDIUM,
                "Measure your waist, hips, and chest this weekend"),
        lambda a, now: not a.has_body_measurements,
    ),
)

# (minimum score, level), checked from the top
QUALITY_LEVELS = ((80, "excellent"), (60, "good"), (40, "fair"), (0, "needs_attention"))


def analyze_data_gaps(avail: DataAvailability, now: datetime) -> list[DataGap]:
    gaps = []
    for gap, applies in GAP_RULES:
        if not applies(avail, now):
            continue
        if gap.type == "progress_photo":
            gap = DataGap(gap.type, gap.description, gap.confidence_improvement, gap.effort, _photo_action(avail, now))
        gaps.append(gap)
    gaps.sort(key=lambda g: (-g.confidence_improvement, EFFORT_ORDER[g.effort]))
    return gaps


def data_quality(avail: DataAvailability, now: datetime) -> DataQuality:
    score = 0
    if avail.meals_logged_today:
        score += 15
    if avail.meal_consistency >= CONSISTENT_PCT:
        score += 10
    if avail.photo_count > 0:
        score += 15
    if avail.last_weight_at is not None or avail.has_body_measurements:
        score += 15
    if avail.workouts_this_week:
        score += 15
    if avail.has_goal:
        score += 15
    days = _days_since(avail.last_photo_at, now)
    if days is not None:
        if days <= 7:
            score += 15
        elif days <= 14:
            score += 10
        elif days <= 30:
            score += 5
    score = min(score, 100)
    level = next(name for floor, name in QUALITY_LEVELS if score >= floor)
    return DataQuality(score=score, level=level)


def compose_signals(avail: DataAvailability, now: datetime, top_n: int = TOP_N) -> SignalPlan:
    top = analyze_data_gaps(avail, now)[:top_n]
    recommended = [RecommendedInput(rank=i + 1, gap=g) for i, g in enumerate(top)]
    return SignalPlan(
        recommended=recommended,
        total_potential_improvement=sum(g.confidence_improvement for g in top),
        data_quality=data_quality(avail, now),
    )


async def load_availability(
    ctx: UserContext,
    samples: "SampleStore",
    scans: "ScanStore",
    tz: ZoneInfo = UTC,
) -> DataAvailability:
    month = trailing_window(ctx.now, CONSISTENCY_WINDOW_DAYS)
    week = trailing_window(ctx.now, RECENT_DAYS)
    food, workouts, scan_list, weight, *body = await asyncio.gather(
        samples.find_food_entries(ctx.user_id, month),
        samples.find_workouts(ctx.user_id, week),
        scans.find_scans(ctx.user_id),
        samples.find_latest(ctx.user_id, MetricType.WEIGHT),
        *(samples.find_latest(ctx.user_id, m) for m in BODY_MEASUREMENT_METRICS),
    )
    today = day_key(ctx.now, tz)
    logged_days = {day_key(e.logged_at, tz) for e in food}
    return DataAvailability(
        meals_logged_today=today in logged_days,
        meal_consistency=round(len(logged_days) / CONSISTENCY_WINDOW_DAYS * 100),
        last_photo_at=scan_list[0].captured_at if scan_list else None,
        photo_count=len(scan_list),
        last_weight_at=weight.captured_at if weight else None,
        has_body_measurements=any(b is not None for b in body),
        workouts_this_week=bool(workouts),
        has_goal=ctx.goal is not None,
    )
