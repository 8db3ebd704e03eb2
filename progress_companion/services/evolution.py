"""Twelve-month evolution timeline for charting.

Each of the 12 buckets (~30 days, oldest first) carries the latest weight,
body fat and lean mass seen inside it, or None. No trend logic here: callers
run the trend classifier over the result if they need one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING, Optional

from progress_companion.core.constants import EVOLUTION_BUCKET_DAYS, EVOLUTION_MONTHS
from progress_companion.core.enums import MetricType
from progress_companion.services.aggregation import latest_per_bucket
from progress_companion.services.records import Sample, TimeWindow, UserContext

if TYPE_CHECKING:
    from progress_companion.services.stores import SampleStore

EVOLUTION_METRICS = (MetricType.WEIGHT, MetricType.BODY_FAT, MetricType.LEAN_MASS)


@dataclass(frozen=True)
class EvolutionPoint:
    month: datetime
    weight: Optional[float] = None
    body_fat: Optional[float] = None
    lean_mass: Optional[float] = None


def _start_of_day(at: datetime) -> datetime:
    return datetime.combine(at.date(), time.min, tzinfo=at.tzinfo)


def _end_of_day(at: datetime) -> datetime:
    return datetime.combine(at.date(), time.max, tzinfo=at.tzinfo)


def evolution_buckets(
    now: datetime,
    months: int = EVOLUTION_MONTHS,
    bucket_days: int = EVOLUTION_BUCKET_DAYS,
) -> list[TimeWindow]:
    """Non-overlapping buckets, oldest first. The newest closes at the end of today."""
    buckets = []
    for i in range(months - 1, -1, -1):
        start = _start_of_day(now - timedelta(days=(i + 1) * bucket_days))
        if i == 0:
            end = _end_of_day(now)
        else:
            end = _start_of_day(now - timedelta(days=i * bucket_days))
        buckets.append(TimeWindow(start=start, end=end))
    return buckets


def evolution_span(now: datetime) -> TimeWindow:
    """Full range covered by evolution_buckets(now)."""
    buckets = evolution_buckets(now)
    return TimeWindow(start=buckets[0].start, end=buckets[-1].end)


def _value(sample: Optional[Sample]) -> Optional[float]:
    return float(sample.value) if sample is not None else None


def build_evolution(
    samples_by_metric: dict[MetricType, Sequence[Sample]],
    now: datetime,
    bucket_days: int = EVOLUTION_BUCKET_DAYS,
) -> list[EvolutionPoint]:
    """Exactly 12 points; month label is the bucket's closing date."""
    buckets = evolution_buckets(now, bucket_days=bucket_days)
    picked = {
        metric: latest_per_bucket(samples_by_metric.get(metric, ()), buckets)
        for metric in EVOLUTION_METRICS
    }
    points = []
    for index, i in enumerate(range(len(buckets) - 1, -1, -1)):
        points.append(
            EvolutionPoint(
                month=now - timedelta(days=i * bucket_days),
                weight=_value(picked[MetricType.WEIGHT][index]),
                body_fat=_value(picked[MetricType.BODY_FAT][index]),
                lean_mass=_value(picked[MetricType.LEAN_MASS][index]),
            )
        )
    return points


async def load_evolution(store: "SampleStore", ctx: UserContext) -> list[EvolutionPoint]:
    """Fetch the three metrics concurrently, then assemble once all have returned."""
    span = evolution_span(ctx.now)
    results = await asyncio.gather(
        *(store.find_samples(ctx.user_id, metric, span) for metric in EVOLUTION_METRICS)
    )
    return build_evolution(dict(zip(EVOLUTION_METRICS, results)), ctx.now)
