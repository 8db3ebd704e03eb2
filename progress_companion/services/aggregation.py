"""Time-series aggregation over samples and food log entries.

State quantities (weight, body fat, lean mass) are read as points; flow
quantities (calories, macros) are summed per calendar day. Empty input always
yields empty output or zeros, never a division error.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from progress_companion.services.records import FoodLogEntry, Sample, TimeWindow

UTC = ZoneInfo("UTC")


@dataclass
class NutritionTotals:
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    def add(self, entry: FoodLogEntry) -> None:
        self.calories += entry.calories or 0
        self.protein += entry.protein or 0
        self.carbs += entry.carbs or 0
        self.fat += entry.fat or 0


def trailing_window(now: datetime, days: int) -> TimeWindow:
    """Window covering the last `days` days up to `now`."""
    return TimeWindow(start=now - timedelta(days=days), end=now)


def filter_window(samples: Iterable[Sample], window: TimeWindow) -> list[Sample]:
    """Samples inside the window, ascending by capture time."""
    inside = [s for s in samples if window.contains(s.captured_at)]
    inside.sort(key=lambda s: s.captured_at)
    return inside


def values_of(samples: Iterable[Sample]) -> list[float]:
    return [float(s.value) for s in samples]


def day_key(at: datetime, tz: ZoneInfo = UTC) -> date:
    """Calendar date of a timestamp in the local frame (naive = already local)."""
    if at.tzinfo is None:
        return at.date()
    return at.astimezone(tz).date()


def bucket_by_day(entries: Iterable[FoodLogEntry], tz: ZoneInfo = UTC) -> dict[date, NutritionTotals]:
    """Sum calories and macros per calendar day, days in ascending order."""
    buckets: dict[date, NutritionTotals] = {}
    for entry in entries:
        key = day_key(entry.logged_at, tz)
        buckets.setdefault(key, NutritionTotals()).add(entry)
    return dict(sorted(buckets.items()))


def daily_averages(buckets: dict[date, NutritionTotals]) -> NutritionTotals:
    """Mean of each quantity over logged days. No logged days -> zeros."""
    days = len(buckets)
    if days == 0:
        return NutritionTotals()
    totals = NutritionTotals()
    for day in buckets.values():
        totals.calories += day.calories
        totals.protein += day.protein
        totals.carbs += day.carbs
        totals.fat += day.fat
    return NutritionTotals(
        calories=totals.calories / days,
        protein=totals.protein / days,
        carbs=totals.carbs / days,
        fat=totals.fat / days,
    )


def last_two(samples: Sequence[Sample]) -> tuple[Optional[Sample], Optional[Sample]]:
    """(current, previous): the two most recent samples, either may be None."""
    ordered = sorted(samples, key=lambda s: s.captured_at, reverse=True)
    current = ordered[0] if ordered else None
    previous = ordered[1] if len(ordered) > 1 else None
    return current, previous


def latest_per_bucket(
    samples: Iterable[Sample],
    buckets: Sequence[TimeWindow],
) -> list[Optional[Sample]]:
    """Latest sample inside each bucket, or None when the bucket is empty.

    Buckets are half-open [start, end) except the last, which includes its end.
    On equal timestamps the sample seen later wins.
    """
    picked: list[Optional[Sample]] = [None] * len(buckets)
    last = len(buckets) - 1
    for sample in samples:
        at = sample.captured_at
        for i, bucket in enumerate(buckets):
            inside = bucket.start <= at <= bucket.end if i == last else bucket.start <= at < bucket.end
            if not inside:
                continue
            current = picked[i]
            if current is None or at >= current.captured_at:
                picked[i] = sample
            break
    return picked
