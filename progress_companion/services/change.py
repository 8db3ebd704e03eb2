"""Absolute and weekly rate of change between two dated observations.

The numeric sign of a change means different things for different goals:
losing body fat is progress on a cut and a setback on a bulk.
GOAL_DIRECTION_TABLE holds that mapping.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from progress_companion.core.constants import DIRECTION_THRESHOLD
from progress_companion.core.enums import ChangeDirection, Goal, NumericDirection
from progress_companion.services.records import Sample

SECONDS_PER_DAY = 86400

# goal -> numeric direction -> goal-relative direction.
# Recomposition is judged qualitatively: a rise in body fat may come with lean
# gain, so it is never read as declining. Same for a missing/maintenance goal.
GOAL_DIRECTION_TABLE: dict[Optional[Goal], dict[NumericDirection, ChangeDirection]] = {
    Goal.FAT_LOSS: {
        NumericDirection.DECREASING: ChangeDirection.IMPROVING,
        NumericDirection.INCREASING: ChangeDirection.DECLINING,
        NumericDirection.STABLE: ChangeDirection.STABLE,
    },
    Goal.MUSCLE_GAIN: {
        NumericDirection.INCREASING: ChangeDirection.IMPROVING,
        NumericDirection.DECREASING: ChangeDirection.DECLINING,
        NumericDirection.STABLE: ChangeDirection.STABLE,
    },
    Goal.RECOMPOSITION: {
        NumericDirection.DECREASING: ChangeDirection.IMPROVING,
        NumericDirection.INCREASING: ChangeDirection.STABLE,
        NumericDirection.STABLE: ChangeDirection.STABLE,
    },
    Goal.MAINTENANCE: {
        NumericDirection.DECREASING: ChangeDirection.IMPROVING,
        NumericDirection.INCREASING: ChangeDirection.STABLE,
        NumericDirection.STABLE: ChangeDirection.STABLE,
    },
}
GOAL_DIRECTION_TABLE[None] = GOAL_DIRECTION_TABLE[Goal.MAINTENANCE]


@dataclass(frozen=True)
class Observation:
    at: datetime
    value: float


@dataclass(frozen=True)
class ChangeResult:
    earlier: Observation
    later: Observation
    change: float
    days: int
    weekly_rate: float
    numeric_direction: NumericDirection
    direction: ChangeDirection

    @property
    def change_display(self) -> float:
        return round(self.change, 1)

    @property
    def weekly_rate_display(self) -> float:
        return round(self.weekly_rate, 2)


def numeric_direction(change: float, threshold: float = DIRECTION_THRESHOLD) -> NumericDirection:
    if change < -threshold:
        return NumericDirection.DECREASING
    if change > threshold:
        return NumericDirection.INCREASING
    return NumericDirection.STABLE


def goal_direction(
    change: float,
    goal: Optional[Goal],
    threshold: float = DIRECTION_THRESHOLD,
) -> ChangeDirection:
    """Goal-relative direction of an un-rounded change."""
    table = GOAL_DIRECTION_TABLE.get(goal, GOAL_DIRECTION_TABLE[None])
    return table[numeric_direction(change, threshold)]


def days_between(earlier: datetime, later: datetime) -> int:
    return math.floor((later - earlier).total_seconds() / SECONDS_PER_DAY)


def weekly_rate(change: float, days: int) -> float:
    return change / days * 7 if days > 0 else 0.0


def compute_change(
    a: Observation,
    b: Observation,
    goal: Optional[Goal] = None,
    threshold: float = DIRECTION_THRESHOLD,
) -> ChangeResult:
    """Change between two observations ordered by timestamp, not by argument order."""
    # Equal timestamps fall back to value so the result never depends on argument order
    earlier, later = sorted((a, b), key=lambda o: (o.at, o.value))
    change = later.value - earlier.value
    days = days_between(earlier.at, later.at)
    return ChangeResult(
        earlier=earlier,
        later=later,
        change=change,
        days=days,
        weekly_rate=weekly_rate(change, days),
        numeric_direction=numeric_direction(change, threshold),
        direction=goal_direction(change, goal, threshold),
    )


def compute_series_change(
    samples: Sequence[Sample],
    goal: Optional[Goal] = None,
    threshold: float = DIRECTION_THRESHOLD,
) -> Optional[ChangeResult]:
    """Change from the first to the last sample of a window; None below two samples."""
    if len(samples) < 2:
        return None
    ordered = sorted(samples, key=lambda s: s.captured_at)
    first, last = ordered[0], ordered[-1]
    return compute_change(
        Observation(first.captured_at, float(first.value)),
        Observation(last.captured_at, float(last.value)),
        goal,
        threshold,
    )
