"""Trend classification: compare the mean of an early window with a later one."""

from __future__ import annotations

from collections.abc import Sequence

from progress_companion.core.constants import EPSILON, RECENT_TREND_WINDOW, TREND_THRESHOLD_PCT
from progress_companion.core.enums import Trend


def _pct_change(first: float, second: float) -> float:
    """Percent change from first to second; baseline floored at EPSILON."""
    return (second - first) / max(first, EPSILON) * 100


def classify_means(
    first: Sequence[float],
    second: Sequence[float],
    threshold_pct: float = TREND_THRESHOLD_PCT,
) -> Trend:
    """Shared primitive: up/down when the mean moves more than threshold_pct."""
    if not first or not second:
        return Trend.STABLE
    change = _pct_change(sum(first) / len(first), sum(second) / len(second))
    if change > threshold_pct:
        return Trend.UP
    if change < -threshold_pct:
        return Trend.DOWN
    return Trend.STABLE


def classify_trend(values: Sequence[float], threshold_pct: float = TREND_THRESHOLD_PCT) -> Trend:
    """First half vs second half of the whole series (odd middle goes to the second half)."""
    if len(values) < 2:
        return Trend.STABLE
    mid = len(values) // 2
    return classify_means(values[:mid], values[mid:], threshold_pct)


def classify_recent_trend(
    values: Sequence[float],
    window: int = RECENT_TREND_WINDOW,
    threshold_pct: float = TREND_THRESHOLD_PCT,
) -> Trend:
    """Last `window` values vs the `window` values before them."""
    if len(values) < 2 or window <= 0:
        return Trend.STABLE
    recent = values[-window:]
    previous = values[-2 * window:-window] if len(values) > window else []
    return classify_means(previous, recent, threshold_pct)


def percent_change(values: Sequence[float]) -> float:
    """First-to-last percent change; 0 for fewer than two points."""
    if len(values) < 2:
        return 0.0
    return _pct_change(values[0], values[-1])
