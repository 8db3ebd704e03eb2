"""Rapid-change detection between consecutive body-composition scans."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from progress_companion.core.constants import RAPID_CHANGE_DAYS, RAPID_CHANGE_POINTS, SAFETY_ALERT
from progress_companion.services.change import days_between
from progress_companion.services.records import ScanRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SafetyAssessment:
    rapid_change: bool
    change: Optional[float] = None
    days_since_previous: Optional[int] = None
    alert: Optional[str] = None


def is_rapid_change(
    previous_mid: float,
    new_mid: float,
    days_since_previous: int,
    max_points: float = RAPID_CHANGE_POINTS,
    window_days: int = RAPID_CHANGE_DAYS,
) -> bool:
    return abs(new_mid - previous_mid) > max_points and days_since_previous < window_days


def detect_rapid_change(
    new_mid: float,
    previous: Optional[ScanRecord],
    now: datetime,
    max_points: float = RAPID_CHANGE_POINTS,
    window_days: int = RAPID_CHANGE_DAYS,
) -> SafetyAssessment:
    """Flag a body fat midpoint that moved more than max_points within window_days.

    The flag is advisory: the scan is still stored, with the alert attached.
    """
    if previous is None:
        return SafetyAssessment(rapid_change=False)
    days = days_between(previous.captured_at, now)
    change = new_mid - previous.body_fat_mid
    rapid = is_rapid_change(previous.body_fat_mid, new_mid, days, max_points, window_days)
    if rapid:
        logger.info("Rapid body fat change: %+.1f points in %d days", change, days)
    return SafetyAssessment(
        rapid_change=rapid,
        change=change,
        days_since_previous=days,
        alert=SAFETY_ALERT if rapid else None,
    )
