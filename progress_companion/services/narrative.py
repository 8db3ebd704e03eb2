"""Deterministic, goal-aware commentary built from engine outputs.

Templates only; no model call. Each rule table maps a tagged case to the text
it contributes so the wording can be tested without the surrounding flow.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from progress_companion.core.constants import (
    DIRECTION_THRESHOLD,
    LEAN_MASS_CHANGE_THRESHOLD,
    NOTABLE_WEEKLY_RATE,
)
from progress_companion.core.enums import (
    ChangeDirection,
    ConfidenceTier,
    Goal,
    GoalAlignment,
    NumericDirection,
)
from progress_companion.services.confidence import confidence_tier

TIER_SENTENCES: dict[ConfidenceTier, str] = {
    ConfidenceTier.LOW: (
        "Low confidence due to image quality or data limitations. "
        "Consider retaking under better conditions."
    ),
    ConfidenceTier.MODERATE: "Moderate confidence. Estimates may vary.",
    ConfidenceTier.GOOD: "Good confidence in estimation.",
}

# (goal, applies(avg_body_fat), closing clause); first match wins
GOAL_CLOSING_RULES: tuple[tuple[Goal, Callable[[float], bool], str], ...] = (
    (Goal.FAT_LOSS, lambda avg: avg > 25, "Continue with caloric deficit for fat loss goals."),
    (Goal.MUSCLE_GAIN, lambda avg: avg < 15, "Good position for a lean bulk phase."),
    (Goal.RECOMPOSITION, lambda avg: True, "Recomposition typically requires patience and consistent tracking."),
)

GOAL_ALIGNMENT: dict[ChangeDirection, GoalAlignment] = {
    ChangeDirection.IMPROVING: GoalAlignment.ALIGNED,
    ChangeDirection.DECLINING: GoalAlignment.MISALIGNED,
    ChangeDirection.STABLE: GoalAlignment.NEUTRAL,
}


@dataclass(frozen=True)
class Provenance:
    source: str = "algorithm"
    method: str = "Template composition over trend, change and confidence scores"
    model_name: Optional[str] = None
    data_points_used: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Insight:
    text: str
    confidence: float
    direction: ChangeDirection
    goal_alignment: GoalAlignment
    provenance: Provenance = field(default_factory=Provenance)


def goal_closing_clause(goal: Optional[Goal], avg_body_fat: float) -> Optional[str]:
    for rule_goal, applies, clause in GOAL_CLOSING_RULES:
        if goal == rule_goal and applies(avg_body_fat):
            return clause
    return None


def _change_sentence(change: float, direction: NumericDirection) -> str:
    if direction == NumericDirection.DECREASING:
        return f"Body fat decreased by approximately {abs(change):.1f}% since last scan."
    if direction == NumericDirection.INCREASING:
        return f"Body fat increased by approximately {change:.1f}% since last scan."
    return "Body fat remained stable since last scan."


def scan_commentary(
    body_fat_min: int,
    body_fat_max: int,
    confidence: float,
    observations: Optional[str] = None,
    change: Optional[float] = None,
    direction: Optional[NumericDirection] = None,
    goal: Optional[Goal] = None,
) -> str:
    """Commentary attached to a new scan."""
    parts = [
        f"Estimated body fat: {body_fat_min}–{body_fat_max}% (Confidence: {confidence:g}%).",
        TIER_SENTENCES[confidence_tier(confidence)],
    ]
    if change is not None and direction is not None:
        parts.append(_change_sentence(change, direction))
    if observations:
        parts.append(observations.strip())
    closing = goal_closing_clause(goal, (body_fat_min + body_fat_max) / 2)
    if closing:
        parts.append(closing)
    return " ".join(parts)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def elapsed_phrase(days: int) -> str:
    """'Over 5 days', 'Over 2 weeks', 'Over 1 month', 'Over 3 months'."""
    if days < 7:
        return f"Over {_plural(days, 'day')}"
    if days < 30:
        return f"Over {_plural(days // 7, 'week')}"
    months = days // 30
    return f"Over {months} month{'s' if days >= 60 else ''}"


def body_fat_phrase(change: float, threshold: float = DIRECTION_THRESHOLD) -> str:
    if abs(change) < threshold:
        return "body fat remained stable"
    if change < 0:
        return f"body fat decreased by approximately {abs(change):.1f}%"
    return f"body fat increased by approximately {change:.1f}%"


def lean_mass_clause(lean_change: Optional[float]) -> Optional[str]:
    if lean_change is None:
        return None
    if abs(lean_change) > LEAN_MASS_CHANGE_THRESHOLD:
        if lean_change > 0:
            return f"while lean mass increased by {lean_change:.1f}kg"
        return f"while lean mass decreased by {abs(lean_change):.1f}kg"
    return "with lean mass stable"


def rate_sentences(weekly_rate: float) -> list[str]:
    if abs(weekly_rate) > NOTABLE_WEEKLY_RATE:
        sentences = ["Rate of change is notable."]
        if weekly_rate < -NOTABLE_WEEKLY_RATE:
            sentences.append("Ensure adequate nutrition to support fat loss.")
        return sentences
    return ["Change rate is within normal range."]


def comparison_insight(
    body_fat_change: float,
    days_between: int,
    weekly_rate: float,
    lean_mass_change: Optional[float] = None,
) -> str:
    """Narrative for a two-scan comparison."""
    lead = f"{elapsed_phrase(days_between)}, {body_fat_phrase(body_fat_change)}"
    clause = lean_mass_clause(lean_mass_change)
    if clause:
        lead = f"{lead} {clause}"
    return " ".join([f"{lead}.", *rate_sentences(weekly_rate)])


def monthly_summary(change: float, scan_count: int, threshold: float = DIRECTION_THRESHOLD) -> str:
    """Summary of the body fat change over the last 30 days."""
    magnitude = f"{abs(change):.1f}"
    if change < -threshold:
        return (
            f"Body fat estimation decreased by approximately {magnitude}% over the past 30 days. "
            f"Visual leanness appears to be improving based on {scan_count} scans. "
            "Continue tracking to confirm trend."
        )
    if change > threshold:
        return (
            f"Body fat estimation increased by approximately {magnitude}% over the past 30 days. "
            "This may indicate a caloric surplus. Consider reviewing nutrition alignment with goals."
        )
    return (
        "Body fat estimation has remained stable over the past 30 days. "
        "Consistency in tracking will help identify trends over time. "
        "Current estimates suggest maintenance phase."
    )


def build_insight(
    text: str,
    confidence: float,
    direction: Optional[ChangeDirection],
    provenance: Optional[Provenance] = None,
) -> Insight:
    direction = direction or ChangeDirection.STABLE
    return Insight(
        text=text,
        confidence=confidence,
        direction=direction,
        goal_alignment=GOAL_ALIGNMENT[direction],
        provenance=provenance or Provenance(),
    )
