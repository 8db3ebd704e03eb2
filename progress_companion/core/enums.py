"""Shared enums for models, engine and API."""

from enum import Enum


class MetricType(str, Enum):
    """Physiological metric carried by a sample."""

    WEIGHT = "weight"
    BODY_FAT = "body_fat"
    LEAN_MASS = "lean_mass"
    WAIST = "waist"
    HIPS = "hips"
    CHEST = "chest"
    NECK = "neck"


class SampleSource(str, Enum):
    """Where a sample came from."""

    MANUAL = "manual"
    DEVICE = "device"
    MODEL = "model"  # AI estimate
    LABEL = "label"  # Scanned nutrition label


class Goal(str, Enum):
    """Primary goal from the user profile."""

    FAT_LOSS = "fat_loss"
    MUSCLE_GAIN = "muscle_gain"
    RECOMPOSITION = "recomposition"
    MAINTENANCE = "maintenance"


class Trend(str, Enum):
    """Direction of a series."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class NumericDirection(str, Enum):
    """Sign bucket of a change before goal interpretation."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class ChangeDirection(str, Enum):
    """Goal-relative reading of a change."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class GoalAlignment(str, Enum):
    ALIGNED = "aligned"
    MISALIGNED = "misaligned"
    NEUTRAL = "neutral"


class ConfidenceTier(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    GOOD = "good"


class Effort(str, Enum):
    """Effort to add a missing data signal."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
