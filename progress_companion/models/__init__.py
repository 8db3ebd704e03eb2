"""ORM models - import all so Base.metadata is complete for migrations."""

from progress_companion.models.body_scan import BodyCompositionScan
from progress_companion.models.food_log import FoodLogEntry
from progress_companion.models.measurement import Measurement
from progress_companion.models.user import User, UserProfile
from progress_companion.models.workout import Workout

__all__ = [
    "BodyCompositionScan",
    "FoodLogEntry",
    "Measurement",
    "User",
    "UserProfile",
    "Workout",
]
