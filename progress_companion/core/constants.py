"""Application constants."""

# Guard for percent-change baselines at or near zero
EPSILON = 0.001

# Trend classification (percent change between sub-window means)
TREND_THRESHOLD_PCT = 1.0
RECENT_TREND_WINDOW = 7

# Change direction bucket (absolute units of the metric)
DIRECTION_THRESHOLD = 0.5

# Rapid change safety check: percentage points within a number of days
RAPID_CHANGE_POINTS = 2.0
RAPID_CHANGE_DAYS = 14

# Body fat estimates accepted from the vision model
BODY_FAT_FLOOR = 5
BODY_FAT_CEILING = 40
DEFAULT_BODY_FAT_MIN = 15
DEFAULT_BODY_FAT_SPREAD = 3

# Model-reported confidence
CONFIDENCE_FLOOR = 30
CONFIDENCE_CEILING = 95
DEFAULT_CONFIDENCE = 60
DEFAULT_PHOTO_QUALITY = 70

# Completeness can only scale confidence between 70% and 100% of its raw value
CONFIDENCE_BASE_WEIGHT = 0.7
CONFIDENCE_COMPLETENESS_WEIGHT = 0.3
PROFILE_FIELD_WEIGHT = 0.2
RECENT_WEIGHT_BONUS = 0.3

# Comparison narrative
LEAN_MASS_CHANGE_THRESHOLD = 0.3
NOTABLE_WEEKLY_RATE = 0.5

# Change zones: definition or fullness score change (0-100 scale) worth reporting
CHANGE_ZONE_THRESHOLD = 5

# Evolution timeline
EVOLUTION_MONTHS = 12
EVOLUTION_BUCKET_DAYS = 30

# Behavioral context
BEHAVIOR_WINDOW_DAYS = 7
WEIGHT_TREND_WINDOW_DAYS = 30
WEIGHT_TREND_KG = 1.0

# Monthly summary
SUMMARY_WINDOW_DAYS = 30

# Nutrition targets used when the profile has none
CALORIE_TARGET = 2200.0
PROTEIN_TARGET = 165.0

SAFETY_ALERT = (
    "Rapid body fat change detected. Ensure adequate nutrition and consider "
    "consulting a healthcare provider if this trend continues."
)
SCAN_DISCLAIMER = (
    "This is an AI-based estimation tool and does not replace medical-grade "
    "DEXA or clinical assessment."
)
ANALYSIS_FAILED = "Failed to analyze image. Please ensure photo is clear and try again."
