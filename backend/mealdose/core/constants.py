"""
Central location for constant values and tables used across the application.
"""

# Fallbacks used by the simple calculation when the profile lacks a value
DEFAULT_INSULIN_CARB_RATIO = 0.1  # U/g (1:10)
DEFAULT_CORRECTION_FACTOR = 50.0  # mg/dL per U
DEFAULT_TARGET_GLUCOSE = 100  # mg/dL

# Adjustment percentages
# Format: {profile_field: percent}
DEFAULT_ADJUSTMENT_PERCENTS = {
    "sick_day_percent": 15,
    "stress_percent": 10,
    "light_exercise_percent": 15,
    "intense_exercise_percent": 30,
}

# Safety thresholds
LOW_GLUCOSE_THRESHOLD = 70  # mg/dL
HIGH_GLUCOSE_THRESHOLD = 250  # mg/dL
HIGH_DOSE_THRESHOLD = 15.0  # U
MINIMUM_DOSE = 0.5  # U

# Input caps; anything above is a data-entry error rather than a meal or a reading
MAX_TOTAL_CARBS = 2000.0  # g
MAX_GLUCOSE = 3000  # mg/dL

# Negative correction may never remove more than this share of the carb dose
MAX_NEGATIVE_CORRECTION_SHARE = 0.5

DOSE_STEP_U = 0.5

# Display names for required profile fields, in reporting order
FIELD_ICR = "Insulin to Carb Ratio (ICR)"
FIELD_ISF = "Correction Factor (ISF)"
FIELD_TARGET = "Target Glucose"
