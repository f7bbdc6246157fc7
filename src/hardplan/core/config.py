"""
Configuration constants for the program engine.

All adjustable parameters are centralized here for easy tuning.
Split templates are plain data so the generator stays a pure function
of the profile and the catalog snapshot.
"""

from typing import Final

from .models import WorkoutBlock

# =============================================================================
# VOLUME BUDGET (weekly hard sets per muscle)
# =============================================================================

WEEKLY_SET_TARGETS: Final[dict[str, int]] = {
    "novice": 11,
    "intermediate": 14,
    "advanced": 18,
}

ACCESSORY_VOLUME_FRACTION: Final[float] = 0.70  # Accessories get 70% of the per-session quotient
MIN_PRIMARY_SETS: Final[int] = 3
MIN_ACCESSORY_SETS: Final[int] = 2

# =============================================================================
# EXERCISE SELECTION
# =============================================================================

PRIMARY_TIER_PREFERENCE: Final[tuple[int, ...]] = (1, 2, 3)
ACCESSORY_TIER_PREFERENCE: Final[tuple[int, ...]] = (2, 3, 1)

# =============================================================================
# REP / RPE PRESCRIPTION
# =============================================================================

# (primary, accessory)
TARGET_REPS: Final[dict[str, tuple[int, int]]] = {
    "strength": (4, 8),
    "hypertrophy": (8, 12),
}

STRENGTH_MAIN_RPE: Final[float] = 8.5  # primary slot or competition lift
STRENGTH_OTHER_RPE: Final[float] = 8.0
HYPERTROPHY_PRIMARY_RPE: Final[float] = 7.5
HYPERTROPHY_ACCESSORY_RPE: Final[float] = 8.5

COMPETITION_LIFT_NOTE: Final[str] = "Main lift focus"

# =============================================================================
# VOLUME ACCOUNTING (Overlap Rule)
# =============================================================================

PRIMARY_MUSCLE_CREDIT: Final[float] = 1.0
# A catalog factor of exactly 0.0 means "unspecified", not "zero-weighted".
SECONDARY_FALLBACK_FACTOR: Final[float] = 0.5

# =============================================================================
# PROGRESSION
# =============================================================================

DEFAULT_REP_RANGE: Final[tuple[int, int]] = (8, 12)
DEFAULT_PLATE_INCREMENT: Final[float] = 2.5

LOWER_BODY_MUSCLES: Final[frozenset[str]] = frozenset(
    {"quads", "hamstrings", "glutes", "calves"}
)

NOVICE_STALL_FAILURES: Final[int] = 2  # consecutive failures before a reset
NOVICE_STALL_MULTIPLIER: Final[float] = 0.9
HIATUS_DAYS: Final[int] = 14  # gap that triggers a hiatus reduction
HIATUS_MULTIPLIER: Final[float] = 0.8

# Rep targets for wave weeks 1/2/3
WAVE_REP_TARGETS: Final[dict[str, tuple[int, int, int]]] = {
    "strength": (8, 7, 6),
    "hypertrophy": (12, 10, 8),
}
WAVE_STEP_INCREMENTS: Final[int] = 2  # plate increments added per wave week
MANDATORY_DELOAD_BLOCKS: Final[int] = 3  # blocks without deload before a forced reset

RECENT_RPE_WINDOW: Final[int] = 10

# =============================================================================
# PERIODIZATION
# =============================================================================

BLOCK_LENGTH_WEEKS: Final[int] = 4

PHASE_CYCLE: Final[dict[str, str]] = {
    "introductory": "accumulation",
    "accumulation": "intensification",
    "intensification": "realization",
    "realization": "deload",
    "deload": "accumulation",
}

RECOVERY_RISK_DELOAD_SCORE: Final[int] = 2

# =============================================================================
# ADHERENCE
# =============================================================================

COMBINED_SET_CAP: Final[int] = 25
ADHERENCE_GAP_DAYS: Final[int] = 4
RETURN_FROM_BREAK_LOAD_MODIFIER: Final[float] = 0.9
TRIM_MAX_ACCESSORIES: Final[int] = 2

# =============================================================================
# PLAN VALIDATION
# =============================================================================

MIN_TRAINING_DAYS: Final[int] = 2
MAX_TRAINING_DAYS: Final[int] = 6
MAX_EXERCISES_PER_SESSION: Final[int] = 8
MAX_UNSCHEDULED_DAYS: Final[int] = 3  # warn at this many open weekdays

WEEKLY_VOLUME_RANGE: Final[tuple[float, float]] = (10.0, 20.0)
MIN_WEEKLY_FREQUENCY: Final[int] = 2
REP_EMPHASIS_SHARE: Final[float] = 0.66
STRENGTH_REP_CEILING: Final[int] = 6
HYPERTROPHY_REP_RANGE: Final[tuple[int, int]] = (7, 12)
RPE_RANGE: Final[tuple[float, float]] = (5.0, 10.0)

WEEKDAY_NAMES: Final[tuple[str, ...]] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

# =============================================================================
# ANALYTICS
# =============================================================================

E1RM_RPE_WINDOW: Final[tuple[float, float]] = (7.0, 9.5)
RPE_BINS: Final[tuple[tuple[str, float, float], ...]] = (
    ("6-7", 6.0, 7.0),
    ("7-8", 7.0, 8.0),
    ("8-9", 8.0, 9.0),
    ("9-10", 9.0, 10.5),
)

# A working set is "slow" at this many eccentric seconds; warn above the share.
SLOW_ECCENTRIC_SECONDS: Final[int] = 5
SLOW_ECCENTRIC_SHARE: Final[float] = 0.5
SLOW_TEMPO_MESSAGE: Final[str] = (
    "Most working sets use very slow eccentrics. "
    "Consider slightly faster tempos to keep volume practical."
)

# =============================================================================
# WEEKLY SPLIT TEMPLATES
# =============================================================================

FULL_BODY_SPLIT: Final[tuple[WorkoutBlock, ...]] = (
    WorkoutBlock("Full Body A", ["chest", "quads"], ["back_lats", "hamstrings", "delts_side"]),
    WorkoutBlock("Full Body B", ["back_lats", "hamstrings"], ["chest", "quads", "delts_rear"]),
    WorkoutBlock("Full Body C", ["delts_front", "glutes"], ["triceps", "biceps", "calves"]),
)

UPPER_LOWER_SPLIT: Final[tuple[WorkoutBlock, ...]] = (
    WorkoutBlock("Upper A", ["chest", "back_lats"], ["delts_side", "triceps", "biceps"]),
    WorkoutBlock("Lower A", ["quads", "hamstrings"], ["glutes", "calves", "abs"]),
    WorkoutBlock("Upper B", ["delts_front", "back_traps"], ["chest", "biceps", "triceps"]),
    WorkoutBlock("Lower B", ["quads", "glutes"], ["hamstrings", "calves", "abs"]),
)

PUSH_PULL_LEGS: Final[tuple[WorkoutBlock, ...]] = (
    WorkoutBlock("Push", ["chest", "delts_front"], ["delts_side", "triceps"]),
    WorkoutBlock("Pull", ["back_lats", "back_traps"], ["biceps", "delts_rear"]),
    WorkoutBlock("Legs", ["quads", "hamstrings"], ["glutes", "calves", "abs"]),
)

UPPER_ACCESSORY_DAY: Final[WorkoutBlock] = WorkoutBlock(
    "Upper Accessory", ["chest", "back_lats"], ["delts_side", "biceps", "triceps"]
)

PUSH_PULL_LEGS_POWER: Final[tuple[WorkoutBlock, ...]] = (
    WorkoutBlock("Push (Power)", ["chest", "delts_front"], ["triceps", "delts_side"]),
    WorkoutBlock("Pull (Power)", ["back_lats", "back_traps"], ["biceps", "delts_rear"]),
    WorkoutBlock("Legs (Power)", ["quads", "hamstrings"], ["glutes", "calves", "abs"]),
)
