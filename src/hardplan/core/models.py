"""
Data models for hardplan.

All core dataclasses representing the exercise catalog, the athlete
profile, the weekly program, and logged workouts.  Records are frozen:
every transition builds a new instance with ``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from typing import Literal, get_args

MuscleGroup = Literal[
    "quads",
    "hamstrings",
    "glutes",
    "calves",
    "chest",
    "back_lats",
    "back_traps",
    "back_lower",
    "delts_front",
    "delts_side",
    "delts_rear",
    "biceps",
    "triceps",
    "abs",
]
MovementPattern = Literal[
    "squat",
    "hinge",
    "lunge",
    "push_horizontal",
    "push_vertical",
    "pull_horizontal",
    "pull_vertical",
    "isolation",
]
ExerciseType = Literal["compound", "isolation", "machine"]
Equipment = Literal["barbell", "dumbbell", "machine", "cable", "bodyweight"]
TrainingAge = Literal["novice", "intermediate", "advanced"]
Goal = Literal["strength", "hypertrophy"]
UnitSystem = Literal["lbs", "kg"]
BlockPhase = Literal["introductory", "accumulation", "intensification", "realization", "deload"]
ProgressionKind = Literal["novice", "intermediate", "double_progression"]
SetTag = Literal["warmup", "aps", "drop_set", "rest_pause"]
WorkoutStatus = Literal["completed", "skipped", "combined"]
WorkoutMode = Literal["normal", "short_on_time"]

MUSCLE_GROUPS: tuple[str, ...] = get_args(MuscleGroup)
MOVEMENT_PATTERNS: tuple[str, ...] = get_args(MovementPattern)
EXERCISE_TYPES: tuple[str, ...] = get_args(ExerciseType)
EQUIPMENT_TYPES: tuple[str, ...] = get_args(Equipment)
TRAINING_AGES: tuple[str, ...] = get_args(TrainingAge)
GOALS: tuple[str, ...] = get_args(Goal)
BLOCK_PHASES: tuple[str, ...] = get_args(BlockPhase)
PROGRESSION_KINDS: tuple[str, ...] = get_args(ProgressionKind)


def _check_choice(value: str, choices: tuple[str, ...], name: str) -> None:
    if value not in choices:
        raise ValueError(f"Invalid {name}: {value!r}. Must be one of {choices}")


def _check_day(day: int, name: str = "day_of_week") -> None:
    if not 1 <= day <= 7:
        raise ValueError(f"{name} must be in 1..7, got {day}")


@dataclass(frozen=True)
class MuscleImpact:
    """Secondary-muscle stimulus of an exercise, as a fraction of a full set."""

    muscle: MuscleGroup
    factor: float

    def __post_init__(self) -> None:
        _check_choice(self.muscle, MUSCLE_GROUPS, "muscle")
        if not 0.0 <= self.factor <= 1.0:
            raise ValueError(f"factor must be in [0, 1], got {self.factor}")


@dataclass(frozen=True)
class Exercise:
    """
    One catalog entry.

    tier: 1 = competition/primary compound, 2 = compound variant, 3 = isolation.
    """

    id: str
    name: str
    pattern: MovementPattern
    type: ExerciseType
    equipment: Equipment
    primary_muscle: MuscleGroup
    secondary_muscles: list[MuscleImpact] = field(default_factory=list)
    default_tempo: str = ""
    tier: int = 2
    is_competition_lift: bool = False
    is_user_created: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Exercise id must be non-empty")
        _check_choice(self.pattern, MOVEMENT_PATTERNS, "pattern")
        _check_choice(self.type, EXERCISE_TYPES, "type")
        _check_choice(self.equipment, EQUIPMENT_TYPES, "equipment")
        _check_choice(self.primary_muscle, MUSCLE_GROUPS, "primary_muscle")
        if self.tier not in (1, 2, 3):
            raise ValueError(f"tier must be 1, 2 or 3, got {self.tier}")

    @property
    def is_primary_movement(self) -> bool:
        """True for competition lifts and compound-type movements."""
        return self.is_competition_lift or self.type == "compound"


@dataclass(frozen=True)
class UserProfile:
    """
    Athlete profile consumed read-only by every engine component.

    ``available_days`` holds weekday numbers (1..7).
    ``progression_overrides`` maps exercise id to a forced progression kind.
    """

    training_age: TrainingAge
    goal: Goal
    name: str = "Athlete"
    available_days: list[int] = field(default_factory=list)
    weak_points: list[MuscleGroup] = field(default_factory=list)
    excluded_exercises: list[str] = field(default_factory=list)
    unit: UnitSystem = "lbs"
    min_plate_increment: float = 2.5
    progression_overrides: dict[str, ProgressionKind] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_choice(self.training_age, TRAINING_AGES, "training_age")
        _check_choice(self.goal, GOALS, "goal")
        _check_choice(self.unit, ("lbs", "kg"), "unit")
        for day in self.available_days:
            _check_day(day, "available_days entry")
        for muscle in self.weak_points:
            _check_choice(muscle, MUSCLE_GROUPS, "weak point")
        for ex_id, kind in self.progression_overrides.items():
            if kind not in PROGRESSION_KINDS:
                raise ValueError(
                    f"progression_overrides[{ex_id!r}] must be one of {PROGRESSION_KINDS}, got {kind!r}"
                )


@dataclass(frozen=True)
class WorkoutBlock:
    """Session plan: a name plus the muscles trained in primary and accessory slots."""

    name: str
    primary_muscles: list[MuscleGroup]
    accessory_muscles: list[MuscleGroup]


@dataclass(frozen=True)
class ScheduledExercise:
    """One prescribed exercise slot inside a session."""

    exercise_id: str
    order: int
    target_sets: int
    target_reps: int
    target_load: float = 0.0
    target_rpe: float = 8.0
    note: str = ""
    is_weak_point_priority: bool = False

    def __post_init__(self) -> None:
        if self.target_sets < 1:
            raise ValueError("target_sets must be at least 1")
        if self.target_reps < 1:
            raise ValueError("target_reps must be at least 1")
        if self.target_load < 0:
            raise ValueError("target_load must be non-negative")


@dataclass(frozen=True)
class ScheduledSession:
    """A training day in the weekly schedule."""

    day_of_week: int
    name: str
    exercises: list[ScheduledExercise] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_day(self.day_of_week)

    @property
    def total_sets(self) -> int:
        """Sum of target sets across the session."""
        return sum(e.target_sets for e in self.exercises)


@dataclass(frozen=True)
class ProgressionState:
    """
    Per-exercise load/rep anchor carried between workouts.

    ``current_rep_target == 0`` means the target has not been seeded yet.
    """

    exercise_id: str
    current_load: float = 0.0
    base_load: float = 0.0
    current_rep_target: int = 0
    consecutive_fails: int = 0
    reset_count: int = 0
    recent_rpes: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.current_load < 0:
            raise ValueError("current_load must be non-negative")
        if self.base_load < 0:
            raise ValueError("base_load must be non-negative")
        if self.current_rep_target < 0:
            raise ValueError("current_rep_target must be non-negative")


@dataclass(frozen=True)
class ActiveProgram:
    """
    The athlete's running program: weekly schedule plus progression map.

    Phase and week counters are moved by the periodization helpers only.
    """

    start_date: str  # ISO date string; tolerant parsing on read
    current_block_phase: BlockPhase = "introductory"
    current_week: int = 1
    consecutive_blocks_without_deload: int = 0
    weekly_schedule: list[ScheduledSession] = field(default_factory=list)
    progression_data: dict[str, ProgressionState] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_choice(self.current_block_phase, BLOCK_PHASES, "current_block_phase")
        if self.current_week < 1:
            raise ValueError("current_week must be at least 1")
        if self.consecutive_blocks_without_deload < 0:
            raise ValueError("consecutive_blocks_without_deload must be non-negative")


@dataclass(frozen=True)
class Tempo:
    """Lifting tempo in seconds: eccentric, bottom pause, concentric, optional top pause."""

    eccentric: int
    pause: int
    concentric: int
    top_pause: int | None = None

    def __post_init__(self) -> None:
        if min(self.eccentric, self.pause, self.concentric, self.top_pause or 0) < 0:
            raise ValueError("tempo phases must be non-negative")


@dataclass(frozen=True)
class CompletedSet:
    """A single logged set: prescription versus what actually happened."""

    set_number: int
    target_load: float
    target_reps: int
    load: float
    reps: int
    rpe: float
    tags: list[SetTag] = field(default_factory=list)
    actual_tempo: Tempo | None = None

    def __post_init__(self) -> None:
        if self.reps < 0 or self.target_reps < 0:
            raise ValueError("reps must be non-negative")
        if self.load < 0 or self.target_load < 0:
            raise ValueError("load must be non-negative")

    @property
    def is_warmup(self) -> bool:
        return "warmup" in self.tags


@dataclass(frozen=True)
class CompletedExercise:
    """All logged sets of one exercise within a workout."""

    exercise_id: str
    sets: list[CompletedSet] = field(default_factory=list)
    was_swapped: bool = False
    original_exercise_id: str | None = None


@dataclass(frozen=True)
class WorkoutLog:
    """
    A finished (or skipped) workout as logged by the athlete.

    Dates are kept as strings; unparseable values degrade to "no date".
    """

    date_completed: str
    exercises: list[CompletedExercise] = field(default_factory=list)
    date_scheduled: str = ""
    program_id: str = ""
    status: WorkoutStatus = "completed"
    mode: WorkoutMode = "normal"
    notes: str = ""
    session_rpe: float | None = None

    def exercise(self, exercise_id: str) -> CompletedExercise | None:
        """Return the first logged entry for exercise_id, if any."""
        return next((e for e in self.exercises if e.exercise_id == exercise_id), None)
