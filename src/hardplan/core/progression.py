"""
Load/rep progression after each logged workout.

Three strategies share one contract, ``next_state(current, log, exercise)``:

- novice: single linear progression with stall and hiatus resets
- intermediate: 3-week wave loading driven by the program week
- double_progression: reps first within a range, then load

The strategy set is closed; ``ProgressionStrategy.kind`` selects the
branch and ``select_strategy`` is the router.  Every transition returns a
new ProgressionState.
"""

from dataclasses import dataclass, replace
from datetime import date

from loguru import logger

from .catalog import ExerciseCatalog
from .config import (
    DEFAULT_REP_RANGE,
    HIATUS_DAYS,
    HIATUS_MULTIPLIER,
    LOWER_BODY_MUSCLES,
    MANDATORY_DELOAD_BLOCKS,
    NOVICE_STALL_FAILURES,
    NOVICE_STALL_MULTIPLIER,
    RECENT_RPE_WINDOW,
    WAVE_REP_TARGETS,
    WAVE_STEP_INCREMENTS,
)
from .dates import days_between, parse_date
from .metrics import round_to_increment
from .models import (
    PROGRESSION_KINDS,
    ActiveProgram,
    Exercise,
    ProgressionKind,
    ProgressionState,
    ScheduledSession,
    UserProfile,
    WorkoutLog,
)

RepRange = tuple[int, int]


@dataclass(frozen=True)
class ProgressionStrategy:
    """
    One configured progression algorithm.

    Only the fields relevant to ``kind`` are read: ``today`` by novice,
    ``goal``/``current_week``/``blocks_without_deload`` by intermediate,
    ``rep_range`` by double_progression.
    """

    kind: ProgressionKind
    increment: float
    rep_range: RepRange = DEFAULT_REP_RANGE
    goal: str = "strength"
    current_week: int = 1
    blocks_without_deload: int = 0
    today: date | None = None

    def __post_init__(self) -> None:
        if self.kind not in PROGRESSION_KINDS:
            raise ValueError(f"Unknown progression kind: {self.kind!r}")
        low, high = self.rep_range
        if low < 1 or low > high:
            raise ValueError(f"Invalid rep range: {self.rep_range}")

    def next_state(
        self,
        current: ProgressionState,
        log: WorkoutLog,
        exercise: Exercise,
    ) -> ProgressionState:
        """Compute the state after ``log``; unchanged if the log lacks the exercise."""
        if self.kind == "novice":
            return _novice_next(self, current, log, exercise)
        if self.kind == "intermediate":
            return _wave_next(self, current, log, exercise)
        return _double_next(self, current, log, exercise)


# ---------------------------------------------------------------------------
# Novice: linear progression
# ---------------------------------------------------------------------------


def _load_increment(exercise: Exercise, increment: float) -> float:
    """Lower-body lifts jump by two plates."""
    return increment * 2 if exercise.primary_muscle in LOWER_BODY_MUSCLES else increment


def _reduce(current: ProgressionState, multiplier: float, increment: float) -> ProgressionState:
    return replace(
        current,
        current_load=max(0.0, round_to_increment(current.current_load * multiplier, increment)),
        consecutive_fails=0,
    )


def _days_since(date_str: str, today: date | None) -> int:
    logged = parse_date(date_str)
    if logged is None:
        return 0
    return days_between(logged, today or date.today())


def _novice_next(
    strategy: ProgressionStrategy,
    current: ProgressionState,
    log: WorkoutLog,
    exercise: Exercise,
) -> ProgressionState:
    entry = log.exercise(exercise.id)
    if entry is None:
        return current

    inc = strategy.increment

    # Hiatus overrides the session outcome
    if _days_since(log.date_completed, strategy.today) > HIATUS_DAYS:
        logger.debug("Novice hiatus reduction", exercise_id=exercise.id)
        return _reduce(current, HIATUS_MULTIPLIER, inc)

    success = all(s.reps >= s.target_reps for s in entry.sets)
    if success:
        return replace(
            current,
            current_load=round_to_increment(current.current_load + _load_increment(exercise, inc), inc),
            consecutive_fails=0,
        )

    failures = current.consecutive_fails + 1
    if failures >= NOVICE_STALL_FAILURES:
        logger.debug("Novice stall reset", exercise_id=exercise.id, failures=failures)
        reduced = _reduce(current, NOVICE_STALL_MULTIPLIER, inc)
        return replace(reduced, reset_count=current.reset_count + 1)
    return replace(current, consecutive_fails=failures)


# ---------------------------------------------------------------------------
# Intermediate: wave loading
# ---------------------------------------------------------------------------


def _wave_next(
    strategy: ProgressionStrategy,
    current: ProgressionState,
    log: WorkoutLog,
    exercise: Exercise,
) -> ProgressionState:
    if log.exercise(exercise.id) is None:
        return current

    inc = strategy.increment
    base = current.base_load if current.base_load > 0 else current.current_load
    reps = WAVE_REP_TARGETS.get(strategy.goal, WAVE_REP_TARGETS["strength"])
    step = inc * WAVE_STEP_INCREMENTS
    week = strategy.current_week

    if week in (1, 2, 3):
        next_state = replace(
            current,
            current_rep_target=reps[week - 1],
            current_load=round_to_increment(base + step * (week - 1), inc),
        )
    elif strategy.blocks_without_deload >= MANDATORY_DELOAD_BLOCKS:
        # Back to week-1 numbers without raising the base
        logger.debug("Wave reset at block end", exercise_id=exercise.id)
        next_state = replace(
            current,
            current_rep_target=reps[0],
            current_load=round_to_increment(base, inc),
        )
    else:
        new_base = round_to_increment(base + step, inc)
        next_state = replace(
            current,
            base_load=new_base,
            current_rep_target=reps[0],
            current_load=new_base,
        )

    return replace(next_state, consecutive_fails=0)


# ---------------------------------------------------------------------------
# Double progression (accessories)
# ---------------------------------------------------------------------------


def _double_next(
    strategy: ProgressionStrategy,
    current: ProgressionState,
    log: WorkoutLog,
    exercise: Exercise,
) -> ProgressionState:
    entry = log.exercise(exercise.id)
    if entry is None:
        return current

    low, high = strategy.rep_range
    inc = strategy.increment
    target = current.current_rep_target or low

    if all(s.reps >= high for s in entry.sets):
        return replace(
            current,
            current_load=round_to_increment(current.current_load + inc, inc),
            current_rep_target=low,
        )
    return replace(current, current_rep_target=min(target + 1, high))


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


def select_strategy(
    exercise: Exercise,
    user: UserProfile,
    program: ActiveProgram,
    rep_range: RepRange | None = None,
    today: date | None = None,
) -> ProgressionStrategy:
    """
    Pick the progression algorithm for one exercise.

    Order: explicit profile override, then isolation → double progression,
    then training age (novice → novice, otherwise intermediate).
    """
    kind: ProgressionKind
    if exercise.id in user.progression_overrides:
        kind = user.progression_overrides[exercise.id]
    elif exercise.type == "isolation":
        kind = "double_progression"
    elif user.training_age == "novice":
        kind = "novice"
    else:
        kind = "intermediate"

    logger.debug("Progression strategy selected", exercise_id=exercise.id, kind=kind)
    return ProgressionStrategy(
        kind=kind,
        increment=user.min_plate_increment,
        rep_range=rep_range or DEFAULT_REP_RANGE,
        goal=user.goal,
        current_week=program.current_week,
        blocks_without_deload=program.consecutive_blocks_without_deload,
        today=today,
    )


def _record_rpes(state: ProgressionState, log: WorkoutLog) -> ProgressionState:
    entry = log.exercise(state.exercise_id)
    if entry is None:
        return state
    rpes = [s.rpe for s in entry.sets if not s.is_warmup and s.rpe > 0]
    if not rpes:
        return state
    return replace(state, recent_rpes=(list(state.recent_rpes) + rpes)[-RECENT_RPE_WINDOW:])


def calculate_next_state(
    current: ProgressionState,
    log: WorkoutLog,
    exercise: Exercise,
    user: UserProfile,
    program: ActiveProgram,
    rep_range: RepRange | None = None,
    today: date | None = None,
) -> ProgressionState:
    """
    Route one exercise through its strategy and record the logged RPEs.

    Args:
        current: State before the workout
        log: The completed workout
        exercise: Catalog entry for current.exercise_id
        user: Athlete profile (overrides, training age, goal, plate increment)
        program: Program supplying week and deload counters
        rep_range: Double-progression range; defaults to 8–12
        today: Reference date for hiatus detection (default: date.today())

    Returns:
        The next ProgressionState (``current`` itself when the log has no entry)
    """
    strategy = select_strategy(exercise, user, program, rep_range, today)
    next_state = strategy.next_state(current, log, exercise)
    return _record_rpes(next_state, log)


def _apply_targets(
    sessions: list[ScheduledSession],
    states: dict[str, ProgressionState],
) -> list[ScheduledSession]:
    updated: list[ScheduledSession] = []
    for session in sessions:
        slots = []
        for slot in session.exercises:
            state = states.get(slot.exercise_id)
            if state is None:
                slots.append(slot)
                continue
            slots.append(
                replace(
                    slot,
                    target_load=state.current_load,
                    target_reps=state.current_rep_target or slot.target_reps,
                )
            )
        updated.append(replace(session, exercises=slots))
    return updated


def apply_workout_log(
    program: ActiveProgram,
    log: WorkoutLog,
    user: UserProfile,
    catalog: ExerciseCatalog,
    rep_ranges: dict[str, RepRange] | None = None,
    today: date | None = None,
) -> ActiveProgram:
    """
    Advance every logged exercise and feed the new targets into the schedule.

    A state is created on first encounter.  A zero working load is resolved
    from the heaviest logged set before the strategy runs.  Logged ids
    missing from the catalog are skipped.
    """
    exercises = catalog.by_id()
    rep_ranges = rep_ranges or {}
    states = dict(program.progression_data)

    for entry in log.exercises:
        exercise = exercises.get(entry.exercise_id)
        if exercise is None:
            logger.debug("Progression: unknown exercise skipped", exercise_id=entry.exercise_id)
            continue

        current = states.get(exercise.id) or ProgressionState(exercise_id=exercise.id)
        if current.current_load == 0 and entry.sets:
            anchor = max(s.load for s in entry.sets)
            current = replace(current, current_load=anchor, base_load=current.base_load or anchor)

        states[exercise.id] = calculate_next_state(
            current,
            log,
            exercise,
            user,
            program,
            rep_ranges.get(exercise.id),
            today,
        )

    return replace(
        program,
        progression_data=states,
        weekly_schedule=_apply_targets(program.weekly_schedule, states),
    )


def replay_workout_logs(
    program: ActiveProgram,
    logs: list[WorkoutLog],
    user: UserProfile,
    catalog: ExerciseCatalog,
    rep_ranges: dict[str, RepRange] | None = None,
    today: date | None = None,
) -> ActiveProgram:
    """
    Apply a batch of workout logs in date order.

    Each log is judged as of the next dated log in the batch, so only a real
    gap between two sessions counts as a hiatus.  The newest log is judged
    against ``today``.  Skipped workouts are ignored; logs whose date does
    not parse are applied first.
    """
    applied = [log for log in logs if log.status != "skipped"]
    ordered = sorted(applied, key=lambda log: parse_date(log.date_completed) or date.min)
    dates = [parse_date(log.date_completed) for log in ordered]

    for i, log in enumerate(ordered):
        successor = next((d for d in dates[i + 1 :] if d is not None), None)
        program = apply_workout_log(program, log, user, catalog, rep_ranges, successor or today)
    return program
