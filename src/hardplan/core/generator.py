"""
Program generation for hardplan.

Deterministic transformation UserProfile → ActiveProgram:
split selection, weak-point ordering, per-muscle volume budget,
exercise selection by tier preference, rep/RPE prescription, and a
seeded progression map.  The catalog snapshot and the start date are
explicit inputs, so the same arguments always give the same program.
"""

from datetime import date

from loguru import logger

from .catalog import ExerciseCatalog
from .config import (
    ACCESSORY_TIER_PREFERENCE,
    ACCESSORY_VOLUME_FRACTION,
    COMPETITION_LIFT_NOTE,
    FULL_BODY_SPLIT,
    HYPERTROPHY_ACCESSORY_RPE,
    HYPERTROPHY_PRIMARY_RPE,
    MIN_ACCESSORY_SETS,
    MIN_PRIMARY_SETS,
    PRIMARY_TIER_PREFERENCE,
    PUSH_PULL_LEGS,
    PUSH_PULL_LEGS_POWER,
    STRENGTH_MAIN_RPE,
    STRENGTH_OTHER_RPE,
    TARGET_REPS,
    UPPER_ACCESSORY_DAY,
    UPPER_LOWER_SPLIT,
    WEEKLY_SET_TARGETS,
)
from .dates import format_date
from .metrics import round_half_away
from .models import (
    ActiveProgram,
    Exercise,
    ProgressionState,
    ScheduledExercise,
    ScheduledSession,
    UserProfile,
    WorkoutBlock,
)


def get_split_template(day_count: int) -> list[WorkoutBlock]:
    """
    Weekly session plans for a number of training days.

    Args:
        day_count: Available training days (fewer than 3 is treated as 3)

    Returns:
        3 → full body ×3, 4 → upper/lower ×2,
        5 → push/pull/legs + upper accessory, 6+ → push/pull/legs ×2
    """
    day_count = max(day_count, 3)
    if day_count == 3:
        return list(FULL_BODY_SPLIT)
    if day_count == 4:
        return list(UPPER_LOWER_SPLIT)
    if day_count == 5:
        return list(PUSH_PULL_LEGS) + [UPPER_ACCESSORY_DAY]
    return list(PUSH_PULL_LEGS) + list(PUSH_PULL_LEGS_POWER)


def reorder_for_weak_points(muscles: list[str], weak_points: list[str]) -> list[str]:
    """Weak-point muscles first, each group in muscle-name order."""
    weak = set(weak_points)
    return sorted(muscles, key=lambda m: (m not in weak, m))


def generate_weekly_blocks(
    profile: UserProfile,
    assigned_blocks: dict[int, WorkoutBlock] | None = None,
) -> list[WorkoutBlock]:
    """
    Preview the week's session plans without exercise detail.

    Pre-assigned day → block mappings replace the template; blocks are then
    returned in day order.  Accessory muscles come back weak-point ordered.
    """
    if assigned_blocks:
        plans = [assigned_blocks[day] for day in sorted(assigned_blocks)]
    else:
        plans = get_split_template(len(set(profile.available_days)))

    return [
        WorkoutBlock(
            name=plan.name,
            primary_muscles=list(plan.primary_muscles),
            accessory_muscles=reorder_for_weak_points(plan.accessory_muscles, profile.weak_points),
        )
        for plan in plans
    ]


def count_muscle_hits(blocks: list[WorkoutBlock]) -> dict[str, int]:
    """Weekly number of slots (primary or accessory) per muscle."""
    counts: dict[str, int] = {}
    for block in blocks:
        for muscle in list(block.primary_muscles) + list(block.accessory_muscles):
            counts[muscle] = counts.get(muscle, 0) + 1
    return counts


def calculate_sets_per_session(weekly_target: int, hit_count: int, is_primary: bool) -> int:
    """
    Per-session sets for one slot.

    sets = round(weekly_target / hit_count), ×0.7 for accessories,
    floored at 3 (primary) or 2 (accessory).
    """
    floor = MIN_PRIMARY_SETS if is_primary else MIN_ACCESSORY_SETS
    if hit_count <= 0:
        return floor
    per_session = weekly_target / hit_count
    if not is_primary:
        per_session *= ACCESSORY_VOLUME_FRACTION
    return max(floor, int(round_half_away(per_session)))


def select_exercise(
    muscle: str,
    is_primary: bool,
    exercises: list[Exercise],
    excluded: set[str],
) -> Exercise | None:
    """
    Best catalog match for a (muscle, role) slot.

    Sort: tier preference (primary 1→2→3, accessory 2→3→1), competition
    lifts first, then name.  None when nothing targets the muscle.
    """
    preference = PRIMARY_TIER_PREFERENCE if is_primary else ACCESSORY_TIER_PREFERENCE
    candidates = [e for e in exercises if e.primary_muscle == muscle and e.id not in excluded]
    if not candidates:
        return None

    def sort_key(e: Exercise) -> tuple[int, bool, str]:
        tier_rank = preference.index(e.tier) if e.tier in preference else len(preference)
        return (tier_rank, not e.is_competition_lift, e.name)

    return min(candidates, key=sort_key)


def target_reps(goal: str, is_primary: bool) -> int:
    primary, accessory = TARGET_REPS[goal]
    return primary if is_primary else accessory


def target_rpe(goal: str, is_primary: bool, is_competition_lift: bool) -> float:
    """Strength: 8.5 for primary slots and competition lifts, else 8.0.  Hypertrophy: 7.5 primary, 8.5 accessory."""
    if goal == "strength":
        return STRENGTH_MAIN_RPE if (is_primary or is_competition_lift) else STRENGTH_OTHER_RPE
    return HYPERTROPHY_PRIMARY_RPE if is_primary else HYPERTROPHY_ACCESSORY_RPE


def normalized_days(days: list[int], count: int) -> list[int]:
    """
    Assign weekdays to ``count`` sessions.

    Unique requested days are used in order; if there are too few, the gap
    is padded from day 1 upward skipping used days.
    """
    if not days:
        return list(range(1, count + 1))

    unique = sorted(set(days))
    if len(unique) >= count:
        return unique[:count]

    padded = list(unique)
    candidate = 1
    while len(padded) < count and candidate <= 7:
        if candidate not in padded:
            padded.append(candidate)
        candidate += 1
    return sorted(padded)


def _schedule_slot(
    muscle: str,
    is_primary: bool,
    order: int,
    profile: UserProfile,
    exercises: list[Exercise],
    hit_counts: dict[str, int],
) -> ScheduledExercise | None:
    exercise = select_exercise(muscle, is_primary, exercises, set(profile.excluded_exercises))
    if exercise is None:
        logger.debug("No exercise for slot", muscle=muscle, primary=is_primary)
        return None

    return ScheduledExercise(
        exercise_id=exercise.id,
        order=order,
        target_sets=calculate_sets_per_session(
            WEEKLY_SET_TARGETS[profile.training_age],
            hit_counts.get(muscle, 1),
            is_primary,
        ),
        target_reps=target_reps(profile.goal, is_primary),
        target_load=0.0,
        target_rpe=target_rpe(profile.goal, is_primary, exercise.is_competition_lift),
        note=COMPETITION_LIFT_NOTE if exercise.is_competition_lift else "",
        is_weak_point_priority=muscle in profile.weak_points,
    )


def build_session(
    block: WorkoutBlock,
    day_of_week: int,
    profile: UserProfile,
    exercises: list[Exercise],
    hit_counts: dict[str, int],
) -> ScheduledSession:
    """Fill one block's primary then accessory slots; empty slots are skipped."""
    slots: list[ScheduledExercise] = []
    roles = [(m, True) for m in block.primary_muscles] + [(m, False) for m in block.accessory_muscles]
    for muscle, is_primary in roles:
        slot = _schedule_slot(muscle, is_primary, len(slots) + 1, profile, exercises, hit_counts)
        if slot is not None:
            slots.append(slot)
    return ScheduledSession(day_of_week=day_of_week, name=block.name, exercises=slots)


def seed_progression(schedule: list[ScheduledSession]) -> dict[str, ProgressionState]:
    """One state per scheduled exercise id; load stays 0 until the first log."""
    progression: dict[str, ProgressionState] = {}
    for session in schedule:
        for slot in session.exercises:
            progression[slot.exercise_id] = ProgressionState(
                exercise_id=slot.exercise_id,
                current_rep_target=slot.target_reps,
            )
    return progression


def generate_program(
    profile: UserProfile,
    catalog: ExerciseCatalog,
    assigned_blocks: dict[int, WorkoutBlock] | None = None,
    start_date: date | None = None,
) -> ActiveProgram:
    """
    Build the initial program for an athlete.

    Args:
        profile: Athlete profile
        catalog: Exercise catalog snapshot
        assigned_blocks: Optional {day_of_week: WorkoutBlock} from onboarding;
            replaces both the split template and the profile's available days
        start_date: Program start (default: today)

    Returns:
        ActiveProgram in the introductory phase, week 1, sessions sorted by day
    """
    blocks = generate_weekly_blocks(profile, assigned_blocks)
    hit_counts = count_muscle_hits(blocks)
    exercises = catalog.get_all_exercises()

    if assigned_blocks:
        days = sorted(assigned_blocks)
    else:
        days = normalized_days(profile.available_days, len(blocks))

    sessions = []
    for i, block in enumerate(blocks):
        day = days[i] if i < len(days) else min(i + 1, 7)
        sessions.append(build_session(block, day, profile, exercises, hit_counts))
    sessions.sort(key=lambda s: s.day_of_week)

    program = ActiveProgram(
        start_date=format_date(start_date or date.today()),
        current_block_phase="introductory",
        current_week=1,
        weekly_schedule=sessions,
        progression_data=seed_progression(sessions),
    )
    logger.info(
        "Generated program",
        sessions=len(sessions),
        exercises=len(program.progression_data),
        training_age=profile.training_age,
        goal=profile.goal,
    )
    return program
