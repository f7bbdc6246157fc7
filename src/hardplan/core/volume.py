"""
Weekly volume accounting (Overlap Rule).

Each set credits 1.0 to its exercise's primary muscle and the impact
factor to every secondary muscle.  Exercises absent from the catalog
contribute nothing.
"""

from collections import defaultdict

from loguru import logger

from .catalog import ExerciseCatalog
from .config import PRIMARY_MUSCLE_CREDIT, SECONDARY_FALLBACK_FACTOR
from .models import Exercise, ScheduledSession, WorkoutLog


def effective_factor(factor: float) -> float:
    """Secondary credit for one set; an exact 0.0 factor is treated as unspecified."""
    return SECONDARY_FALLBACK_FACTOR if factor == 0 else factor


def _credit(totals: dict[str, float], exercise: Exercise, sets: int) -> None:
    totals[exercise.primary_muscle] += PRIMARY_MUSCLE_CREDIT * sets
    for impact in exercise.secondary_muscles:
        totals[impact.muscle] += effective_factor(impact.factor) * sets


def calculate_weekly_volume(logs: list[WorkoutLog], catalog: ExerciseCatalog) -> dict[str, float]:
    """
    Weekly set-equivalents per muscle from logged workouts.

    Args:
        logs: Workouts in the week being measured
        catalog: Exercise catalog snapshot

    Returns:
        {muscle: set-equivalents}; muscles never hit are absent
    """
    exercises = catalog.by_id()
    totals: dict[str, float] = defaultdict(float)

    for log in logs:
        for entry in log.exercises:
            exercise = exercises.get(entry.exercise_id)
            if exercise is None:
                logger.debug("Volume: unknown exercise skipped", exercise_id=entry.exercise_id)
                continue
            _credit(totals, exercise, len(entry.sets))

    return dict(totals)


def calculate_schedule_volume(
    sessions: list[ScheduledSession],
    catalog: ExerciseCatalog,
) -> dict[str, float]:
    """Same Overlap Rule applied to prescribed target sets of a weekly schedule."""
    exercises = catalog.by_id()
    totals: dict[str, float] = defaultdict(float)

    for session in sessions:
        for slot in session.exercises:
            exercise = exercises.get(slot.exercise_id)
            if exercise is None:
                continue
            _credit(totals, exercise, slot.target_sets)

    return dict(totals)
