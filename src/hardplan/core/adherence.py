"""
Schedule adherence: shifting after a missed day, merging a missed
session into the next one, and trimming a session when short on time.
"""

from dataclasses import dataclass, replace
from datetime import date

from loguru import logger

from .catalog import ExerciseCatalog
from .config import (
    ADHERENCE_GAP_DAYS,
    COMBINED_SET_CAP,
    RETURN_FROM_BREAK_LOAD_MODIFIER,
    TRIM_MAX_ACCESSORIES,
)
from .dates import add_days, days_between
from .models import ActiveProgram, Exercise, ScheduledExercise, ScheduledSession


@dataclass(frozen=True)
class AdherenceStatus:
    """On track, or returning after a break with a load modifier to apply."""

    returning_from_break: bool = False
    days_since_last_log: int = 0
    load_modifier: float = 1.0


def check_schedule_status(last_log_date: date, current_date: date) -> AdherenceStatus:
    """Flag a return from break when more than ADHERENCE_GAP_DAYS have passed."""
    gap = days_between(last_log_date, current_date)
    if gap > ADHERENCE_GAP_DAYS:
        return AdherenceStatus(
            returning_from_break=True,
            days_since_last_log=gap,
            load_modifier=RETURN_FROM_BREAK_LOAD_MODIFIER,
        )
    return AdherenceStatus(days_since_last_log=gap)


def _next_weekday(day: int) -> int:
    return (day % 7) + 1


def shift_schedule(program: ActiveProgram) -> ActiveProgram:
    """
    Push the whole week back by one day.

    The start date moves forward one day (left as-is if it does not parse);
    every session's weekday advances by one, wrapping 7 → 1.
    """
    shifted = sorted(
        (replace(s, day_of_week=_next_weekday(s.day_of_week)) for s in program.weekly_schedule),
        key=lambda s: s.day_of_week,
    )
    start = add_days(program.start_date, 1) or program.start_date
    return replace(program, start_date=start, weekly_schedule=shifted)


def _is_primary(slot: ScheduledExercise, lookup: dict[str, Exercise]) -> bool:
    exercise = lookup.get(slot.exercise_id)
    return exercise is not None and exercise.is_primary_movement


def combine_sessions(
    missed: ScheduledSession,
    current: ScheduledSession,
    catalog: ExerciseCatalog,
) -> ScheduledSession:
    """
    Merge a missed session into the next scheduled one.

    Primary movements (competition lifts and compounds) come first, in full.
    Accessories follow with one set less each (minimum 1) and are dropped
    when they would take the running total to COMBINED_SET_CAP or beyond.
    Exercises unknown to the catalog count as accessories.
    """
    lookup = catalog.by_id()
    pooled = list(current.exercises) + list(missed.exercises)
    primaries = [s for s in pooled if _is_primary(s, lookup)]
    accessories = [s for s in pooled if not _is_primary(s, lookup)]

    combined: list[ScheduledExercise] = []
    total_sets = 0

    for slot in primaries:
        combined.append(replace(slot, order=len(combined) + 1))
        total_sets += slot.target_sets

    for slot in accessories:
        sets = max(1, slot.target_sets - 1)
        if total_sets + sets >= COMBINED_SET_CAP:
            logger.debug("Combined session cap reached", exercise_id=slot.exercise_id, total_sets=total_sets)
            continue
        combined.append(replace(slot, target_sets=sets, order=len(combined) + 1))
        total_sets += sets

    return ScheduledSession(
        day_of_week=current.day_of_week,
        name=f"Combined: {missed.name} + {current.name}",
        exercises=combined,
    )


def trim_session(session: ScheduledSession, catalog: ExerciseCatalog) -> ScheduledSession:
    """
    Short-on-time version of a session.

    Keeps every primary movement and the first two accessories (one set
    less each, minimum 1); exercises missing from the catalog are dropped.
    """
    lookup = catalog.by_id()
    trimmed: list[ScheduledExercise] = []
    accessories = 0

    for slot in sorted(session.exercises, key=lambda s: s.order):
        exercise = lookup.get(slot.exercise_id)
        if exercise is None:
            continue
        if exercise.is_primary_movement:
            trimmed.append(slot)
            continue
        if accessories >= TRIM_MAX_ACCESSORIES:
            continue
        trimmed.append(replace(slot, target_sets=max(1, slot.target_sets - 1)))
        accessories += 1

    return replace(
        session,
        name=f"{session.name} (APS)",
        exercises=[replace(s, order=i + 1) for i, s in enumerate(trimmed)],
    )
