"""
Pure metric computation functions.

Rounding policy shared by the progression strategies, plus the
analytics over logged workouts: estimated 1RM, RPE bins, tempo, and
per-lift snapshots.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Literal

from .catalog import ExerciseCatalog
from .config import (
    E1RM_RPE_WINDOW,
    RPE_BINS,
    SLOW_ECCENTRIC_SECONDS,
    SLOW_ECCENTRIC_SHARE,
    SLOW_TEMPO_MESSAGE,
)
from .dates import days_between, format_date, parse_date
from .models import ActiveProgram, CompletedSet, WorkoutLog


def round_half_away(value: float) -> float:
    """Round to the nearest integer, halves away from zero."""
    return math.copysign(math.floor(abs(value) + 0.5), value)


def round_to_increment(value: float, increment: float) -> float:
    """
    Round a load to the nearest plate increment.

    round(value / increment) * increment

    Args:
        value: Load to round
        increment: Smallest loadable step; <= 0 disables rounding

    Returns:
        Rounded load (unchanged when increment <= 0)
    """
    if increment <= 0:
        return value
    return round_half_away(value / increment) * increment


def calculate_e1rm(load: float, reps: int) -> float:
    """
    Estimated one-rep max (Epley).

    e1RM = load × (1 + reps / 30)
    """
    return load * (1 + reps / 30.0)


def is_e1rm_eligible(s: CompletedSet) -> bool:
    """A set counts toward e1RM if it is a working set within the RPE window and not a grind-out failure."""
    failed = s.reps < s.target_reps and s.rpe >= 10.0
    low, high = E1RM_RPE_WINDOW
    return not failed and not s.is_warmup and low <= s.rpe <= high


@dataclass(frozen=True)
class E1RMPoint:
    date: str
    e1rm: float


@dataclass(frozen=True)
class RPERangeBin:
    label: str
    count: int
    period_weeks: int = 0


def e1rm_history(logs: list[WorkoutLog], exercise_id: str) -> list[E1RMPoint]:
    """
    Estimated 1RM per log for one exercise, from the heaviest eligible set.

    Logs without the exercise, or without an eligible set, are skipped.
    """
    points: list[E1RMPoint] = []
    for log in logs:
        entry = log.exercise(exercise_id)
        if entry is None:
            continue
        eligible = [s for s in entry.sets if is_e1rm_eligible(s)]
        if not eligible:
            continue
        top = max(eligible, key=lambda s: s.load)
        points.append(E1RMPoint(date=log.date_completed, e1rm=calculate_e1rm(top.load, top.reps)))
    return points


def weeks_spanned(earliest: date | None, latest: date | None) -> int:
    """
    Calendar weeks covered by a date range, counting partial weeks.

    max(1, ceil((days + 1) / 7)); 0 when either end is missing.
    """
    if earliest is None or latest is None:
        return 0
    return max(1, math.ceil((days_between(earliest, latest) + 1) / 7))


def rpe_distribution(logs: list[WorkoutLog], exercise_id: str) -> list[RPERangeBin]:
    """
    Count working-set RPEs for one exercise into fixed bins (lower bound inclusive).

    Every bin carries the number of weeks spanned by the dated logs that
    contain the exercise.
    """
    counts = [0] * len(RPE_BINS)
    dates: list[date] = []
    for log in logs:
        entry = log.exercise(exercise_id)
        if entry is None:
            continue
        logged = parse_date(log.date_completed)
        if logged is not None:
            dates.append(logged)
        for s in entry.sets:
            if s.is_warmup:
                continue
            for i, (_, low, high) in enumerate(RPE_BINS):
                if low <= s.rpe < high:
                    counts[i] += 1
                    break

    weeks = weeks_spanned(min(dates, default=None), max(dates, default=None))
    return [
        RPERangeBin(label=label, count=n, period_weeks=weeks) for (label, _, _), n in zip(RPE_BINS, counts)
    ]


@dataclass(frozen=True)
class TempoWarning:
    level: Literal["info", "warning"]
    message: str


def analyze_tempo(logs: list[WorkoutLog]) -> TempoWarning | None:
    """
    Warn when slow eccentrics dominate the logged working sets.

    Only non-warmup sets with a recorded tempo count.  Returns a warning
    when more than half of them have an eccentric of 5 s or longer.
    """
    total = 0
    slow = 0
    for log in logs:
        for entry in log.exercises:
            for s in entry.sets:
                if s.actual_tempo is None or s.is_warmup:
                    continue
                total += 1
                if s.actual_tempo.eccentric >= SLOW_ECCENTRIC_SECONDS:
                    slow += 1

    if total == 0 or slow / total <= SLOW_ECCENTRIC_SHARE:
        return None
    return TempoWarning(level="warning", message=SLOW_TEMPO_MESSAGE)


@dataclass(frozen=True)
class BlockPhaseSegment:
    start_date: str
    end_date: str
    phase: str


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """Chart-ready analytics for one tier-1 lift."""

    lift_id: str
    e1rm_history: list[E1RMPoint]
    rpe_distribution: list[RPERangeBin]
    block_phase_segments: list[BlockPhaseSegment]
    last_updated_at: str


def tier1_lift_ids(program: ActiveProgram, logs: list[WorkoutLog], catalog: ExerciseCatalog) -> list[str]:
    """Sorted ids of tier-1 exercises that are scheduled or logged."""
    exercises = catalog.by_id()
    ids = {slot.exercise_id for session in program.weekly_schedule for slot in session.exercises}
    ids |= {entry.exercise_id for log in logs for entry in log.exercises}
    return sorted(i for i in ids if i in exercises and exercises[i].tier == 1)


def block_phase_segments(
    program: ActiveProgram,
    logs: list[WorkoutLog],
    today: date | None = None,
) -> list[BlockPhaseSegment]:
    """The current block from its start date to the latest log (or today)."""
    if parse_date(program.start_date) is None:
        return []
    log_dates = [d for d in (parse_date(log.date_completed) for log in logs) if d is not None]
    end = max(log_dates, default=None) or today or date.today()
    return [
        BlockPhaseSegment(
            start_date=program.start_date,
            end_date=format_date(end),
            phase=program.current_block_phase,
        )
    ]


def update_snapshots(
    program: ActiveProgram,
    logs: list[WorkoutLog],
    catalog: ExerciseCatalog,
    now: datetime | None = None,
) -> list[AnalyticsSnapshot]:
    """
    Rebuild the analytics snapshot of every tier-1 lift.

    Args:
        program: Active program (schedule, start date, phase)
        logs: All logged workouts
        catalog: Exercise catalog used to find tier-1 lifts
        now: Timestamp recorded on the snapshots (default: current UTC time)

    Returns:
        One snapshot per tier-1 lift id, sorted by id
    """
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
    segments = block_phase_segments(program, logs, now.date())
    return [
        AnalyticsSnapshot(
            lift_id=lift_id,
            e1rm_history=e1rm_history(logs, lift_id),
            rpe_distribution=rpe_distribution(logs, lift_id),
            block_phase_segments=segments,
            last_updated_at=stamp,
        )
        for lift_id in tier1_lift_ids(program, logs, catalog)
    ]
