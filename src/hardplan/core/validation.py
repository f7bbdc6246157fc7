"""
Plan validation: schedule sanity checks, programming heuristics, and
best-effort corrective edits.

``validate`` is a pure function of (program, user, catalog): calling it
twice on the same inputs gives equal results.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Literal

from .catalog import ExerciseCatalog
from .config import (
    HYPERTROPHY_REP_RANGE,
    MAX_EXERCISES_PER_SESSION,
    MAX_TRAINING_DAYS,
    MAX_UNSCHEDULED_DAYS,
    MIN_TRAINING_DAYS,
    MIN_WEEKLY_FREQUENCY,
    REP_EMPHASIS_SHARE,
    RPE_RANGE,
    STRENGTH_REP_CEILING,
    WEEKDAY_NAMES,
    WEEKLY_VOLUME_RANGE,
)
from .models import ActiveProgram, ScheduledSession, UserProfile
from .volume import calculate_schedule_volume

Severity = Literal["warning", "error"]
RuleStatus = Literal["met", "needs_attention"]

ALL_DAYS: tuple[int, ...] = tuple(range(1, 8))


@dataclass(frozen=True)
class ValidationIssue:
    message: str
    affected_days: list[int]
    severity: Severity


@dataclass(frozen=True)
class RuleCheck:
    """One programming heuristic and whether the plan satisfies it."""

    rule: str
    status: RuleStatus
    details: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ValidationResult:
    issues: list[ValidationIssue]
    rule_summary: list[RuleCheck]

    @property
    def blocking_issues(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]


@dataclass(frozen=True)
class Correction:
    """A proposed edit; ``apply`` returns the corrected program."""

    description: str
    apply: Callable[[ActiveProgram], ActiveProgram]


def day_label(weekday: int) -> str:
    """Weekday name for 1..7 (1 = Sunday), else "Day N"."""
    if 1 <= weekday <= len(WEEKDAY_NAMES):
        return WEEKDAY_NAMES[weekday - 1]
    return f"Day {weekday}"


def _sessions_by_day(schedule: list[ScheduledSession]) -> dict[int, list[ScheduledSession]]:
    grouped: dict[int, list[ScheduledSession]] = {}
    for session in schedule:
        grouped.setdefault(session.day_of_week, []).append(session)
    return grouped


# ---------------------------------------------------------------------------
# Schedule issues
# ---------------------------------------------------------------------------


def schedule_issues(schedule: list[ScheduledSession]) -> list[ValidationIssue]:
    """Duplicate days (error); too few/many days, crowded sessions, open weekdays (warnings)."""
    issues: list[ValidationIssue] = []
    grouped = _sessions_by_day(schedule)

    duplicates = sorted(day for day, sessions in grouped.items() if len(sessions) > 1)
    if duplicates:
        issues.append(
            ValidationIssue(
                message="Multiple sessions assigned to the same day: "
                + ", ".join(day_label(d) for d in duplicates),
                affected_days=duplicates,
                severity="error",
            )
        )

    count = len(schedule)
    if count < MIN_TRAINING_DAYS:
        issues.append(
            ValidationIssue(
                message=f"Only {count} training day{'' if count == 1 else 's'}. "
                f"Aim for at least {MIN_TRAINING_DAYS} per week for progress.",
                affected_days=list(ALL_DAYS),
                severity="warning",
            )
        )
    if count > MAX_TRAINING_DAYS:
        issues.append(
            ValidationIssue(
                message=f"{count} training days detected. Consider scheduling at least one full rest day.",
                affected_days=list(ALL_DAYS),
                severity="warning",
            )
        )

    crowded = [s.day_of_week for s in schedule if len(s.exercises) > MAX_EXERCISES_PER_SESSION]
    if crowded:
        issues.append(
            ValidationIssue(
                message=f"Some days have more than {MAX_EXERCISES_PER_SESSION} exercises; "
                "consider splitting or trimming volume.",
                affected_days=crowded,
                severity="warning",
            )
        )

    open_days = [d for d in ALL_DAYS if d not in grouped]
    if len(open_days) >= MAX_UNSCHEDULED_DAYS:
        issues.append(
            ValidationIssue(
                message="Several days are unscheduled ("
                + ", ".join(day_label(d) for d in open_days)
                + "). Ensure weekly balance.",
                affected_days=open_days,
                severity="warning",
            )
        )

    return issues


# ---------------------------------------------------------------------------
# Programming heuristics
# ---------------------------------------------------------------------------


def _volume_rule(volume: dict[str, float]) -> RuleCheck:
    low, high = WEEKLY_VOLUME_RANGE
    out_of_range = [
        f"{muscle}: {sets:.1f} sets" for muscle, sets in sorted(volume.items()) if not low <= sets <= high
    ]
    return RuleCheck(
        rule=f"Weekly volume per muscle within {low:g}-{high:g} sets",
        status="needs_attention" if out_of_range else "met",
        details=out_of_range,
    )


def _frequency_rule(schedule: list[ScheduledSession], catalog: ExerciseCatalog) -> RuleCheck:
    lookup = catalog.by_id()
    touches: dict[str, int] = {}
    for session in schedule:
        hit: set[str] = set()
        for slot in session.exercises:
            exercise = lookup.get(slot.exercise_id)
            if exercise is None:
                continue
            hit.add(exercise.primary_muscle)
            hit.update(impact.muscle for impact in exercise.secondary_muscles)
        for muscle in hit:
            touches[muscle] = touches.get(muscle, 0) + 1

    infrequent = [
        f"{muscle}: {n}x/week" for muscle, n in sorted(touches.items()) if n < MIN_WEEKLY_FREQUENCY
    ]
    return RuleCheck(
        rule=f"Each trained muscle hit at least {MIN_WEEKLY_FREQUENCY}x per week",
        status="needs_attention" if infrequent else "met",
        details=infrequent,
    )


def _rep_emphasis_rule(schedule: list[ScheduledSession], goal: str) -> RuleCheck:
    total = 0
    matching = 0
    low, high = HYPERTROPHY_REP_RANGE
    for session in schedule:
        for slot in session.exercises:
            total += slot.target_sets
            if goal == "strength":
                in_zone = slot.target_reps <= STRENGTH_REP_CEILING
            else:
                in_zone = low <= slot.target_reps <= high
            if in_zone:
                matching += slot.target_sets

    if goal == "strength":
        rule = f"At least {REP_EMPHASIS_SHARE:.0%} of sets at {STRENGTH_REP_CEILING} reps or fewer"
    else:
        rule = f"At least {REP_EMPHASIS_SHARE:.0%} of sets in the {low}-{high} rep range"

    share = matching / total if total else 0.0
    met = total > 0 and share >= REP_EMPHASIS_SHARE
    return RuleCheck(
        rule=rule,
        status="met" if met else "needs_attention",
        details=[] if met else [f"{share:.0%} of {total} sets match"],
    )


def _rpe_rule(schedule: list[ScheduledSession]) -> RuleCheck:
    low, high = RPE_RANGE
    outside = [
        f"{session.name} #{slot.order}: RPE {slot.target_rpe:g}"
        for session in schedule
        for slot in session.exercises
        if not low <= slot.target_rpe <= high
    ]
    return RuleCheck(
        rule=f"Target RPE within {low:g}-{high:g}",
        status="needs_attention" if outside else "met",
        details=outside,
    )


def rule_summary(program: ActiveProgram, user: UserProfile, catalog: ExerciseCatalog) -> list[RuleCheck]:
    """Volume, frequency, rep emphasis, and RPE checks, in that order."""
    schedule = program.weekly_schedule
    return [
        _volume_rule(calculate_schedule_volume(schedule, catalog)),
        _frequency_rule(schedule, catalog),
        _rep_emphasis_rule(schedule, user.goal),
        _rpe_rule(schedule),
    ]


def validate(program: ActiveProgram, user: UserProfile, catalog: ExerciseCatalog) -> ValidationResult:
    """Evaluate a program without modifying it."""
    return ValidationResult(
        issues=schedule_issues(program.weekly_schedule),
        rule_summary=rule_summary(program, user, catalog),
    )


# ---------------------------------------------------------------------------
# Corrections
# ---------------------------------------------------------------------------


def _move_session(day: int, new_day: int) -> Callable[[ActiveProgram], ActiveProgram]:
    def apply(program: ActiveProgram) -> ActiveProgram:
        schedule = list(program.weekly_schedule)
        for i, session in enumerate(schedule):
            if session.day_of_week == day:
                schedule[i] = replace(session, day_of_week=new_day)
                break
        else:
            return program
        return replace(program, weekly_schedule=sorted(schedule, key=lambda s: s.day_of_week))

    return apply


def _split_session(index: int, new_day: int) -> Callable[[ActiveProgram], ActiveProgram]:
    def apply(program: ActiveProgram) -> ActiveProgram:
        schedule = list(program.weekly_schedule)
        if index >= len(schedule):
            return program
        heavy = schedule[index]
        keep = len(heavy.exercises) - len(heavy.exercises) // 2
        front = heavy.exercises[:keep]
        back = [replace(slot, order=i + 1) for i, slot in enumerate(heavy.exercises[keep:])]
        schedule[index] = replace(heavy, exercises=front)
        schedule.append(ScheduledSession(day_of_week=new_day, name=f"{heavy.name} (Part 2)", exercises=back))
        return replace(program, weekly_schedule=sorted(schedule, key=lambda s: s.day_of_week))

    return apply


def suggested_corrections(program: ActiveProgram) -> list[Correction]:
    """
    Best-effort fixes.

    - Move one session off a duplicated day onto the first open day.
    - With at least two open days, split the largest session's back half
      onto the first open day.
    """
    schedule = program.weekly_schedule
    grouped = _sessions_by_day(schedule)
    open_days = [d for d in ALL_DAYS if d not in grouped]
    corrections: list[Correction] = []

    duplicates = [day for day, sessions in grouped.items() if len(sessions) > 1]
    if duplicates and open_days:
        busiest = max(sorted(duplicates), key=lambda d: len(grouped[d]))
        corrections.append(
            Correction(
                description=f"Move one session from {day_label(busiest)} to {day_label(open_days[0])} "
                "to avoid duplicates.",
                apply=_move_session(busiest, open_days[0]),
            )
        )

    if len(open_days) >= 2 and schedule:
        index = max(range(len(schedule)), key=lambda i: len(schedule[i].exercises))
        heavy = schedule[index]
        if len(heavy.exercises) >= 2:
            corrections.append(
                Correction(
                    description=f"Split {heavy.name} across an open rest day to reduce overload.",
                    apply=_split_session(index, open_days[0]),
                )
            )

    return corrections
