"""
Exercise substitution: ranked swap options for a scheduled exercise.

Candidates share the original's movement pattern.  Each gets a weighted
specificity score in [0, 1]; strength athletes are warned when a
competition lift would be replaced by a non-competition variant.
"""

from dataclasses import dataclass
from typing import Literal

from .models import Exercise, UserProfile

PATTERN_WEIGHT = 0.2
PRIMARY_MUSCLE_WEIGHT = 0.35
SECONDARY_MUSCLE_WEIGHT = 0.15
EQUIPMENT_WEIGHT = 0.1
TYPE_WEIGHT = 0.05
COMPETITION_WEIGHT = 0.1
TIER_WEIGHT = 0.05

FREE_WEIGHTS = frozenset({"barbell", "dumbbell", "bodyweight"})
MACHINE_LIKE = frozenset({"machine", "cable"})

COMPETITION_SWAP_WARNING = (
    "You are replacing a competition lift with a non-competition variant. "
    "This may reduce specificity for strength. Are you sure?"
)


@dataclass(frozen=True)
class SubstitutionWarning:
    level: Literal["info", "warning"]
    message: str


@dataclass(frozen=True)
class SubstitutionOption:
    exercise_id: str
    exercise_name: str
    specificity_score: float
    warning: SubstitutionWarning | None = None


def secondary_overlap(original: Exercise, candidate: Exercise) -> float:
    """Shared secondary stimulus as a fraction of the original's total."""
    ours = {i.muscle: i.factor for i in original.secondary_muscles}
    theirs = {i.muscle: i.factor for i in candidate.secondary_muscles}
    shared = set(ours) & set(theirs)
    total = sum(ours.values())
    if not shared or total <= 0:
        return 0.0
    return min(1.0, sum(min(ours[m], theirs[m]) for m in shared) / total)


def equipment_similarity(a: str, b: str) -> float:
    if a == b:
        return 1.0
    if a in FREE_WEIGHTS and b in FREE_WEIGHTS:
        return 0.6
    if a in MACHINE_LIKE and b in MACHINE_LIKE:
        return 0.7
    return 0.3


def type_similarity(a: str, b: str) -> float:
    if a == b:
        return 1.0
    if {a, b} <= {"machine", "compound"}:
        return 0.6
    return 0.4


def tier_similarity(a: int, b: int) -> float:
    return {0: 1.0, 1: 0.5}.get(abs(a - b), 0.0)


def specificity_score(original: Exercise, candidate: Exercise) -> float:
    score = 0.0
    if candidate.pattern == original.pattern:
        score += PATTERN_WEIGHT
    if candidate.primary_muscle == original.primary_muscle:
        score += PRIMARY_MUSCLE_WEIGHT
    score += SECONDARY_MUSCLE_WEIGHT * secondary_overlap(original, candidate)
    score += EQUIPMENT_WEIGHT * equipment_similarity(original.equipment, candidate.equipment)
    score += TYPE_WEIGHT * type_similarity(original.type, candidate.type)
    if candidate.is_competition_lift == original.is_competition_lift:
        score += COMPETITION_WEIGHT
    score += TIER_WEIGHT * tier_similarity(original.tier, candidate.tier)
    return min(score, 1.0)


def _build_option(original: Exercise, candidate: Exercise, goal: str) -> SubstitutionOption:
    score = specificity_score(original, candidate)
    warning = None
    if goal == "strength" and original.is_competition_lift and not candidate.is_competition_lift:
        score *= 0.5
        warning = SubstitutionWarning(level="warning", message=COMPETITION_SWAP_WARNING)
    elif goal == "strength" and not original.is_competition_lift and candidate.is_competition_lift:
        score = min(1.0, score + 0.1)
    return SubstitutionOption(
        exercise_id=candidate.id,
        exercise_name=candidate.name,
        specificity_score=min(score, 1.0),
        warning=warning,
    )


def get_substitution_options(
    original: Exercise,
    all_exercises: list[Exercise],
    user: UserProfile,
) -> list[SubstitutionOption]:
    """Same-pattern, non-excluded alternatives, best match first."""
    excluded = set(user.excluded_exercises)
    options = [
        _build_option(original, candidate, user.goal)
        for candidate in all_exercises
        if candidate.id != original.id
        and candidate.pattern == original.pattern
        and candidate.id not in excluded
    ]
    return sorted(options, key=lambda o: (-o.specificity_score, o.exercise_name))
