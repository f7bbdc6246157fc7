"""
JSON serialization for program and workout data models.

Handles conversion between dataclasses and JSON-compatible dicts, and
reading/writing the JSON documents the CLI works with.
"""

import json
import re
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

from ..core.models import (
    ActiveProgram,
    CompletedExercise,
    CompletedSet,
    ProgressionState,
    ScheduledExercise,
    ScheduledSession,
    Tempo,
    UserProfile,
    WorkoutBlock,
    WorkoutLog,
)

T = TypeVar("T")


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate a YYYY-MM-DD date string.

    Args:
        date_str: Date string to validate

    Returns:
        The same string

    Raises:
        ValidationError: If date format is invalid
    """
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def _build(record: str, factory: Callable[[], T]) -> T:
    """Run a constructor, turning missing keys and bad values into ValidationError."""
    try:
        return factory()
    except KeyError as e:
        raise ValidationError(f"{record}: missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{record}: {e}") from e


def _require_list(data: dict[str, Any], key: str, record: str) -> list:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValidationError(f"{record}: {key} must be a list")
    return value


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


def user_profile_to_dict(profile: UserProfile) -> dict[str, Any]:
    """Convert UserProfile to JSON-compatible dict."""
    d: dict[str, Any] = {
        "name": profile.name,
        "training_age": profile.training_age,
        "goal": profile.goal,
        "available_days": list(profile.available_days),
        "weak_points": list(profile.weak_points),
        "excluded_exercises": list(profile.excluded_exercises),
        "unit": profile.unit,
        "min_plate_increment": profile.min_plate_increment,
    }
    if profile.progression_overrides:
        d["progression_overrides"] = dict(profile.progression_overrides)
    return d


def dict_to_user_profile(data: dict[str, Any]) -> UserProfile:
    """
    Convert dict to UserProfile.

    Raises:
        ValidationError: If data is invalid
    """
    return _build(
        "profile",
        lambda: UserProfile(
            training_age=data["training_age"],
            goal=data["goal"],
            name=str(data.get("name", "Athlete")),
            available_days=[int(d) for d in _require_list(data, "available_days", "profile")],
            weak_points=list(_require_list(data, "weak_points", "profile")),
            excluded_exercises=[str(e) for e in _require_list(data, "excluded_exercises", "profile")],
            unit=data.get("unit", "lbs"),
            min_plate_increment=float(data.get("min_plate_increment", 2.5)),
            progression_overrides=dict(data.get("progression_overrides") or {}),
        ),
    )


# ---------------------------------------------------------------------------
# Program
# ---------------------------------------------------------------------------


def scheduled_exercise_to_dict(slot: ScheduledExercise) -> dict[str, Any]:
    d: dict[str, Any] = {
        "exercise_id": slot.exercise_id,
        "order": slot.order,
        "target_sets": slot.target_sets,
        "target_reps": slot.target_reps,
        "target_load": slot.target_load,
        "target_rpe": slot.target_rpe,
    }
    # Only include optional markers when set
    if slot.note:
        d["note"] = slot.note
    if slot.is_weak_point_priority:
        d["is_weak_point_priority"] = True
    return d


def dict_to_scheduled_exercise(data: dict[str, Any]) -> ScheduledExercise:
    return _build(
        "scheduled exercise",
        lambda: ScheduledExercise(
            exercise_id=str(data["exercise_id"]),
            order=int(data.get("order", 1)),
            target_sets=int(data["target_sets"]),
            target_reps=int(data["target_reps"]),
            target_load=float(data.get("target_load", 0.0)),
            target_rpe=float(data.get("target_rpe", 8.0)),
            note=str(data.get("note", "")),
            is_weak_point_priority=bool(data.get("is_weak_point_priority", False)),
        ),
    )


def session_to_dict(session: ScheduledSession) -> dict[str, Any]:
    return {
        "day_of_week": session.day_of_week,
        "name": session.name,
        "exercises": [scheduled_exercise_to_dict(e) for e in session.exercises],
    }


def dict_to_session(data: dict[str, Any]) -> ScheduledSession:
    exercises = [dict_to_scheduled_exercise(e) for e in _require_list(data, "exercises", "session")]
    return _build(
        "session",
        lambda: ScheduledSession(
            day_of_week=int(data["day_of_week"]),
            name=str(data["name"]),
            exercises=exercises,
        ),
    )


def progression_state_to_dict(state: ProgressionState) -> dict[str, Any]:
    return {
        "exercise_id": state.exercise_id,
        "current_load": state.current_load,
        "base_load": state.base_load,
        "current_rep_target": state.current_rep_target,
        "consecutive_fails": state.consecutive_fails,
        "reset_count": state.reset_count,
        "recent_rpes": list(state.recent_rpes),
    }


def dict_to_progression_state(data: dict[str, Any]) -> ProgressionState:
    return _build(
        "progression state",
        lambda: ProgressionState(
            exercise_id=str(data["exercise_id"]),
            current_load=float(data.get("current_load", 0.0)),
            base_load=float(data.get("base_load", 0.0)),
            current_rep_target=int(data.get("current_rep_target", 0)),
            consecutive_fails=int(data.get("consecutive_fails", 0)),
            reset_count=int(data.get("reset_count", 0)),
            recent_rpes=[float(r) for r in _require_list(data, "recent_rpes", "progression state")],
        ),
    )


def program_to_dict(program: ActiveProgram) -> dict[str, Any]:
    """
    Convert ActiveProgram to JSON-compatible dict.

    Progression states are keyed by exercise id.
    """
    return {
        "start_date": program.start_date,
        "current_block_phase": program.current_block_phase,
        "current_week": program.current_week,
        "consecutive_blocks_without_deload": program.consecutive_blocks_without_deload,
        "weekly_schedule": [session_to_dict(s) for s in program.weekly_schedule],
        "progression_data": {
            ex_id: progression_state_to_dict(state) for ex_id, state in program.progression_data.items()
        },
    }


def dict_to_program(data: dict[str, Any]) -> ActiveProgram:
    """
    Convert dict to ActiveProgram.

    Raises:
        ValidationError: If data is invalid
    """
    schedule = [dict_to_session(s) for s in _require_list(data, "weekly_schedule", "program")]
    raw_states = data.get("progression_data") or {}
    if not isinstance(raw_states, dict):
        raise ValidationError("program: progression_data must be an object")
    states = {
        ex_id: dict_to_progression_state({"exercise_id": ex_id, **raw}) for ex_id, raw in raw_states.items()
    }
    return _build(
        "program",
        lambda: ActiveProgram(
            start_date=str(data["start_date"]),
            current_block_phase=data.get("current_block_phase", "introductory"),
            current_week=int(data.get("current_week", 1)),
            consecutive_blocks_without_deload=int(data.get("consecutive_blocks_without_deload", 0)),
            weekly_schedule=schedule,
            progression_data=states,
        ),
    )


def block_to_dict(block: WorkoutBlock) -> dict[str, Any]:
    return {
        "name": block.name,
        "primary_muscles": list(block.primary_muscles),
        "accessory_muscles": list(block.accessory_muscles),
    }


def dict_to_block(data: dict[str, Any]) -> WorkoutBlock:
    return _build(
        "block",
        lambda: WorkoutBlock(
            name=str(data["name"]),
            primary_muscles=list(_require_list(data, "primary_muscles", "block")),
            accessory_muscles=list(_require_list(data, "accessory_muscles", "block")),
        ),
    )


def dict_to_assigned_blocks(data: dict[str, Any]) -> dict[int, WorkoutBlock]:
    """Weekday (as a JSON object key) to WorkoutBlock."""
    blocks: dict[int, WorkoutBlock] = {}
    for key, raw in data.items():
        try:
            day = int(key)
        except ValueError as e:
            raise ValidationError(f"assigned block key must be a weekday number, got {key!r}") from e
        if not 1 <= day <= 7:
            raise ValidationError(f"assigned block day must be in 1..7, got {day}")
        blocks[day] = dict_to_block(raw)
    return blocks


# ---------------------------------------------------------------------------
# Workout logs
# ---------------------------------------------------------------------------


def tempo_to_dict(tempo: Tempo) -> dict[str, Any]:
    d: dict[str, Any] = {
        "eccentric": tempo.eccentric,
        "pause": tempo.pause,
        "concentric": tempo.concentric,
    }
    if tempo.top_pause is not None:
        d["top_pause"] = tempo.top_pause
    return d


def dict_to_tempo(data: dict[str, Any]) -> Tempo:
    return _build(
        "tempo",
        lambda: Tempo(
            eccentric=int(data["eccentric"]),
            pause=int(data.get("pause", 0)),
            concentric=int(data.get("concentric", 0)),
            top_pause=int(data["top_pause"]) if data.get("top_pause") is not None else None,
        ),
    )


def completed_set_to_dict(s: CompletedSet) -> dict[str, Any]:
    d: dict[str, Any] = {
        "set_number": s.set_number,
        "target_load": s.target_load,
        "target_reps": s.target_reps,
        "load": s.load,
        "reps": s.reps,
        "rpe": s.rpe,
    }
    if s.tags:
        d["tags"] = list(s.tags)
    if s.actual_tempo is not None:
        d["actual_tempo"] = tempo_to_dict(s.actual_tempo)
    return d


def dict_to_completed_set(data: dict[str, Any], set_number: int = 1) -> CompletedSet:
    """
    Convert dict to CompletedSet.

    Targets default to the actual values when omitted.
    """
    raw_tempo = data.get("actual_tempo")
    if raw_tempo is not None and not isinstance(raw_tempo, dict):
        raise ValidationError("completed set: actual_tempo must be an object")
    tempo = dict_to_tempo(raw_tempo) if raw_tempo is not None else None
    return _build(
        "completed set",
        lambda: CompletedSet(
            set_number=int(data.get("set_number", set_number)),
            target_load=float(data.get("target_load", data["load"])),
            target_reps=int(data.get("target_reps", data["reps"])),
            load=float(data["load"]),
            reps=int(data["reps"]),
            rpe=float(data.get("rpe", 0.0)),
            tags=list(_require_list(data, "tags", "completed set")),
            actual_tempo=tempo,
        ),
    )


def completed_exercise_to_dict(entry: CompletedExercise) -> dict[str, Any]:
    d: dict[str, Any] = {
        "exercise_id": entry.exercise_id,
        "sets": [completed_set_to_dict(s) for s in entry.sets],
    }
    if entry.was_swapped:
        d["was_swapped"] = True
        d["original_exercise_id"] = entry.original_exercise_id
    return d


def dict_to_completed_exercise(data: dict[str, Any]) -> CompletedExercise:
    sets = [
        dict_to_completed_set(s, set_number=i)
        for i, s in enumerate(_require_list(data, "sets", "completed exercise"), 1)
    ]
    return _build(
        "completed exercise",
        lambda: CompletedExercise(
            exercise_id=str(data["exercise_id"]),
            sets=sets,
            was_swapped=bool(data.get("was_swapped", False)),
            original_exercise_id=data.get("original_exercise_id"),
        ),
    )


def workout_log_to_dict(log: WorkoutLog) -> dict[str, Any]:
    d: dict[str, Any] = {
        "date_completed": log.date_completed,
        "status": log.status,
        "mode": log.mode,
        "exercises": [completed_exercise_to_dict(e) for e in log.exercises],
    }
    if log.date_scheduled:
        d["date_scheduled"] = log.date_scheduled
    if log.program_id:
        d["program_id"] = log.program_id
    if log.notes:
        d["notes"] = log.notes
    if log.session_rpe is not None:
        d["session_rpe"] = log.session_rpe
    return d


def dict_to_workout_log(data: dict[str, Any]) -> WorkoutLog:
    """
    Convert dict to WorkoutLog.

    Dates are not validated here: an unparseable date is carried as-is and
    treated as "no date" by the engine.
    """
    exercises = [dict_to_completed_exercise(e) for e in _require_list(data, "exercises", "workout log")]

    def factory() -> WorkoutLog:
        status = data.get("status", "completed")
        mode = data.get("mode", "normal")
        if status not in ("completed", "skipped", "combined"):
            raise ValueError(f"Invalid status: {status!r}")
        if mode not in ("normal", "short_on_time"):
            raise ValueError(f"Invalid mode: {mode!r}")
        return WorkoutLog(
            date_completed=str(data["date_completed"]),
            exercises=exercises,
            date_scheduled=str(data.get("date_scheduled", "")),
            program_id=str(data.get("program_id", "")),
            status=status,
            mode=mode,
            notes=str(data.get("notes", "")),
            session_rpe=float(data["session_rpe"]) if data.get("session_rpe") is not None else None,
        )

    return _build("workout log", factory)


def dict_to_workout_logs(data: Any) -> list[WorkoutLog]:
    """A single log object or a list of them."""
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValidationError("workout logs must be an object or a list of objects")
    return [dict_to_workout_log(d) for d in data]


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def read_json(path: str | Path) -> Any:
    """
    Load a JSON document.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file is not valid JSON
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {path}: {e}") from e


def write_json(path: str | Path, data: Any) -> None:
    """Write a JSON document, creating parent directories if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


def _expect_object(data: Any, record: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"{record} must be a JSON object")
    return data


def load_profile(path: str | Path) -> UserProfile:
    return dict_to_user_profile(_expect_object(read_json(path), "profile"))


def load_program(path: str | Path) -> ActiveProgram:
    return dict_to_program(_expect_object(read_json(path), "program"))


def save_program(path: str | Path, program: ActiveProgram) -> None:
    write_json(path, program_to_dict(program))


def load_workout_logs(path: str | Path) -> list[WorkoutLog]:
    return dict_to_workout_logs(read_json(path))


def load_assigned_blocks(path: str | Path) -> dict[int, WorkoutBlock]:
    return dict_to_assigned_blocks(_expect_object(read_json(path), "assigned blocks"))
