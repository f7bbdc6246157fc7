"""
Exercise catalog.

Built-in exercises ship in ``src/hardplan/exercise_db.yaml``.  A user file
at ``~/.hardplan/exercises.yaml`` (or ``$HARDPLAN_HOME/exercises.yaml``) is
merged over it: an entry whose id matches a bundled exercise is deep-merged
over that record, any other entry is added as a user-created exercise.

Entries that fail validation are skipped with a warning; the engine treats
a missing id as an absent slot, never as an error.

Usage:
    from hardplan.core.catalog import load_catalog
    catalog = load_catalog()
    squat = catalog.get("back_squat")
"""

from __future__ import annotations

import os
import warnings
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from .models import Exercise, MuscleImpact

_REQUIRED_FIELDS: frozenset[str] = frozenset(
    {"id", "name", "pattern", "type", "equipment", "primary_muscle"}
)


def exercise_from_dict(d: dict) -> Exercise:
    """Convert a raw mapping (from YAML or JSON) to an Exercise.

    Raises ValueError if a required field is absent or a value is invalid.
    """
    missing = _REQUIRED_FIELDS - set(d)
    if missing:
        raise ValueError(f"Exercise missing fields: {sorted(missing)}")

    secondary = [
        MuscleImpact(muscle=str(m["muscle"]), factor=float(m.get("factor", 0.0)))
        for m in d.get("secondary_muscles") or []
    ]
    return Exercise(
        id=str(d["id"]),
        name=str(d["name"]),
        pattern=str(d["pattern"]),
        type=str(d["type"]),
        equipment=str(d["equipment"]),
        primary_muscle=str(d["primary_muscle"]),
        secondary_muscles=secondary,
        default_tempo=str(d.get("default_tempo", "")),
        tier=int(d.get("tier", 2)),
        is_competition_lift=bool(d.get("is_competition_lift", False)),
        is_user_created=bool(d.get("is_user_created", False)),
    )


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """Plain-dict form of an Exercise, suitable for YAML or JSON."""
    return asdict(exercise)


def _load_yaml_file(path: Path) -> list[dict]:
    """Load a YAML list of exercise mappings; [] if absent or unreadable."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"hardplan: could not read {path} ({exc})", stacklevel=2)
        return []
    if isinstance(data, dict):
        data = data.get("exercises", [])
    return [d for d in data or [] if isinstance(d, dict)]


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def get_bundled_catalog_path() -> Path:
    """Path of the exercise database shipped with the package."""
    # catalog.py lives at src/hardplan/core/catalog.py
    return Path(__file__).parent.parent / "exercise_db.yaml"


def get_user_catalog_path() -> Path:
    """Path of the user exercise file (may not exist yet)."""
    home = os.environ.get("HARDPLAN_HOME")
    base = Path(home) if home else Path(os.environ.get("HOME", "~")).expanduser() / ".hardplan"
    return base / "exercises.yaml"


class ExerciseCatalog:
    """
    Read-mostly exercise lookup.

    The engine only needs ``get_all_exercises()`` and a lookup by id;
    ``save_user_exercise`` is the single write path.
    """

    def __init__(self, exercises: list[Exercise] | None = None, user_path: Path | None = None):
        self._exercises: list[Exercise] = list(exercises or [])
        self.user_path = user_path

    def __len__(self) -> int:
        return len(self._exercises)

    def __contains__(self, exercise_id: object) -> bool:
        return any(e.id == exercise_id for e in self._exercises)

    def get_all_exercises(self) -> list[Exercise]:
        """Return a snapshot of every exercise (built-in first, then user-created)."""
        return list(self._exercises)

    def by_id(self) -> dict[str, Exercise]:
        """Return {exercise_id: Exercise}; later entries win on duplicate ids."""
        return {e.id: e for e in self._exercises}

    def get(self, exercise_id: str) -> Exercise | None:
        """Return the exercise with the given id, or None."""
        return self.by_id().get(exercise_id)

    def save_user_exercise(self, exercise: Exercise) -> Exercise:
        """
        Add a user-created exercise.

        The stored copy is flagged ``is_user_created``.  When the catalog has a
        user path, all user-created entries are written back to it.
        """
        stored = replace(exercise, is_user_created=True)
        self._exercises.append(stored)
        logger.debug("Saved user exercise", exercise_id=stored.id)
        if self.user_path is not None:
            self._write_user_exercises()
        return stored

    def _write_user_exercises(self) -> None:
        if self.user_path is None:
            return
        user_created = {e.id: e for e in self._exercises if e.is_user_created}
        # Overrides of built-in entries live in the same file; keep them.
        overrides = []
        if self.user_path.exists():
            overrides = [d for d in _load_yaml_file(self.user_path) if d.get("id") not in user_created]
        self.user_path.parent.mkdir(parents=True, exist_ok=True)
        payload = overrides + [exercise_to_dict(e) for e in user_created.values()]
        with open(self.user_path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(payload, fh, sort_keys=False)


def load_catalog(
    bundled_path: Path | None = None,
    user_path: Path | None = None,
) -> ExerciseCatalog:
    """
    Build the merged catalog.

    Args:
        bundled_path: Built-in database (default: the packaged exercise_db.yaml)
        user_path: User overrides/additions (default: ~/.hardplan/exercises.yaml)

    Returns:
        ExerciseCatalog whose user_path is the user file, so saved
        exercises persist there
    """
    bundled_path = bundled_path or get_bundled_catalog_path()
    user_path = user_path or get_user_catalog_path()

    raw_by_id: dict[str, dict] = {}
    if bundled_path.exists():
        for d in _load_yaml_file(bundled_path):
            if "id" in d:
                raw_by_id[str(d["id"])] = d

    bundled_ids = set(raw_by_id)
    if user_path.exists():
        for d in _load_yaml_file(user_path):
            ex_id = str(d.get("id", ""))
            if ex_id in bundled_ids:
                raw_by_id[ex_id] = _deep_merge(raw_by_id[ex_id], d)
            elif ex_id:
                raw_by_id[ex_id] = {**d, "is_user_created": True}

    exercises: list[Exercise] = []
    for ex_id, raw in raw_by_id.items():
        try:
            exercises.append(exercise_from_dict(raw))
        except (ValueError, TypeError, KeyError) as exc:
            warnings.warn(f"hardplan: skipping exercise '{ex_id}': {exc}", stacklevel=2)

    logger.debug("Loaded exercise catalog", count=len(exercises), user_file=str(user_path))
    return ExerciseCatalog(exercises, user_path=user_path)
