"""Analysis commands: volume, progress, report, substitutes."""

from pathlib import Path
from typing import Annotated

import typer

from ...core.metrics import analyze_tempo, e1rm_history, rpe_distribution, update_snapshots
from ...core.substitution import get_substitution_options
from ...core.volume import calculate_weekly_volume
from ...io.serializers import load_profile, load_program, load_workout_logs
from .. import views
from ..app import ProfileArgument, ProgramArgument, app, get_catalog, load_or_exit

LogsArgument = Annotated[Path, typer.Argument(help="Workout logs JSON (one log or a list)")]


@app.command()
def volume(logs_path: LogsArgument) -> None:
    """
    Per-muscle weekly set volume from logged workouts.
    """
    logs = load_or_exit(load_workout_logs, logs_path)
    views.print_volume(calculate_weekly_volume(logs, get_catalog()))


@app.command()
def progress(
    logs_path: LogsArgument,
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID, e.g. back_squat")],
) -> None:
    """
    Estimated 1RM trend and RPE distribution for one exercise.
    """
    exercise = get_catalog().get(exercise_id)
    if exercise is None:
        views.print_error(f"Unknown exercise: {exercise_id}")
        raise typer.Exit(1)

    logs = load_or_exit(load_workout_logs, logs_path)
    views.print_progress(exercise, e1rm_history(logs, exercise_id), rpe_distribution(logs, exercise_id))


@app.command()
def report(program_path: ProgramArgument, logs_path: LogsArgument) -> None:
    """
    Summarise every tier-1 lift and flag slow-tempo habits.
    """
    program = load_or_exit(load_program, program_path)
    logs = load_or_exit(load_workout_logs, logs_path)
    catalog = get_catalog()

    snapshots = update_snapshots(program, logs, catalog)
    views.print_snapshots(snapshots, {e.id: e.name for e in catalog.get_all_exercises()})

    warning = analyze_tempo(logs)
    if warning is not None:
        views.print_warning(warning.message)


@app.command()
def substitutes(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID to replace")],
    profile_path: ProfileArgument,
) -> None:
    """
    Rank same-pattern alternatives for an exercise.
    """
    catalog = get_catalog()
    original = catalog.get(exercise_id)
    if original is None:
        views.print_error(f"Unknown exercise: {exercise_id}")
        raise typer.Exit(1)

    profile = load_or_exit(load_profile, profile_path)
    options = get_substitution_options(original, catalog.get_all_exercises(), profile)
    views.print_substitutes(original, options)
