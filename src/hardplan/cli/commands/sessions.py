"""Session commands: log a workout, show a day's session."""

from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.adherence import check_schedule_status, combine_sessions, trim_session
from ...core.dates import parse_date
from ...core.periodization import should_trigger_post_block_assessment
from ...core.progression import replay_workout_logs
from ...io.serializers import load_profile, load_program, load_workout_logs, save_program
from .. import views
from ..app import ProfileArgument, ProgramArgument, app, get_catalog, load_or_exit
from .planning import _parse_date_option


@app.command()
def log(
    program_path: ProgramArgument,
    profile_path: ProfileArgument,
    log_path: Annotated[Path, typer.Argument(help="Workout log JSON (one log or a list)")],
    today: Annotated[
        Optional[str],
        typer.Option("--today", "-t", help="Reference date for layoff checks (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """
    Apply logged workouts to the program and rewrite it with new targets.
    """
    program = load_or_exit(load_program, program_path)
    profile = load_or_exit(load_profile, profile_path)
    logs = load_or_exit(load_workout_logs, log_path)
    reference = _parse_date_option(today, "--today") or date.today()

    catalog = get_catalog()
    program = replay_workout_logs(program, logs, profile, catalog, today=reference)

    save_program(program_path, program)
    views.print_program(program, catalog)
    views.print_success(f"Applied {len(logs)} workout log(s); program saved to {program_path}")

    log_dates = [d for d in (parse_date(e.date_completed) for e in logs) if d is not None]
    if log_dates:
        status = check_schedule_status(max(log_dates), reference)
        if status.returning_from_break:
            views.print_warning(
                f"{status.days_since_last_log} days since the last workout; "
                f"scale loads to {status.load_modifier:.0%} for the next session."
            )

    if should_trigger_post_block_assessment(program, logs):
        views.print_info("Block complete. Run 'hardplan assess' to choose the next block.")


@app.command()
def session(
    program_path: ProgramArgument,
    day: Annotated[int, typer.Argument(help="Weekday number (1 = Sunday ... 7 = Saturday)")],
    short_on_time: Annotated[
        bool,
        typer.Option("--short-on-time", "-s", help="Keep primaries and two accessories"),
    ] = False,
    missed: Annotated[
        Optional[int],
        typer.Option("--missed", "-m", help="Fold the session from this missed weekday in"),
    ] = None,
) -> None:
    """
    Show the session for a weekday, optionally combined or trimmed.
    """
    program = load_or_exit(load_program, program_path)
    by_day = {s.day_of_week: s for s in program.weekly_schedule}

    current = by_day.get(day)
    if current is None:
        views.print_error(f"No session scheduled on day {day}")
        raise typer.Exit(1)

    catalog = get_catalog()
    if missed is not None:
        missed_session = by_day.get(missed)
        if missed_session is None:
            views.print_error(f"No session scheduled on day {missed}")
            raise typer.Exit(1)
        current = combine_sessions(missed_session, current, catalog)
    if short_on_time:
        current = trim_session(current, catalog)

    views.print_session(current, {e.id: e.name for e in catalog.get_all_exercises()})
