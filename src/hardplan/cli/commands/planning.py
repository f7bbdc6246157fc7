"""Planning commands: generate, blocks, validate, shift, assess."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.adherence import shift_schedule
from ...core.dates import parse_date
from ...core.generator import generate_program, generate_weekly_blocks
from ...core.periodization import PostBlockResponses, start_next_block
from ...core.validation import suggested_corrections, validate
from ...io.serializers import (
    ValidationError,
    load_assigned_blocks,
    load_profile,
    load_program,
    save_program,
    validate_date,
)
from .. import views
from ..app import ProfileArgument, ProgramArgument, app, get_catalog, load_or_exit


def _parse_date_option(value: str | None, name: str):
    """Strict YYYY-MM-DD for command-line dates."""
    if value is None:
        return None
    try:
        validate_date(value)
    except ValidationError as e:
        views.print_error(f"{name}: {e}")
        raise typer.Exit(1)
    return parse_date(value)


@app.command()
def generate(
    profile_path: ProfileArgument,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Write the program JSON here"),
    ] = None,
    start: Annotated[
        Optional[str],
        typer.Option("--start", "-s", help="Program start date (YYYY-MM-DD, default: today)"),
    ] = None,
    blocks_path: Annotated[
        Optional[Path],
        typer.Option("--blocks", "-b", help="JSON of pre-assigned {weekday: block} sessions"),
    ] = None,
) -> None:
    """
    Generate a weekly program from an athlete profile.
    """
    profile = load_or_exit(load_profile, profile_path)
    start_date = _parse_date_option(start, "--start")
    assigned = load_or_exit(load_assigned_blocks, blocks_path) if blocks_path else None

    catalog = get_catalog()
    program = generate_program(profile, catalog, assigned, start_date)

    views.print_program(program, catalog)

    result = validate(program, profile, catalog)
    for issue in result.issues:
        views.print_warning(issue.message)

    if out is not None:
        save_program(out, program)
        views.print_success(f"Program saved to {out}")


@app.command()
def blocks(profile_path: ProfileArgument) -> None:
    """
    Preview the weekly session split for a profile.
    """
    profile = load_or_exit(load_profile, profile_path)
    views.print_blocks(generate_weekly_blocks(profile))


@app.command("validate")
def validate_program(
    program_path: ProgramArgument,
    profile_path: ProfileArgument,
) -> None:
    """
    Check a program against schedule and programming rules.

    Exits with code 1 when a blocking issue is found.
    """
    program = load_or_exit(load_program, program_path)
    profile = load_or_exit(load_profile, profile_path)

    result = validate(program, profile, get_catalog())
    views.print_validation(result)

    corrections = suggested_corrections(program)
    if corrections:
        views.console.print("\n[bold]Suggested corrections[/bold]")
        for correction in corrections:
            views.console.print(f"  - {correction.description}")

    if result.blocking_issues:
        raise typer.Exit(1)


@app.command()
def shift(program_path: ProgramArgument) -> None:
    """
    Push every session back one day after a missed workout.
    """
    program = load_or_exit(load_program, program_path)
    shifted = shift_schedule(program)
    save_program(program_path, shifted)

    views.print_program(shifted, get_catalog())
    views.print_success(f"Schedule shifted by one day; start date now {shifted.start_date}")


@app.command()
def assess(
    program_path: ProgramArgument,
    sleep: Annotated[float, typer.Option("--sleep", help="Sleep quality, 0-10")] = 7.0,
    stress: Annotated[float, typer.Option("--stress", help="Stress level, 0-10")] = 5.0,
    aches: Annotated[float, typer.Option("--aches", help="Joint/muscle aches, 0-10")] = 4.0,
    decision: Annotated[
        Optional[str],
        typer.Option("--decision", "-d", help="Override: deload or next_block"),
    ] = None,
) -> None:
    """
    Close the current block and start the next one.

    Without --decision the recovery answers pick deload or next block.
    """
    if decision is not None and decision not in ("deload", "next_block"):
        views.print_error(f"Invalid decision: {decision}. Must be 'deload' or 'next_block'")
        raise typer.Exit(1)

    program = load_or_exit(load_program, program_path)
    responses = PostBlockResponses(sleep_quality=sleep, stress_level=stress, ache_level=aches)
    chosen = decision or responses.recommended_decision(program)

    updated = start_next_block(program, chosen)
    save_program(program_path, updated)

    views.print_info(f"Readiness: {responses.readiness_label} (risk {responses.recovery_risk_score})")
    views.print_success(
        f"Started {updated.current_block_phase} block "
        f"({updated.consecutive_blocks_without_deload} blocks since last deload)"
    )
