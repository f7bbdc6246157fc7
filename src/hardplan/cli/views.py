"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of program data.
"""

from rich.console import Console
from rich.table import Table

from ..core.catalog import ExerciseCatalog
from ..core.metrics import AnalyticsSnapshot, E1RMPoint, RPERangeBin
from ..core.models import ActiveProgram, Exercise, ScheduledSession, WorkoutBlock
from ..core.substitution import SubstitutionOption
from ..core.validation import ValidationResult, day_label

console = Console()

_PHASE_STYLES = {
    "introductory": "cyan",
    "accumulation": "green",
    "intensification": "yellow",
    "realization": "magenta",
    "deload": "dim",
}


def _format_load(load: float) -> str:
    return "-" if load == 0 else f"{load:g}"


def print_session(session: ScheduledSession, names: dict[str, str]) -> None:
    """
    Print one session as a table.

    Args:
        session: Session to display
        names: exercise id -> display name (falls back to the id)
    """
    table = Table(title=f"{day_label(session.day_of_week)}: {session.name}", show_lines=False)
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Exercise", style="cyan")
    table.add_column("Sets", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Load", justify="right", style="bold")
    table.add_column("RPE", justify="right")
    table.add_column("Note", style="dim")

    for slot in session.exercises:
        name = names.get(slot.exercise_id, slot.exercise_id)
        if slot.is_weak_point_priority:
            name = f"{name} [yellow]*[/yellow]"  # weak-point priority
        table.add_row(
            str(slot.order),
            name,
            str(slot.target_sets),
            str(slot.target_reps),
            _format_load(slot.target_load),
            f"{slot.target_rpe:g}",
            slot.note,
        )
    console.print(table)
    console.print(f"[dim]{session.total_sets} sets[/dim]")


def print_program(program: ActiveProgram, catalog: ExerciseCatalog) -> None:
    """
    Print the weekly schedule, one table per session.

    Args:
        program: Program to display
        catalog: Used to resolve exercise names
    """
    names = {e.id: e.name for e in catalog.get_all_exercises()}
    style = _PHASE_STYLES.get(program.current_block_phase, "white")

    console.print()
    console.print(
        f"[bold]Program[/bold] from [cyan]{program.start_date}[/cyan]  "
        f"phase [{style}]{program.current_block_phase}[/{style}]  "
        f"week {program.current_week}"
    )

    for session in program.weekly_schedule:
        print_session(session, names)


def print_progress(exercise: Exercise, points: list[E1RMPoint], bins: list[RPERangeBin]) -> None:
    """Print e1RM history and the RPE distribution for one exercise."""
    if points:
        table = Table(title=f"{exercise.name}: Estimated 1RM")
        table.add_column("Date", style="cyan")
        table.add_column("e1RM", justify="right", style="bold green")
        for point in points:
            table.add_row(point.date, f"{point.e1rm:.1f}")
        console.print(table)
    else:
        print_info(f"No eligible sets for {exercise.name} (working sets at RPE 7-9.5).")

    weeks = bins[0].period_weeks if bins else 0
    table = Table(title=f"RPE Distribution ({weeks} wk)" if weeks else "RPE Distribution")
    table.add_column("RPE", style="cyan")
    table.add_column("Sets", justify="right")
    for b in bins:
        table.add_row(b.label, str(b.count))
    console.print(table)


def print_snapshots(snapshots: list[AnalyticsSnapshot], names: dict[str, str]) -> None:
    """Print one summary row per tier-1 lift."""
    if not snapshots:
        print_info("No tier-1 lifts scheduled or logged.")
        return

    table = Table(title="Main Lifts")
    table.add_column("Lift", style="cyan")
    table.add_column("Latest e1RM", justify="right", style="bold green")
    table.add_column("Eligible logs", justify="right")
    table.add_column("RPE 6-7 / 7-8 / 8-9 / 9-10")
    table.add_column("Weeks", justify="right")
    for snap in snapshots:
        latest = f"{snap.e1rm_history[-1].e1rm:.1f}" if snap.e1rm_history else "-"
        bins = " / ".join(str(b.count) for b in snap.rpe_distribution)
        weeks = snap.rpe_distribution[0].period_weeks if snap.rpe_distribution else 0
        table.add_row(names.get(snap.lift_id, snap.lift_id), latest, str(len(snap.e1rm_history)), bins, str(weeks))
    console.print(table)

    # Every snapshot carries the same block segments
    for segment in snapshots[0].block_phase_segments:
        style = _PHASE_STYLES.get(segment.phase, "white")
        console.print(f"[{style}]{segment.phase}[/{style}] block: {segment.start_date} to {segment.end_date}")


def print_blocks(blocks: list[WorkoutBlock]) -> None:
    """Print the session plan preview."""
    table = Table(title="Weekly Blocks")
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Session", style="cyan")
    table.add_column("Primary", style="bold")
    table.add_column("Accessory")

    for i, block in enumerate(blocks, 1):
        table.add_row(
            str(i),
            block.name,
            ", ".join(block.primary_muscles) or "-",
            ", ".join(block.accessory_muscles) or "-",
        )
    console.print(table)


def print_validation(result: ValidationResult) -> None:
    """Print schedule issues followed by the rule summary."""
    if result.issues:
        table = Table(title="Schedule Issues")
        table.add_column("Severity", width=8)
        table.add_column("Issue")
        table.add_column("Days", style="dim")
        for issue in result.issues:
            severity = "[red]error[/red]" if issue.severity == "error" else "[yellow]warning[/yellow]"
            days = ", ".join(day_label(d) for d in issue.affected_days)
            table.add_row(severity, issue.message, days)
        console.print(table)
    else:
        print_success("No schedule issues.")

    table = Table(title="Programming Rules")
    table.add_column("Rule")
    table.add_column("Status", width=16)
    table.add_column("Details", style="dim")
    for check in result.rule_summary:
        status = "[green]met[/green]" if check.status == "met" else "[yellow]needs attention[/yellow]"
        table.add_row(check.rule, status, "\n".join(check.details))
    console.print(table)


def print_volume(volume: dict[str, float], title: str = "Weekly Volume") -> None:
    """Print per-muscle set-equivalents, highest first."""
    if not volume:
        print_info("No volume recorded.")
        return

    table = Table(title=title)
    table.add_column("Muscle", style="cyan")
    table.add_column("Sets", justify="right", style="bold")
    for muscle, sets in sorted(volume.items(), key=lambda kv: (-kv[1], kv[0])):
        table.add_row(muscle, f"{sets:.1f}")
    console.print(table)


def print_substitutes(original: Exercise, options: list[SubstitutionOption]) -> None:
    """Print ranked substitution options with any warnings."""
    if not options:
        print_info(f"No substitutes found for {original.name}.")
        return

    table = Table(title=f"Substitutes for {original.name}")
    table.add_column("ID", style="dim")
    table.add_column("Exercise", style="cyan")
    table.add_column("Match", justify="right", style="bold")
    table.add_column("Warning", style="yellow")
    for option in options:
        table.add_row(
            option.exercise_id,
            option.exercise_name,
            f"{option.specificity_score:.0%}",
            option.warning.message if option.warning else "",
        )
    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
