"""Shared Typer app object, global options, and catalog/file utilities."""

import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from loguru import logger

from ..core.catalog import ExerciseCatalog, load_catalog
from ..io.serializers import ValidationError
from . import views

app = typer.Typer(
    name="hardplan",
    help="Resistance-training program generator and progression engine.",
    no_args_is_help=True,
)

# Set by the global callback; read by get_catalog()
_options: dict[str, Any] = {"catalog": None}

ProfileArgument = Annotated[Path, typer.Argument(help="Athlete profile JSON file")]
ProgramArgument = Annotated[Path, typer.Argument(help="Program JSON file")]


def setup_logging(verbose: bool = False) -> None:
    """Route loguru to stderr; WARNING and above unless verbose."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level> {extra}",
        level="DEBUG" if verbose else "WARNING",
        colorize=True,
    )


@app.callback()
def main_callback(
    catalog: Annotated[
        Optional[Path],
        typer.Option("--catalog", "-c", help="User exercises YAML merged over the built-in catalog"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show engine decisions on stderr"),
    ] = False,
) -> None:
    """
    Build and evolve a resistance-training program from JSON files.
    """
    setup_logging(verbose)
    _options["catalog"] = catalog


def get_catalog() -> ExerciseCatalog:
    """Load the merged exercise catalog for the current invocation."""
    return load_catalog(user_path=_options["catalog"])


def load_or_exit(loader, path: Path):
    """Run a serializer loader, printing errors and exiting 1 on failure."""
    try:
        return loader(path)
    except FileNotFoundError:
        views.print_error(f"File not found: {path}")
        raise typer.Exit(1)
    except ValidationError as e:
        views.print_error(f"Invalid data: {e}")
        raise typer.Exit(1)
