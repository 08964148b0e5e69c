"""Diff command: compare two analyzer documents directly."""

from pathlib import Path

import typer
from rich.markup import escape

from . import app
from ._common import console, fail
from ..baseline import compare_files
from ..exceptions import AppCatRegressError
from ..logging_config import setup_logging


@app.command(name="diff")
def diff_cmd(
    current: Path = typer.Argument(..., help="Current analyzer output (YAML)"),
    baseline: Path = typer.Argument(..., help="Baseline analyzer output (YAML)"),
    project: str = typer.Option(
        ..., "--project", "-p",
        help="Project name used to trim incident paths",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Compare CURRENT against BASELINE and list NEW, MISSING and CHANGED incidents.

    Exits with status 1 when the documents do not match.
    """
    logger = setup_logging(verbose=verbose, quiet=not verbose)
    try:
        result = compare_files(current, baseline, project, logger=logger)
    except AppCatRegressError as e:
        fail(e)

    console.print(
        f"[bold]{escape(project)}[/bold]: {result.matched} matched, "
        f"[yellow]{len(result.new_keys)} new[/yellow], "
        f"[red]{len(result.missing_keys)} missing[/red], "
        f"[blue]{len(result.changed)} changed[/blue]"
    )
    for line in result.details():
        console.print(f"  {line}", markup=False, highlight=False)

    if result.passed:
        console.print("[green]PASS[/green]")
    else:
        console.print("[red]FAIL[/red]")
        raise typer.Exit(1)
