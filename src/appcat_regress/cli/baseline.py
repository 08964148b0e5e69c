"""Baseline command: accept a project's current output as its baseline."""

from pathlib import Path
from typing import Optional

import typer

from . import app
from ._common import console, fail
from ..baseline import BaselineStore
from ..config import load_config
from ..exceptions import AppCatRegressError
from ..harness import Harness
from ..logging_config import setup_logging


@app.command()
def baseline(
    project: str = typer.Argument(..., help="Project whose current output becomes the baseline"),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o",
        help="Folder holding the harness output",
    ),
    baseline_dir: Optional[Path] = typer.Option(
        None, "--baseline-dir", "-b",
        help="Baseline folder to update",
    ),
    show: bool = typer.Option(
        False, "--show",
        help="Show where the baseline lives instead of updating it",
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Configuration file path (TOML format)",
        exists=True, file_okay=True, dir_okay=False, readable=True,
    ),
):
    """Promote PROJECT's latest analyzer output to the baseline store."""
    logger = setup_logging(quiet=True)
    try:
        settings = load_config(
            config_file=config,
            output_dir=str(output_dir) if output_dir else None,
            baseline_dir=str(baseline_dir) if baseline_dir else None,
        )
        store = BaselineStore(
            Path(settings.baseline_dir), file_name=settings.output_file_name, logger=logger
        )

        if show:
            path = store.document_path(project)
            if not store.exists(project):
                console.print(f"[yellow]No baseline for {project} ({path}).[/yellow]")
                raise typer.Exit(0)
            normalized = store.load(project)
            console.print(f"[bold cyan]Baseline[/bold cyan] {path}")
            console.print(f"  incidents: {normalized.total}, rules: {len(normalized.rule_counts)}")
            raise typer.Exit(0)

        case = Harness(settings, logger=logger, baseline_store=store).make_case(project)
        target = store.promote(project, case.output_document)
    except AppCatRegressError as e:
        fail(e)

    console.print(f"[green]Baseline for {project} saved to {target}[/green]")
