"""Run command: the full harness over every candidate project."""

from pathlib import Path
from typing import List, Optional

import typer

from . import app
from ._common import check_format, console, fail
from ..config import load_config
from ..exceptions import AppCatRegressError
from ..formatters import RichFormatter, get_formatter
from ..harness import Harness, run_file_prefix
from ..logging_config import setup_logging


@app.command()
def run(
    action: Optional[List[str]] = typer.Option(
        None, "--action", "-a",
        help="Step to perform per project: run, analyze, validate (repeatable)",
    ),
    target: Optional[str] = typer.Option(
        None, "--target", "-t",
        help="Only process this project from the test data folder",
    ),
    analyzer_dir: Optional[Path] = typer.Option(
        None, "--analyzer-dir",
        help="Folder holding the analyzer executable",
    ),
    test_data_dir: Optional[Path] = typer.Option(
        None, "--data-dir", "-d",
        help="Folder whose subdirectories are the candidate projects",
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o",
        help="Folder for analyzer output, audit records and reports",
    ),
    baseline_dir: Optional[Path] = typer.Option(
        None, "--baseline-dir", "-b",
        help="Folder holding one accepted output per project",
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w",
        help="Projects to process in parallel",
        min=1, max=32,
    ),
    output_format: str = typer.Option(
        "rich", "--format", "-f",
        help="Console output: rich, markdown, json or csv",
        callback=check_format,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors to the console"),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Configuration file path (TOML format)",
        exists=True, file_okay=True, dir_okay=False, readable=True,
    ),
):
    """Run the regression harness.

    Exits with status 1 when any project fails validation or errors.

    [bold cyan]Examples:[/bold cyan]

      appcat-regress run -d test_data -o test_output

      appcat-regress run -a run -a analyze -a validate -b baseline

      appcat-regress run -t petclinic -a validate --format markdown
    """
    try:
        settings = load_config(
            config_file=config,
            actions=action or None,
            target=target,
            analyzer_dir=str(analyzer_dir) if analyzer_dir else None,
            test_data_dir=str(test_data_dir) if test_data_dir else None,
            output_dir=str(output_dir) if output_dir else None,
            baseline_dir=str(baseline_dir) if baseline_dir else None,
            workers=workers,
            verbose=verbose,
            quiet=quiet,
        )
    except AppCatRegressError as e:
        fail(e)

    prefix = run_file_prefix(settings)
    out = Path(settings.output_dir)
    out.mkdir(parents=True, exist_ok=True)
    logger = setup_logging(
        verbose=settings.verbosity == "verbose",
        quiet=settings.verbosity == "quiet",
        log_file=str(out / f"{prefix}.log"),
    )
    logger.info("Actions: %s", ", ".join(settings.ordered_actions))
    logger.info("Test data folder: %s", settings.test_data_dir)
    logger.info("Output folder: %s", settings.output_dir)

    try:
        harness = Harness(settings, logger=logger)
        report = harness.run()
        paths = harness.write_reports(report, prefix)
    except AppCatRegressError as e:
        fail(e)

    formatter = get_formatter(output_format)
    if isinstance(formatter, RichFormatter):
        formatter.console = console
    formatter.render(report)

    console.print(f"[dim]Report: {paths['report']}[/dim]", highlight=False)
    if not report.passed:
        raise typer.Exit(1)
