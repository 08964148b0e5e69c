"""Parse command: summarize one analyzer document."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from . import app
from ._common import console, fail
from ..audit import AuditWriter
from ..exceptions import AppCatRegressError
from ..logging_config import setup_logging
from ..parser import parse_output_file


@app.command()
def parse(
    document: Path = typer.Argument(..., help="Analyzer output (YAML)"),
    project: str = typer.Option(
        ..., "--project", "-p",
        help="Project name used to trim incident paths",
    ),
    audit_dir: Optional[Path] = typer.Option(
        None, "--audit-dir",
        help="Also write one audit record per incident into this folder",
        file_okay=False, dir_okay=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Show incident totals per rule for DOCUMENT."""
    logger = setup_logging(verbose=verbose, quiet=not verbose)
    writer = AuditWriter(audit_dir, logger=logger) if audit_dir else None
    try:
        normalized = parse_output_file(document, project, audit_writer=writer, logger=logger)
    except AppCatRegressError as e:
        fail(e)

    table = Table(title=f"Incidents in {document.name}")
    table.add_column("Rule", style="yellow")
    table.add_column("Incidents", justify="right")
    for rule, count in sorted(normalized.rule_counts.items()):
        table.add_row(rule, str(count))
    console.print(table)

    console.print(
        f"Total: {normalized.total}  unique: {len(normalized)}  "
        f"duplicates: {len(normalized.duplicates)}",
        highlight=False,
    )
    if writer is not None:
        console.print(f"[dim]{writer.written} audit record(s) written to {audit_dir}[/dim]")
