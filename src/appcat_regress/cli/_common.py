"""Shared CLI helpers."""

from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from ..exceptions import AppCatRegressError

console = Console()

OUTPUT_FORMATS = ("rich", "markdown", "json", "csv")


def fail(error: AppCatRegressError) -> NoReturn:
    """Print an error from the exception hierarchy and exit 1."""
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise typer.Exit(1)


def check_format(output_format: str) -> str:
    if output_format not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"choose from {', '.join(OUTPUT_FORMATS)}")
    return output_format
