"""Rich terminal formatter."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .base import BaseFormatter
from ..models import DiffResult, HarnessReport

_STATUS_STYLE = {
    "passed": "[green]passed[/green]",
    "failed": "[red]failed[/red]",
    "error": "[bold red]error[/bold red]",
}


def _diff_cell(diff: DiffResult) -> str:
    return (
        f"{diff.matched} / [yellow]{len(diff.new_keys)}[/yellow] / "
        f"[red]{len(diff.missing_keys)}[/red] / [blue]{len(diff.changed)}[/blue]"
    )


class RichFormatter(BaseFormatter):
    """Rich terminal output: one row per project, mismatches listed below."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render(self, report: HarnessReport) -> None:
        counts = report.counts_by_status()
        parts = [
            f"{_STATUS_STYLE[status]}: {counts[status]}"
            for status in ("passed", "failed", "error")
            if counts.get(status)
        ]
        summary = "  |  ".join(parts) if parts else "No projects"
        summary += f"  |  incidents: {report.total_incidents}"
        self.console.print(Panel(summary, title="[bold cyan]AppCat Regression[/bold cyan]", expand=False))

        if not report.results:
            return

        table = Table(expand=True)
        table.add_column("Project", style="yellow", ratio=2)
        table.add_column("Status", justify="center", width=10)
        table.add_column("Incidents", justify="right", width=10)
        table.add_column("Matched / New / Missing / Changed", justify="right", ratio=2)

        for result in report.results:
            table.add_row(
                escape(result.name),
                _STATUS_STYLE.get(result.status, result.status),
                str(result.total),
                _diff_cell(result.diff) if result.diff is not None else "[dim]-[/dim]",
            )
        self.console.print(table)

        for result in report.results:
            if result.status == "error":
                self.console.print(f"[bold red]{escape(result.name)}:[/bold red] {escape(result.error or '')}", highlight=False)
            elif result.diff is not None and not result.diff.passed:
                self.console.print(f"[bold]{escape(result.name)}[/bold]")
                for line in result.diff.details():
                    self.console.print(f"  {line}", markup=False, highlight=False)

    def format(self, report: HarnessReport) -> str:
        with self.console.capture() as capture:
            self.render(report)
        return capture.get()
