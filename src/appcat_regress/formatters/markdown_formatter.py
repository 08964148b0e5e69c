"""Markdown formatter: pass/fail checklist suitable for a PR or pipeline summary."""

from typing import List

from .base import BaseFormatter
from ..models import HarnessReport, ProjectResult

PASS_SIGN = "- [x]"
FAIL_SIGN = "- [ ] :x:"


def format_project(result: ProjectResult) -> str:
    """Checklist entry for one project, with a details block on failure."""
    if result.passed:
        return f"{PASS_SIGN} **{result.name}**."

    if result.status == "error":
        details = [f"[ERROR] {result.error}"]
    elif result.diff is not None:
        details = result.diff.details()
    else:
        details = []

    lines = [f"{FAIL_SIGN} **{result.name}**.", ""]
    if details:
        lines.append("  <details>")
        lines.append("  <summary> Details </summary>")
        lines.append("")
        lines.extend(f"  {line}" for line in details)
        lines.append("")
        lines.append("  </details>")
    return "\n".join(lines)


class MarkdownFormatter(BaseFormatter):
    """Render a harness report as a Markdown document."""

    def render(self, report: HarnessReport) -> None:
        print(self.format(report))

    def format(self, report: HarnessReport) -> str:
        lines: List[str] = ["## AppCat Regression Results", ""]

        for result in report.results:
            lines.append(format_project(result))

        counts = report.counts_by_status()
        summary_parts = [f"{count} {status}" for status, count in sorted(counts.items())]
        lines.append("")
        lines.append(
            f"**Summary:** {', '.join(summary_parts) or 'no projects'}; "
            f"{report.total_incidents} incident(s) in total."
        )

        if report.matrix.rules:
            lines.append("")
            lines.append("| Rule | " + " | ".join(report.matrix.projects) + " |")
            lines.append("|------|" + "|".join("---" for _ in report.matrix.projects) + "|")
            for rule, counts in report.matrix.rows():
                lines.append(f"| `{rule}` | " + " | ".join(str(c) for c in counts) + " |")

        return "\n".join(lines) + "\n"
