"""CSV formatter: rule x project incident counts."""

import csv
import io
from typing import Mapping

from .base import BaseFormatter
from ..aggregate import RuleMatrix
from ..models import HarnessReport


def format_matrix(matrix: RuleMatrix) -> str:
    """``Rule,<project>...`` header, one row per rule, 0 for absent counts."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["Rule", *matrix.projects])
    for rule, counts in matrix.rows():
        writer.writerow([rule, *counts])
    return output.getvalue()


def format_rule_counts(rule_counts: Mapping[str, int]) -> str:
    """Single-project summary: ``Rule,Incidents``."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["Rule", "Incidents"])
    for rule in sorted(rule_counts):
        writer.writerow([rule, rule_counts[rule]])
    return output.getvalue()


class CsvFormatter(BaseFormatter):
    """Render the run's rule matrix as CSV."""

    def render(self, report: HarnessReport) -> None:
        print(self.format(report), end="")

    def format(self, report: HarnessReport) -> str:
        return format_matrix(report.matrix)
