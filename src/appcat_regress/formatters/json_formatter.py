"""JSON formatter for harness reports."""

import json
from typing import Any, Dict

from .base import BaseFormatter
from ..models import DiffResult, HarnessReport, ProjectResult


def _diff_to_dict(diff: DiffResult) -> Dict[str, Any]:
    return {
        "passed": diff.passed,
        "matched": diff.matched,
        "new": sorted(diff.new_keys),
        "missing": sorted(diff.missing_keys),
        "changed": {
            key: {"baseline": old, "current": new}
            for key, (old, new) in sorted(diff.changed.items())
        },
    }


def result_to_dict(result: ProjectResult) -> Dict[str, Any]:
    return {
        "name": result.name,
        "status": result.status,
        "total": result.total,
        "rule_counts": dict(sorted(result.rule_counts.items())),
        "duplicates": list(result.duplicates),
        "diff": _diff_to_dict(result.diff) if result.diff is not None else None,
        "error": result.error,
    }


class JsonFormatter(BaseFormatter):
    """Render the report as JSON."""

    def render(self, report: HarnessReport) -> None:
        print(self.format(report))

    def format(self, report: HarnessReport) -> str:
        data = {
            "passed": report.passed,
            "started_at": report.started_at,
            "finished_at": report.finished_at,
            "total_incidents": report.total_incidents,
            "projects": [result_to_dict(r) for r in report.results],
            "rules": report.matrix.to_dict(),
        }
        return json.dumps(data, indent=2)
