"""Per-project orchestration: run the analyzer, parse, compare, aggregate.

A project's failure (missing output, malformed YAML, analyzer crash) is
recorded on that project's result and never stops the others.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .aggregate import RuleMatrix
from .audit import AuditWriter
from .baseline import BaselineStore, diff_sets
from .config import ACTION_ANALYZE, ACTION_RUN, ACTION_VALIDATE, HarnessConfig
from .exceptions import AnalysisError, InvalidPathError, OutputWriteError
from .formatters import MarkdownFormatter, format_matrix, format_rule_counts
from .logging_config import get_logger
from .models import HarnessReport, NormalizedSet, ProjectResult
from .parser import parse_output_file
from .runner import AnalyzerRunner

logger = get_logger(__name__)

APPCAT_OUTPUT = "appcat_output"
ANALYSIS_OUTPUT = "analysis_output"
INCIDENTS_SUMMARY = "incidents_summary.csv"


def discover_projects(test_data_dir: Path, target: Optional[str] = None) -> List[str]:
    """Project names to process.

    Raises:
        InvalidPathError: If the data folder or the named target is missing
    """
    test_data_dir = Path(test_data_dir)
    if not test_data_dir.is_dir():
        raise InvalidPathError(test_data_dir, "test data folder does not exist")

    if target:
        if not (test_data_dir / target).is_dir():
            raise InvalidPathError(
                test_data_dir / target, "target project does not exist in the test data folder"
            )
        return [target]

    return sorted(
        entry.name
        for entry in test_data_dir.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    )


@dataclass(frozen=True)
class ProjectCase:
    """Folder layout for one candidate project."""

    name: str
    project_dir: Path
    output_dir: Path
    output_file_name: str = "output.yaml"

    @property
    def appcat_output_dir(self) -> Path:
        return self.output_dir / APPCAT_OUTPUT

    @property
    def analysis_output_dir(self) -> Path:
        return self.output_dir / ANALYSIS_OUTPUT

    @property
    def output_document(self) -> Path:
        return self.appcat_output_dir / self.output_file_name

    @property
    def incidents_summary_file(self) -> Path:
        return self.analysis_output_dir / INCIDENTS_SUMMARY


def run_file_prefix(config: HarnessConfig, now: Optional[datetime] = None) -> str:
    """``<prefix>[_<target>]_<YYYYmmdd_HHMMSS>`` for the run's log and reports."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    if config.target:
        return f"{config.file_prefix}_{config.target}_{stamp}"
    return f"{config.file_prefix}_{stamp}"


class Harness:
    """Runs the configured actions for every project and collects results."""

    def __init__(
        self,
        config: HarnessConfig,
        logger: logging.Logger = logger,
        runner: Optional[AnalyzerRunner] = None,
        baseline_store: Optional[BaselineStore] = None,
    ):
        self.config = config
        self.logger = logger
        self.runner = runner or AnalyzerRunner(
            Path(config.analyzer_dir),
            executable=config.analyzer_executable,
            targets=config.analyzer_targets,
            timeout_seconds=config.analyzer_timeout_seconds,
            logger=logger,
        )
        self.baseline_store = baseline_store or BaselineStore(
            Path(config.baseline_dir), file_name=config.output_file_name, logger=logger
        )

    def make_case(self, name: str) -> ProjectCase:
        return ProjectCase(
            name=name,
            project_dir=Path(self.config.test_data_dir) / name,
            output_dir=Path(self.config.output_dir) / name,
            output_file_name=self.config.output_file_name,
        )

    # ── Single project ────────────────────────────────────────────────

    def run_project(self, case: ProjectCase) -> ProjectResult:
        """Perform the configured actions for one project.

        Per-project errors are folded into a result with status ``error``.
        """
        self.logger.info("Processing project: %s", case.name)
        try:
            result = self._run_actions(case)
        except AnalysisError as e:
            self.logger.error("Project %s failed: %s", case.name, e)
            return ProjectResult(name=case.name, status="error", error=str(e))
        self.logger.info("Completed project %s: %s", case.name, result.status)
        return result

    def _run_actions(self, case: ProjectCase) -> ProjectResult:
        config = self.config
        current: Optional[NormalizedSet] = None

        if config.has_action(ACTION_RUN):
            self.runner.run(case.name, case.project_dir, case.appcat_output_dir)

        if config.has_action(ACTION_ANALYZE):
            current = self.analyze(case)

        result = ProjectResult(name=case.name, status="passed")

        if config.has_action(ACTION_VALIDATE):
            # Audit records were already written by analyze
            if current is None:
                current = parse_output_file(case.output_document, case.name, logger=self.logger)
            baseline = self.baseline_store.load(case.name)
            result.diff = diff_sets(current, baseline, logger=self.logger)
            result.status = "passed" if result.diff.passed else "failed"

        if current is not None:
            result.total = current.total
            result.rule_counts = dict(current.rule_counts)
            result.duplicates = current.duplicates
        return result

    def analyze(self, case: ProjectCase) -> NormalizedSet:
        """Parse the project's analyzer output and write its rule summary.

        Raises:
            OutputWriteError: If the summary or an audit record cannot be written
        """
        audit_writer = None
        if self.config.persist_incidents:
            audit_writer = AuditWriter(case.analysis_output_dir, logger=self.logger)

        current = parse_output_file(
            case.output_document, case.name, audit_writer=audit_writer, logger=self.logger
        )

        try:
            case.analysis_output_dir.mkdir(parents=True, exist_ok=True)
            case.incidents_summary_file.write_text(
                format_rule_counts(current.rule_counts), encoding="utf-8"
            )
        except OSError as e:
            raise OutputWriteError(case.incidents_summary_file, str(e))
        self.logger.info(
            "Total incidents in %s: %d (summary: %s)",
            case.name, current.total, case.incidents_summary_file,
        )
        for rule, count in sorted(current.rule_counts.items()):
            self.logger.debug("  %s: %d", rule, count)
        return current

    # ── All projects ──────────────────────────────────────────────────

    def run(self, projects: Optional[List[str]] = None) -> HarnessReport:
        """Process every project and aggregate the results.

        Raises:
            InvalidPathError: If the project list cannot be discovered
        """
        if projects is None:
            projects = discover_projects(Path(self.config.test_data_dir), self.config.target)
        self.logger.info("Total target projects found: %d", len(projects))

        report = HarnessReport(
            matrix=RuleMatrix(),
            started_at=datetime.now().isoformat(timespec="seconds"),
        )
        cases = [self.make_case(name) for name in projects]

        results: Dict[str, ProjectResult] = {}
        if self.config.workers <= 1 or len(cases) <= 1:
            for case in cases:
                results[case.name] = self._collect(case, report.matrix)
        else:
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                futures = {
                    executor.submit(self._collect, case, report.matrix): case for case in cases
                }
                for future in as_completed(futures):
                    case = futures[future]
                    results[case.name] = future.result()

        # Report in discovery order regardless of completion order
        report.results = [results[name] for name in projects]
        ordered = [r.name for r in report.results if r.status != "error"]
        report.matrix = RuleMatrix(ordered).merge(report.matrix)
        report.finished_at = datetime.now().isoformat(timespec="seconds")
        self.logger.info("Total incidents found across all projects: %d", report.total_incidents)
        return report

    def _collect(self, case: ProjectCase, matrix: RuleMatrix) -> ProjectResult:
        result = self.run_project(case)
        # Failed projects stay out of the counts rather than adding partial data
        if result.status != "error":
            matrix.add(case.name, result.rule_counts)
        return result

    def write_reports(self, report: HarnessReport, prefix: str) -> Dict[str, Path]:
        """Write the rule matrix CSV and the Markdown report to the output folder."""
        output_dir = Path(self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        summary_path = output_dir / f"{prefix}_summary.csv"
        summary_path.write_text(format_matrix(report.matrix), encoding="utf-8")
        self.logger.info("Global summary written to: %s", summary_path)

        report_path = output_dir / f"{prefix}_report.md"
        report_path.write_text(MarkdownFormatter().format(report), encoding="utf-8")
        self.logger.info("Report written to: %s", report_path)

        return {"summary": summary_path, "report": report_path}
