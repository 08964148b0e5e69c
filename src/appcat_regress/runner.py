"""Invoke the external analyzer via subprocess."""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from .config import DEFAULT_ANALYZER_TARGETS
from .exceptions import AnalyzerRunError
from .logging_config import get_logger

logger = get_logger(__name__)


class AnalyzerRunner:
    """Run ``<analyzer_dir>/<executable> analyze`` for one project."""

    def __init__(
        self,
        analyzer_dir: Path,
        executable: str = "appcat",
        targets: Sequence[str] = DEFAULT_ANALYZER_TARGETS,
        timeout_seconds: Optional[int] = None,
        logger: logging.Logger = logger,
    ):
        self.analyzer_dir = Path(analyzer_dir)
        self.executable = executable
        self.targets = tuple(targets)
        self.timeout_seconds = timeout_seconds
        self.logger = logger

    @property
    def executable_path(self) -> Path:
        path = self.analyzer_dir / self.executable
        # Windows builds ship as appcat.exe
        if not path.exists() and os.name == "nt" and path.suffix == "":
            return path.with_suffix(".exe")
        return path

    def build_command(self, project_dir: Path, output_dir: Path) -> List[str]:
        return [
            str(self.executable_path),
            "analyze",
            "--input", str(project_dir),
            "--output", str(output_dir),
            "--target", ",".join(self.targets),
            "--overwrite",
        ]

    def run(self, project: str, project_dir: Path, output_dir: Path) -> Path:
        """Analyze ``project_dir`` into ``output_dir``.

        Returns:
            ``output_dir``

        Raises:
            AnalyzerRunError: If the analyzer or project is missing, the
                analyzer exits non-zero, or it exceeds the timeout
        """
        project_dir = Path(project_dir)
        output_dir = Path(output_dir)

        if not self.executable_path.is_file():
            raise AnalyzerRunError(project, f"analyzer not found at {self.executable_path}")
        if not project_dir.is_dir():
            raise AnalyzerRunError(project, f"project folder not found: {project_dir}")
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AnalyzerRunError(project, f"cannot create output folder {output_dir}: {e}")

        cmd = self.build_command(project_dir, output_dir)
        self.logger.info("Running analyzer for %s: %s", project, " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                cwd=str(self.analyzer_dir),
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            raise AnalyzerRunError(
                project, f"analyzer timed out after {self.timeout_seconds}s"
            )
        except OSError as e:
            raise AnalyzerRunError(project, f"cannot start analyzer: {e}")

        if result.stdout:
            self.logger.debug(result.stdout.rstrip())
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise AnalyzerRunError(
                project,
                stderr.splitlines()[-1] if stderr else "analyzer exited with an error",
                returncode=result.returncode,
            )

        self.logger.info("Analyzer completed for %s", project)
        return output_dir
