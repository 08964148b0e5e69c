"""Baseline storage and comparison for regression gating."""

import logging
import shutil
from pathlib import Path
from typing import Dict, Optional, Tuple

from .exceptions import InputMissingError
from .logging_config import get_logger
from .models import DiffResult, IncidentKey, NormalizedSet
from .parser import parse_output_file

logger = get_logger(__name__)


def diff_sets(
    current: NormalizedSet,
    baseline: NormalizedSet,
    logger: logging.Logger = logger,
) -> DiffResult:
    """Compare a current incident set against its baseline.

    Classification:
    - ``new``      key only in current
    - ``missing``  key only in baseline
    - ``changed``  key in both, messages differ (nothing else is compared,
      so reformatted code snippets or variables do not count)
    - ``matched``  key in both, same message

    Mismatches are the result, never an exception.
    """
    current_keys = current.keys()
    baseline_keys = baseline.keys()

    new_keys = current_keys - baseline_keys
    missing_keys = baseline_keys - current_keys

    changed: Dict[IncidentKey, Tuple[str, str]] = {}
    matched = 0
    for key in sorted(current_keys & baseline_keys):
        old_message = baseline.incidents[key].message
        new_message = current.incidents[key].message
        if old_message != new_message:
            changed[key] = (old_message, new_message)
            logger.info("Message changed for %s: %r -> %r", key, old_message, new_message)
        else:
            matched += 1

    for key in sorted(new_keys):
        logger.info("New incident not in baseline: %s", key)
    for key in sorted(missing_keys):
        logger.info("Baseline incident missing from current output: %s", key)

    result = DiffResult(
        matched=matched,
        new_keys=frozenset(new_keys),
        missing_keys=frozenset(missing_keys),
        changed=changed,
    )
    logger.info(
        "Compared %s: %d matched, %d new, %d missing, %d changed",
        current.project, matched, len(new_keys), len(missing_keys), len(changed),
    )
    return result


class BaselineStore:
    """Accepted analyzer documents, one per project.

    Layout: ``<root>/<project>/<file_name>``.
    """

    def __init__(
        self,
        root: Path,
        file_name: str = "output.yaml",
        logger: logging.Logger = logger,
    ):
        self.root = Path(root)
        self.file_name = file_name
        self.logger = logger

    def document_path(self, project: str) -> Path:
        return self.root / project / self.file_name

    def exists(self, project: str) -> bool:
        return self.document_path(project).is_file()

    def load(self, project: str) -> NormalizedSet:
        """Parse the project's baseline.

        Raises:
            InputMissingError: If the project has no baseline
            MalformedInputError: If the baseline cannot be parsed
        """
        path = self.document_path(project)
        self.logger.info("Loading baseline for %s from %s", project, path)
        return parse_output_file(path, project, logger=self.logger)

    def promote(self, project: str, source: Path) -> Path:
        """Accept ``source`` as the project's new baseline.

        Raises:
            InputMissingError: If ``source`` does not exist
        """
        source = Path(source)
        if not source.is_file():
            raise InputMissingError(source)
        target = self.document_path(project)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        self.logger.info("Baseline for %s updated from %s", project, source)
        return target


def compare_files(
    current_path: Path,
    baseline_path: Path,
    project: str,
    logger: Optional[logging.Logger] = None,
) -> DiffResult:
    """Parse two documents and diff them; parse errors propagate."""
    logger = logger or get_logger(__name__)
    current = parse_output_file(current_path, project, logger=logger)
    baseline = parse_output_file(baseline_path, project, logger=logger)
    return diff_sets(current, baseline, logger=logger)
