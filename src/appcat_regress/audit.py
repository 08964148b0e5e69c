"""Per-incident audit records for reviewers.

Each incident is written as its own small YAML file so that a reviewer (a
person, or a false-positive classifier) can work through findings one at a
time without re-parsing the analyzer's full document.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Set

import yaml

from .exceptions import MalformedInputError, OutputWriteError
from .logging_config import get_logger
from .models import Incident
from .parser import parse_line_number, text_value

INCIDENT_EXTENSION = ".incident"

_UNSAFE_CHARS = re.compile(r"[\\/:*?\"<>|\s]")


def record_file_name(rule_set: str, rule: str, index: int) -> str:
    """File name for the ``index``-th incident of ``rule`` in ``rule_set``."""
    parts = [rule_set, rule] if rule_set else [rule]
    stem = "_".join(_UNSAFE_CHARS.sub("_", part) for part in parts)
    return f"{stem}_{index}{INCIDENT_EXTENSION}"


class AuditWriter:
    """Writes one YAML record per incident into a directory.

    Names that would clash (a rule-set listed twice, or rules that only
    differ in characters replaced by ``_``) get a numeric suffix so no
    record overwrites another.
    """

    def __init__(self, directory: Path, logger: Optional[logging.Logger] = None):
        self.directory = Path(directory)
        self.logger = logger or get_logger(__name__)
        self.written = 0
        self._names: Set[str] = set()

    def _unique_name(self, incident: Incident, index: int) -> str:
        name = record_file_name(incident.rule_set, incident.rule, index)
        stem = name[: -len(INCIDENT_EXTENSION)]
        suffix = 1
        while name in self._names:
            name = f"{stem}_{suffix}{INCIDENT_EXTENSION}"
            suffix += 1
        self._names.add(name)
        return name

    def write(self, incident: Incident, index: int) -> Path:
        """Write one record.

        Raises:
            OutputWriteError: If the directory or the record cannot be written
        """
        path = self.directory / self._unique_name(incident, index)
        text = yaml.safe_dump(incident.to_record(), sort_keys=False, allow_unicode=True)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise OutputWriteError(path, str(e))
        self.written += 1
        self.logger.debug("Wrote audit record %s", path)
        return path


def load_record(path: Path) -> Incident:
    """Read an audit record back into an Incident.

    Raises:
        MalformedInputError: If the record is not a YAML mapping
    """
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise MalformedInputError(str(path), "audit record is not a mapping")
    return Incident(
        rule_set=text_value(raw.get("ruleSet")),
        rule=text_value(raw.get("rule")),
        uri=text_value(raw.get("uri")),
        message=text_value(raw.get("message")),
        code_snip=text_value(raw.get("codeSnip")),
        line_number=parse_line_number(raw.get("lineNumber")),
        variables=raw.get("variables"),
    )
