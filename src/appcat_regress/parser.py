"""Parse analyzer output into a keyed, de-duplicated incident set.

The analyzer writes a YAML list of rule-sets::

    - name: cloud-readiness
      violations:
        local-storage-00001:
          incidents:
            - uri: file:///work/proj1/src/A.java
              message: Use a managed storage service
              codeSnip: " 10  new File(path)"
              lineNumber: 10
              variables: {file: A.java}

Every incident is counted against its rule.  Incidents are then keyed with
:func:`identity.incident_key`; when two incidents share a key the first one
is kept and the key is recorded as a duplicate.
"""

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple

import yaml

from .exceptions import InputMissingError, MalformedInputError
from .identity import is_key_collision, key_for
from .logging_config import get_logger
from .models import Incident, IncidentKey, NormalizedSet

if TYPE_CHECKING:
    from .audit import AuditWriter

logger = get_logger(__name__)

# ASCII digits only; str.isdigit also accepts superscripts int() rejects
_LINE_NUMBER = re.compile(r"[+-]?[0-9]+")


def load_document(path: Path) -> List[Any]:
    """Read an analyzer document from disk.

    Raises:
        InputMissingError: If ``path`` does not exist
        MalformedInputError: If the file cannot be read or is not valid YAML
    """
    path = Path(path)
    if not path.is_file():
        raise InputMissingError(path)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedInputError(str(path), f"cannot read file: {e}")
    except yaml.YAMLError as e:
        raise MalformedInputError(str(path), f"invalid YAML: {e}")

    # An empty file is a run without findings
    if data is None:
        return []
    if not isinstance(data, list):
        raise MalformedInputError(
            str(path), f"expected a list of rule-sets, got {type(data).__name__}"
        )
    return data


def parse_line_number(value: Any) -> Optional[int]:
    """Integer line number, or None when absent or not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if _LINE_NUMBER.fullmatch(text):
            return int(text)
    return None


def text_value(value: Any) -> str:
    """String form of a scalar field; absent values become the empty string."""
    return "" if value is None else str(value)


def iter_incidents(
    document: List[Any],
    source: str = "<document>",
    logger: logging.Logger = logger,
) -> Iterator[Tuple[int, Incident]]:
    """Yield ``(index within its rule, Incident)`` in document order.

    Raises:
        MalformedInputError: If any level of the document has the wrong shape
    """
    if not isinstance(document, list):
        raise MalformedInputError(
            source, f"expected a list of rule-sets, got {type(document).__name__}"
        )

    for position, section in enumerate(document):
        if not isinstance(section, dict):
            raise MalformedInputError(source, f"rule-set #{position} is not a mapping")

        rule_set = text_value(section.get("name"))
        violations = section.get("violations")
        if violations is None:
            logger.debug("No violations in rule-set '%s'", rule_set)
            continue
        if not isinstance(violations, dict):
            raise MalformedInputError(
                source, f"violations of rule-set '{rule_set}' is not a mapping"
            )

        for rule_name, violation in violations.items():
            rule = text_value(rule_name)
            if violation is None:
                continue
            if not isinstance(violation, dict):
                raise MalformedInputError(source, f"violation '{rule}' is not a mapping")

            incidents = violation.get("incidents") or []
            if not isinstance(incidents, list):
                raise MalformedInputError(source, f"incidents of '{rule}' is not a list")
            if not incidents:
                logger.debug("No incidents for rule '%s'", rule)

            for index, raw in enumerate(incidents):
                if not isinstance(raw, dict):
                    raise MalformedInputError(
                        source, f"incident #{index} of '{rule}' is not a mapping"
                    )
                yield index, Incident(
                    rule_set=rule_set,
                    rule=rule,
                    uri=text_value(raw.get("uri")),
                    message=text_value(raw.get("message")),
                    code_snip=text_value(raw.get("codeSnip")),
                    line_number=parse_line_number(raw.get("lineNumber")),
                    variables=raw.get("variables"),
                )


def parse_document(
    document: List[Any],
    project: str,
    audit_writer: Optional["AuditWriter"] = None,
    logger: logging.Logger = logger,
    source: str = "<document>",
) -> NormalizedSet:
    """Normalize a loaded analyzer document.

    Args:
        document: Rule-set list as returned by :func:`load_document`
        project: Project name used to trim incident locations
        audit_writer: When given, every incident is also written as a record
        logger: Destination for progress and duplicate messages
        source: Label used in error messages

    Returns:
        NormalizedSet with first-wins incidents, per-rule counts and total

    Raises:
        MalformedInputError: If the document does not have the expected shape
        OutputWriteError: If an audit record cannot be written
    """
    incidents: Dict[IncidentKey, Incident] = {}
    rule_counts: Dict[str, int] = {}
    duplicates: List[IncidentKey] = []
    total = 0

    # Fully materialised first so a shape error leaves nothing half-written
    parsed = list(iter_incidents(document, source, logger=logger))

    for index, incident in parsed:
        total += 1
        rule_counts[incident.rule] = rule_counts.get(incident.rule, 0) + 1

        key = key_for(incident, project)
        logger.debug("Incident key: %s", key)

        first = incidents.get(key)
        if first is None:
            incidents[key] = incident
        else:
            duplicates.append(key)
            if is_key_collision(first, incident, project):
                logger.warning("Distinct incidents share key %s; keeping the first", key)
            else:
                logger.info("Duplicate incident dropped: %s", key)

        if audit_writer is not None:
            audit_writer.write(incident, index)

    logger.info(
        "Parsed %d incident(s) across %d rule(s) for %s (%d duplicate(s))",
        total, len(rule_counts), project, len(duplicates),
    )
    return NormalizedSet(
        project=project,
        incidents=incidents,
        rule_counts=rule_counts,
        total=total,
        duplicates=tuple(duplicates),
    )


def parse_output_file(
    path: Path,
    project: str,
    audit_writer: Optional["AuditWriter"] = None,
    logger: logging.Logger = logger,
) -> NormalizedSet:
    """Load and normalize the analyzer document at ``path``."""
    logger.info("Parsing analyzer output %s", path)
    document = load_document(path)
    return parse_document(
        document, project, audit_writer=audit_writer, logger=logger, source=str(path)
    )
