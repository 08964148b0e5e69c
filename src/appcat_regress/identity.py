"""Stable identity keys for incidents.

Two analyzer runs on different machines report the same finding under
different absolute paths, e.g.::

    C:/agent/_work/1/s/data/proj1/src/A.java
    /home/dev/checkout/data/proj1/src/A.java

Both must map to the same key.  The location is therefore trimmed to start
at the first occurrence of the project name, giving ``proj1/src/A.java`` in
both cases.  The match is a plain substring search: when the project name
does not occur in the path the path is used unchanged.

Key layout::

    <rule_set>-<rule>-<normalized location>-<line number>

An unspecified line number is rendered as ``0``.  Rule names routinely
contain ``-`` themselves, so two different incidents can in principle join
to the same string; ``is_key_collision`` tells such a case apart from a
genuine duplicate.
"""

from typing import Optional, Tuple

from .models import Incident, IncidentKey

KEY_SEPARATOR = "-"


def normalize_location(uri: str, project: str) -> str:
    """Return ``uri`` from the first occurrence of ``project`` onwards."""
    if not project:
        return uri
    start = uri.find(project)
    if start == -1:
        return uri
    return uri[start:]


def key_parts(
    rule_set: str,
    rule: str,
    uri: str,
    line_number: Optional[int],
    project: str,
) -> Tuple[str, str, str, str]:
    return (
        rule_set,
        rule,
        normalize_location(uri, project),
        str(line_number if line_number is not None else 0),
    )


def incident_key(
    rule_set: str,
    rule: str,
    uri: str,
    line_number: Optional[int],
    project: str,
) -> IncidentKey:
    """Build the key used to match an incident across two runs."""
    return KEY_SEPARATOR.join(key_parts(rule_set, rule, uri, line_number, project))


def key_for(incident: Incident, project: str) -> IncidentKey:
    return incident_key(
        incident.rule_set, incident.rule, incident.uri, incident.line_number, project
    )


def is_key_collision(first: Incident, second: Incident, project: str) -> bool:
    """True when two incidents share a key only because of the separator."""
    return key_parts(
        first.rule_set, first.rule, first.uri, first.line_number, project
    ) != key_parts(second.rule_set, second.rule, second.uri, second.line_number, project)
