"""Builders for analyzer documents used across tests."""

from pathlib import Path

import yaml


def make_rule_set(name, violations):
    """Rule-set entry; ``violations`` maps rule -> list of incident dicts."""
    return {
        "name": name,
        "violations": {
            rule: {"incidents": incidents} for rule, incidents in violations.items()
        },
    }


def make_incident(uri="/repo/proj1/src/A.java", line=10, message="M", **extra):
    incident = {
        "uri": uri,
        "message": message,
        "codeSnip": " 10  new File(path)",
        "lineNumber": line,
        "variables": {"file": "A.java"},
    }
    incident.update(extra)
    return incident


def write_document(path: Path, document) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
    return path
