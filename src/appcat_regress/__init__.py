"""
appcat-regress - Regression harness for the AppCat static analyzer

Runs the analyzer over a folder of candidate projects, normalizes its YAML
findings into keyed incident sets and compares each project against an
accepted baseline.  Differences are reported as NEW, MISSING or CHANGED
incidents; per-rule counts are aggregated across projects.
"""

__version__ = "0.1.0"

from .aggregate import RuleMatrix
from .baseline import BaselineStore, compare_files, diff_sets
from .identity import incident_key, normalize_location
from .models import DiffResult, Incident, NormalizedSet, ProjectResult
from .parser import load_document, parse_document, parse_output_file

__all__ = [
    "BaselineStore",
    "DiffResult",
    "Incident",
    "NormalizedSet",
    "ProjectResult",
    "RuleMatrix",
    "compare_files",
    "diff_sets",
    "incident_key",
    "load_document",
    "normalize_location",
    "parse_document",
    "parse_output_file",
]
