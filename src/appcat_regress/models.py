"""Data models for parsed analyzer output and baseline comparisons."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .aggregate import RuleMatrix

IncidentKey = str


@dataclass(frozen=True)
class Incident:
    """One finding reported by the analyzer, tagged with its rule provenance.

    ``variables`` is whatever the analyzer emitted for the rule (mapping,
    list, scalar or ``None``); it is carried through untouched and never
    compared.
    """

    rule_set: str
    rule: str
    uri: str
    message: str
    code_snip: str = ""
    line_number: Optional[int] = None
    variables: Any = None

    def to_record(self) -> Dict[str, Any]:
        """Serialisable form using the analyzer's own field names."""
        return {
            "ruleSet": self.rule_set,
            "rule": self.rule,
            "uri": self.uri,
            "message": self.message,
            "codeSnip": self.code_snip,
            "variables": self.variables,
            "lineNumber": self.line_number,
        }


@dataclass(frozen=True)
class NormalizedSet:
    """De-duplicated, keyed view of one parsed analyzer document.

    ``rule_counts`` and ``total`` count every occurrence, duplicates
    included; ``incidents`` keeps only the first incident per key.
    """

    project: str
    incidents: Dict[IncidentKey, Incident] = field(default_factory=dict)
    rule_counts: Dict[str, int] = field(default_factory=dict)
    total: int = 0
    duplicates: Tuple[IncidentKey, ...] = ()

    def __len__(self) -> int:
        return len(self.incidents)

    def __contains__(self, key: object) -> bool:
        return key in self.incidents

    def keys(self) -> FrozenSet[IncidentKey]:
        return frozenset(self.incidents)


@dataclass(frozen=True)
class DiffResult:
    """Classification of a current set against its baseline.

    ``changed`` maps a key to ``(baseline_message, current_message)``.
    """

    matched: int = 0
    new_keys: FrozenSet[IncidentKey] = frozenset()
    missing_keys: FrozenSet[IncidentKey] = frozenset()
    changed: Dict[IncidentKey, Tuple[str, str]] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not (self.new_keys or self.missing_keys or self.changed)

    def details(self) -> List[str]:
        """One line per mismatch, sorted by key so output is reproducible."""
        lines: List[Tuple[IncidentKey, str]] = []
        for key in self.new_keys:
            lines.append((key, f"[NEW] {key}"))
        for key, (old_message, new_message) in self.changed.items():
            lines.append((key, f"[CHANGED] {key}: {old_message!r} -> {new_message!r}"))
        for key in self.missing_keys:
            lines.append((key, f"[MISSING] {key}"))
        return [text for _, text in sorted(lines)]


@dataclass
class ProjectResult:
    """Outcome of processing one candidate project."""

    name: str
    status: str  # "passed" | "failed" | "error"
    total: int = 0
    rule_counts: Dict[str, int] = field(default_factory=dict)
    diff: Optional[DiffResult] = None
    duplicates: Tuple[IncidentKey, ...] = ()
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status == "passed"


@dataclass
class HarnessReport:
    """Everything one harness run produced, ready for rendering."""

    results: List[ProjectResult] = field(default_factory=list)
    matrix: RuleMatrix = field(default_factory=RuleMatrix)
    started_at: str = ""
    finished_at: str = ""

    @property
    def total_incidents(self) -> int:
        return sum(r.total for r in self.results)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    def counts_by_status(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for r in self.results:
            counts[r.status] = counts.get(r.status, 0) + 1
        return counts
