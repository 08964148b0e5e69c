"""Cross-project rule counts."""

from collections import defaultdict
from threading import Lock
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple


class RuleMatrix:
    """Rule x project occurrence counts.

    Merging is associative and commutative, so projects can be added in any
    order, including from worker threads as each one finishes.  Column order
    is the order projects were first added unless an explicit ``projects``
    order is given.
    """

    def __init__(self, projects: Optional[Iterable[str]] = None):
        self._counts: Dict[str, Dict[str, int]] = defaultdict(dict)
        self._projects: List[str] = list(projects or [])
        self._lock = Lock()

    def add(self, project: str, rule_counts: Mapping[str, int]) -> None:
        """Merge one project's rule counts."""
        with self._lock:
            if project not in self._projects:
                self._projects.append(project)
            for rule, count in rule_counts.items():
                row = self._counts[rule]
                row[project] = row.get(project, 0) + count

    def merge(self, other: "RuleMatrix") -> "RuleMatrix":
        """Return a new matrix holding the counts of both."""
        merged = RuleMatrix(self.projects)
        for source in (self, other):
            for project in source.projects:
                merged.add(project, source.project_counts(project))
        return merged

    @property
    def projects(self) -> List[str]:
        with self._lock:
            return list(self._projects)

    @property
    def rules(self) -> List[str]:
        with self._lock:
            return sorted(self._counts)

    def count(self, rule: str, project: str) -> int:
        with self._lock:
            return self._counts.get(rule, {}).get(project, 0)

    def project_counts(self, project: str) -> Dict[str, int]:
        with self._lock:
            return {
                rule: row[project] for rule, row in self._counts.items() if project in row
            }

    def rows(self) -> Iterator[Tuple[str, List[int]]]:
        """``(rule, counts)`` per rule, counts aligned with ``projects``."""
        projects = self.projects
        for rule in self.rules:
            yield rule, [self.count(rule, p) for p in projects]

    @property
    def total(self) -> int:
        with self._lock:
            return sum(sum(row.values()) for row in self._counts.values())

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        """``{rule: {project: count}}`` with zeros filled in."""
        projects = self.projects
        return {rule: dict(zip(projects, counts)) for rule, counts in self.rows()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleMatrix):
            return NotImplemented
        return self.to_dict() == other.to_dict() and set(self.projects) == set(other.projects)

    __hash__ = None  # type: ignore[assignment]
