"""Base formatter interface for harness reports."""

from abc import ABC, abstractmethod

from ..models import HarnessReport


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, report: HarnessReport) -> None:
        """Render the report to stdout/stderr as appropriate."""

    @abstractmethod
    def format(self, report: HarnessReport) -> str:
        """Return formatted string representation of the report."""
