"""Per-project errors: missing or malformed documents, analyzer failures."""

from pathlib import Path
from typing import Optional

from .base import AppCatRegressError


class AnalysisError(AppCatRegressError):
    """Base class for errors that abort a single project's run."""
    pass


class InputMissingError(AnalysisError):
    """Raised when an expected analyzer document does not exist."""

    def __init__(self, filepath: Path):
        super().__init__(
            f"No analyzer output found: {filepath}",
            details={"filepath": str(filepath)},
        )
        self.filepath = filepath


class MalformedInputError(AnalysisError):
    """Raised when a document cannot be read or is not of the expected shape."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Malformed analyzer output: {source}",
            details={"source": source, "reason": reason},
        )
        self.source = source
        self.reason = reason


class AnalyzerRunError(AnalysisError):
    """Raised when the external analyzer cannot be run to completion."""

    def __init__(self, project: str, reason: str, returncode: Optional[int] = None):
        details = {"project": project, "reason": reason}
        if returncode is not None:
            details["returncode"] = str(returncode)

        super().__init__(f"Analyzer failed for project {project}", details=details)
        self.project = project
        self.reason = reason
        self.returncode = returncode


class OutputWriteError(AnalysisError):
    """Raised when a per-project artifact cannot be written."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Cannot write {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason
