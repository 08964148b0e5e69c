"""Exception hierarchy for appcat-regress."""

from .analysis import (
    AnalysisError,
    AnalyzerRunError,
    InputMissingError,
    MalformedInputError,
    OutputWriteError,
)
from .base import AppCatRegressError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)

__all__ = [
    "AppCatRegressError",
    "AnalysisError",
    "AnalyzerRunError",
    "InputMissingError",
    "MalformedInputError",
    "OutputWriteError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidPathError",
]
