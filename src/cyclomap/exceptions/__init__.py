"""Exception hierarchy for cyclomap."""

from .analysis import (
    AnalysisError,
    FileAccessError,
    MalformedSegmentError,
    UnsupportedExtensionError,
)
from .base import CyclomapError
from .config import ConfigFileError, ConfigurationError, InvalidConfigError, InvalidPathError
from .taxonomy import ErrorCode

__all__ = [
    "CyclomapError",
    "ErrorCode",
    "AnalysisError",
    "FileAccessError",
    "UnsupportedExtensionError",
    "MalformedSegmentError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidPathError",
    "InvalidConfigError",
]
