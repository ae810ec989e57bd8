"""Analysis-related exceptions: file access, file types, segmentation."""

from pathlib import Path
from typing import List, Union

from .base import CyclomapError
from .taxonomy import ErrorCode


class AnalysisError(CyclomapError):
    """Base class for per-file analysis errors."""

    code: ErrorCode


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    code = ErrorCode.CY100

    def __init__(self, filepath: Union[str, Path], reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class UnsupportedExtensionError(AnalysisError):
    """Raised when no counting policy is configured for a file type."""

    code = ErrorCode.CY101

    def __init__(self, filepath: Union[str, Path], supported: List[str]):
        super().__init__(
            f"Unsupported file type: {filepath}",
            details={"filepath": str(filepath), "supported": ", ".join(supported)},
        )
        self.filepath = filepath
        self.supported = supported


class MalformedSegmentError(AnalysisError):
    """Raised when a function candidate's body never balances."""

    code = ErrorCode.CY200

    def __init__(self, name: str, line: int, reason: str = "unbalanced braces"):
        super().__init__(
            f"Cannot delimit function '{name}' starting at line {line}",
            details={"function": name, "line": str(line), "reason": reason},
        )
        self.name = name
        self.line = line
        self.reason = reason
