"""Data models shared by the scoring pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .exceptions import AnalysisError, ErrorCode
from .scanning.lexer import count_lines


@dataclass(frozen=True)
class SourceFile:
    """Raw text of one file, as supplied by the walker."""

    path: str
    text: str

    @property
    def line_count(self) -> int:
        return count_lines(self.text)


@dataclass(frozen=True)
class FunctionSpan:
    """A scored function (or pseudo-function for the return-count policy).

    Attributes:
        name: Best-effort name; placeholder for pseudo-functions
        start_line: First line (1-indexed)
        end_line: Last line (1-indexed)
        complexity: 1 + decision points + logical operators, never below 1
    """

    name: str
    start_line: int
    end_line: int
    complexity: int

    def __post_init__(self) -> None:
        if self.complexity < 1:
            raise ValueError(f"complexity must be at least 1, got {self.complexity}")


@dataclass(frozen=True)
class FileReport:
    """Per-file result handed to the tree builder.

    Attributes:
        path: File path (the node id in the tree)
        lines: Size of the file in the configured size metric
        functions: Scored functions in source order
        policy: Name of the counting policy used
        decision_points: File-level decision keywords plus logical operators
        degraded: Bodies were seen but none could be delimited
    """

    path: str
    lines: int
    functions: tuple[FunctionSpan, ...] = ()
    policy: str = "keyword"
    decision_points: int = 0
    degraded: bool = False

    @property
    def mean_complexity(self) -> float:
        """Arithmetic mean of function complexities; 0.0 without functions."""
        if not self.functions:
            return 0.0
        return sum(f.complexity for f in self.functions) / len(self.functions)

    @property
    def weight(self) -> float:
        """Colour metric of the file's treemap leaf.

        Equal to :attr:`mean_complexity`, except for degraded files which
        fall back to the file-level keyword count.
        """
        if self.degraded and not self.functions:
            return float(1 + self.decision_points)
        return self.mean_complexity


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal per-file problem returned alongside the tree."""

    path: str
    code: ErrorCode
    message: str

    @classmethod
    def from_error(cls, path: str, error: AnalysisError) -> Diagnostic:
        return cls(path=path, code=error.code, message=str(error))

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "code": self.code.value, "message": self.message}
