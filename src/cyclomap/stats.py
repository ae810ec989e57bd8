"""Summary statistics over a batch of file reports."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, List

import numpy as np

from .models import FileReport


@dataclass(frozen=True)
class Summary:
    """Batch-level figures shown by the CLI and the dashboard.

    Complexity figures are over individual functions, not file means.
    """

    files: int = 0
    functions: int = 0
    lines: int = 0
    degraded_files: int = 0
    mean: float = 0.0
    median: float = 0.0
    p90: float = 0.0
    max: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": self.files,
            "functions": self.functions,
            "lines": self.lines,
            "degraded_files": self.degraded_files,
            "mean": round(self.mean, 4),
            "median": round(self.median, 4),
            "p90": round(self.p90, 4),
            "max": self.max,
        }


def summarize(reports: Iterable[FileReport]) -> Summary:
    """Compute the summary of *reports*; zeros when nothing was scored."""
    reports = list(reports)
    complexities: List[int] = [f.complexity for r in reports for f in r.functions]
    base = dict(
        files=len(reports),
        functions=len(complexities),
        lines=sum(r.lines for r in reports),
        degraded_files=sum(1 for r in reports if r.degraded),
    )
    if not complexities:
        return Summary(**base)

    values = np.asarray(complexities, dtype=float)
    return Summary(
        mean=float(np.mean(values)),
        median=float(np.median(values)),
        p90=float(np.percentile(values, 90)),
        max=int(np.max(values)),
        **base,
    )


def hotspots(reports: Iterable[FileReport], limit: int = 10) -> List[FileReport]:
    """Files with the highest weight, ties broken by size then path."""
    ranked = sorted(reports, key=lambda r: (-r.weight, -r.lines, r.path))
    return ranked[:limit]
