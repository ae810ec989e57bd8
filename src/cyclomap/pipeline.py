"""End-to-end analysis: sources -> reports -> aggregation tree.

Per-file work (read, scan, score) is independent and runs on a thread pool.
Failures of one file become :class:`~cyclomap.models.Diagnostic` records and
never stop the batch. Reports are sorted by path and inserted into the tree
by a single coordinating pass.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .complexity import get_policy
from .config import AnalysisConfig
from .exceptions import AnalysisError, UnsupportedExtensionError
from .logging_config import get_logger
from .models import Diagnostic, FileReport, SourceFile
from .scanning.lexer import count_code_lines, scan
from .tree import AggregationNode, TreeBuilder
from .walker import collect_files, read_source

logger = get_logger(__name__)

_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

SourceLike = Union[SourceFile, Tuple[str, str]]
_FileOutcome = Tuple[Optional[FileReport], List[Diagnostic]]


@dataclass
class AnalysisResult:
    """Tree plus everything needed to explain it.

    Attributes:
        tree: Aggregation tree (an empty root when nothing was scored)
        reports: Per-file reports, sorted by path
        diagnostics: Non-fatal per-file problems
    """

    tree: AggregationNode
    reports: List[FileReport] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when at least one file was scored."""
        return bool(self.reports)


def score_source(source: SourceFile, config: AnalysisConfig) -> _FileOutcome:
    """Score one file's text.

    Returns the report and the malformed-segment diagnostics of that file.

    Raises:
        UnsupportedExtensionError: If the file type is not configured
    """
    if not config.is_supported(source.path):
        raise UnsupportedExtensionError(source.path, list(config.extensions))

    policy = get_policy(config.policy_for(source.path))
    scoring = policy.score(list(scan(source.text)))

    if config.size_metric == "code":
        lines = count_code_lines(source.text)
    else:
        lines = source.line_count

    report = FileReport(
        path=source.path,
        lines=lines,
        functions=tuple(scoring.functions),
        policy=policy.name,
        decision_points=scoring.decision_points,
        degraded=scoring.degraded,
    )
    diagnostics = [Diagnostic.from_error(source.path, error) for error in scoring.errors]
    for error in scoring.errors:
        logger.debug(f"{source.path}: {error}")
    if report.degraded:
        logger.warning(f"No function could be delimited in {source.path}; using file-level count")
    return report, diagnostics


def analyze_sources(
    sources: Iterable[SourceLike],
    config: Optional[AnalysisConfig] = None,
    root: Optional[str] = None,
) -> AnalysisResult:
    """Analyze in-memory ``(path, text)`` pairs or SourceFiles.

    Args:
        sources: Files to analyze; paths become node ids
        config: Analysis configuration (defaults when omitted)
        root: Tree root; defaults to the common ancestor of all paths
    """
    config = config or AnalysisConfig()
    files = [s if isinstance(s, SourceFile) else SourceFile(*s) for s in sources]
    outcomes = _run(files, lambda source: _score_isolated(source, config), config)
    return _assemble(outcomes, root)


def analyze_path(path: Union[str, Path], config: Optional[AnalysisConfig] = None) -> AnalysisResult:
    """Walk *path* (a file or a directory) and analyze every source file.

    Node ids are relative to the parent of the analyzed directory, so the
    tree root is labelled with the directory's own name.

    Raises:
        InvalidPathError: If *path* does not exist
    """
    config = config or AnalysisConfig()
    target = Path(path)
    files = collect_files(target, config)

    root_dir = target.resolve() if target.is_dir() else target.resolve().parent
    label = root_dir.name or "."

    def display(file_path: Path) -> str:
        if target.is_dir():
            relative = file_path.relative_to(target).as_posix()
        else:
            relative = file_path.name
        return relative if label == "." else f"{label}/{relative}"

    def work(file_path: Path) -> _FileOutcome:
        shown = display(file_path)
        try:
            text = read_source(file_path, config)
        except AnalysisError as e:
            logger.warning(f"Skipping {shown}: {e}")
            return None, [Diagnostic.from_error(shown, e)]
        return _score_isolated(SourceFile(shown, text), config)

    outcomes = _run(files, work, config)
    return _assemble(outcomes, label)


def _score_isolated(source: SourceFile, config: AnalysisConfig) -> _FileOutcome:
    try:
        return score_source(source, config)
    except AnalysisError as e:
        logger.warning(f"Skipping {source.path}: {e}")
        return None, [Diagnostic.from_error(source.path, e)]


def _run(items: list, work, config: AnalysisConfig) -> List[_FileOutcome]:
    """Apply *work* to every item, in parallel for larger batches."""
    if len(items) < 10 or config.workers == 1:
        return [work(item) for item in items]

    workers = config.workers or _DEFAULT_WORKERS
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(work, items))


def _assemble(outcomes: List[_FileOutcome], root: Optional[str]) -> AnalysisResult:
    # A path seen twice keeps its last report.
    by_path: dict[str, FileReport] = {}
    diagnostics: List[Diagnostic] = []
    for report, file_diagnostics in outcomes:
        if report is not None:
            by_path[report.path] = report
        diagnostics.extend(file_diagnostics)

    reports = sorted(by_path.values(), key=lambda r: r.path)
    diagnostics.sort(key=lambda d: (d.path, d.code.value, d.message))

    builder = TreeBuilder(root)
    builder.insert_all(reports)
    tree = builder.build()

    logger.info(
        f"Analysis complete: {len(reports)} files scored, {len(diagnostics)} diagnostics"
    )
    return AnalysisResult(tree=tree, reports=reports, diagnostics=diagnostics)
