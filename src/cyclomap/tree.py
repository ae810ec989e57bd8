"""Aggregate file reports into a directory tree for the treemap.

Leaves are files; every directory carries the total size of the files below
it and the size-weighted mean of its children's weights::

    size(dir)   = sum(child.size)
    weight(dir) = sum(child.size * child.weight) / size(dir)   (0.0 if size 0)

Reports are inserted first, then :meth:`TreeBuilder.build` runs one
bottom-up pass and returns an immutable :class:`AggregationNode` tree whose
children are sorted by label.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Optional

from .exceptions import InvalidPathError
from .logging_config import get_logger
from .models import FileReport

logger = get_logger(__name__)


@dataclass(frozen=True)
class AggregationNode:
    """A directory or file in the aggregation tree.

    Attributes:
        name: Path segment shown as the rectangle label
        id: Full path; unique across the tree
        size: Line count (sum over descendant files for directories)
        weight: Mean complexity (size-weighted for directories)
        children: Sorted child nodes; empty for files
        is_file: True for leaves built from a FileReport
    """

    name: str
    id: str
    size: int
    weight: float
    children: tuple[AggregationNode, ...] = ()
    is_file: bool = False

    def walk(self) -> Iterator[AggregationNode]:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, node_id: str) -> Optional[AggregationNode]:
        return next((node for node in self.walk() if node.id == node_id), None)


@dataclass
class _Directory:
    dirs: dict[str, _Directory] = field(default_factory=dict)
    files: dict[str, FileReport] = field(default_factory=dict)


class TreeBuilder:
    """Collects reports and builds the aggregation tree.

    Args:
        root: Directory to root the tree at. All inserted paths must lie
            below it. When omitted the tree is rooted at the deepest
            directory common to every inserted path.
    """

    def __init__(self, root: Optional[str] = None):
        self._root_parts = _split(root) if root is not None else None
        self._top = _Directory()

    def insert(self, report: FileReport) -> None:
        """Insert a file leaf, creating directories along its path.

        Inserting the same path again replaces the earlier report.
        """
        parts = _split(report.path)
        if not parts:
            raise InvalidPathError(report.path, "empty path")
        if self._root_parts is not None and (
            len(parts) <= len(self._root_parts) or parts[: len(self._root_parts)] != self._root_parts
        ):
            raise InvalidPathError(report.path, "not below the tree root")

        directory = self._top
        for i, part in enumerate(parts[:-1]):
            if part in directory.files:
                raise InvalidPathError(report.path, f"'{_join(parts[: i + 1])}' is a file")
            directory = directory.dirs.setdefault(part, _Directory())

        leaf = parts[-1]
        if leaf in directory.dirs:
            raise InvalidPathError(report.path, "path is a directory")
        if leaf in directory.files:
            logger.debug(f"Replacing report for {report.path}")
        directory.files[leaf] = report

    def insert_all(self, reports: Iterable[FileReport]) -> None:
        for report in reports:
            self.insert(report)

    def build(self) -> AggregationNode:
        """Roll sizes and weights up and return the immutable tree."""
        parts, directory = self._locate_root()
        return _build_directory(parts, directory)

    def _locate_root(self) -> tuple[list[str], _Directory]:
        parts: list[str] = []
        directory = self._top

        if self._root_parts is not None:
            for part in self._root_parts:
                directory = directory.dirs.get(part, _Directory())
                parts.append(part)
            return parts, directory

        while not directory.files and len(directory.dirs) == 1:
            name, only = next(iter(directory.dirs.items()))
            parts.append(name)
            directory = only
        return parts, directory


def build_tree(reports: Iterable[FileReport], root: Optional[str] = None) -> AggregationNode:
    """Convenience wrapper: insert every report and build."""
    builder = TreeBuilder(root)
    builder.insert_all(reports)
    return builder.build()


def _build_directory(parts: list[str], directory: _Directory) -> AggregationNode:
    children: list[AggregationNode] = []
    for name, sub in directory.dirs.items():
        children.append(_build_directory(parts + [name], sub))
    for name, report in directory.files.items():
        children.append(
            AggregationNode(
                name=name,
                id=_join(parts + [name]),
                size=report.lines,
                weight=report.weight,
                is_file=True,
            )
        )
    children.sort(key=lambda node: node.name)

    size = sum(child.size for child in children)
    if size == 0:
        weight = 0.0
    else:
        weight = math.fsum(child.size * child.weight for child in children) / size

    node_id = _join(parts)
    return AggregationNode(
        name=_label(parts),
        id=node_id,
        size=size,
        weight=weight,
        children=tuple(children),
    )


def _split(path: str) -> list[str]:
    """Split a path into segments, keeping a leading '/' as its own segment."""
    normalized = str(path).replace("\\", "/")
    return [part for part in PurePosixPath(normalized).parts if part != "."]


def _join(parts: list[str]) -> str:
    if not parts:
        return "."
    return str(PurePosixPath(*parts))


def _label(parts: list[str]) -> str:
    return parts[-1] if parts else "."
