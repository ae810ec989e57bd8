"""Serialize the aggregation tree for treemap renderers.

Two wire formats are produced from the same tree:

* ``tree`` -- nested ``{name, id, size, weight, color, children}`` dicts,
  the d3-style hierarchy. Leaves carry no ``children`` key.
* ``plotly`` -- one flat treemap trace (``ids``, ``labels``, ``parents``,
  ``values``, ``marker``) ready for ``Plotly.newPlot``.

Every node is emitted, including zero-size and zero-weight ones. Output of
:func:`dumps` is byte-identical for identical input.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, List, Literal

from .config import Colorscale
from .stats import summarize
from .tree import AggregationNode

if TYPE_CHECKING:
    from .pipeline import AnalysisResult

ExportFormat = Literal["tree", "plotly"]
EXPORT_FORMATS = ("tree", "plotly")


def node_to_dict(node: AggregationNode) -> Dict[str, Any]:
    """Convert one node and its descendants to nested dicts.

    ``color`` mirrors ``weight``; the renderer maps it through the palette.
    """
    data: Dict[str, Any] = {
        "name": node.name,
        "id": node.id,
        "size": node.size,
        "weight": node.weight,
        "color": node.weight,
    }
    if not node.is_file:
        data["children"] = [node_to_dict(child) for child in node.children]
    return data


def to_treemap(tree: AggregationNode, colorscale: Colorscale = Colorscale.BLUES) -> Dict[str, Any]:
    """Nested treemap document with the palette to render it with."""
    return {
        "colorscale": Colorscale.parse(colorscale).value,
        "root": node_to_dict(tree),
    }


def to_plotly_trace(
    tree: AggregationNode, colorscale: Colorscale = Colorscale.BLUES
) -> Dict[str, Any]:
    """Flatten the tree into a plotly ``treemap`` trace.

    Nodes are listed in pre-order, so every parent precedes its children.
    The colour midpoint is the root's weight (the codebase average).
    """
    ids: List[str] = []
    labels: List[str] = []
    parents: List[str] = []
    values: List[int] = []
    colors: List[float] = []

    def visit(node: AggregationNode, parent_id: str) -> None:
        ids.append(node.id)
        labels.append(node.name)
        parents.append(parent_id)
        values.append(node.size)
        colors.append(node.weight)
        for child in node.children:
            visit(child, node.id)

    visit(tree, "")
    return {
        "type": "treemap",
        "branchvalues": "total",
        "ids": ids,
        "labels": labels,
        "parents": parents,
        "values": values,
        "marker": {
            "colors": colors,
            "cmid": tree.weight,
            "colorscale": Colorscale.parse(colorscale).value,
        },
    }


def build_document(
    result: AnalysisResult,
    colorscale: Colorscale = Colorscale.BLUES,
    fmt: ExportFormat = "tree",
) -> Dict[str, Any]:
    """Full export document for an analysis result.

    Both formats carry the diagnostics list and the batch summary next to
    the tree data.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format '{fmt}' (expected one of {', '.join(EXPORT_FORMATS)})")

    diagnostics = [d.to_dict() for d in sorted(result.diagnostics, key=lambda d: (d.path, d.code.value))]
    summary = summarize(result.reports).to_dict()

    if fmt == "plotly":
        return {
            "data": [to_plotly_trace(result.tree, colorscale)],
            "layout": {"margin": {"t": 0, "l": 0, "r": 0, "b": 0}},
            "diagnostics": diagnostics,
            "summary": summary,
        }

    document = to_treemap(result.tree, colorscale)
    document["diagnostics"] = diagnostics
    document["summary"] = summary
    return document


def dumps(document: Dict[str, Any], indent: int = 2) -> str:
    """Deterministic JSON: sorted keys and fixed separators."""
    return json.dumps(document, indent=indent, sort_keys=True, separators=(",", ": "))


def debug_lines(result: AnalysisResult) -> List[str]:
    """One ``file/nloc/cc`` line per analyzed file, sorted by path."""
    return [
        f"file: {report.path}, nloc: {report.lines}, cc: {report.weight:.2f}"
        for report in sorted(result.reports, key=lambda r: r.path)
    ]
