"""
cyclomap - cyclomatic complexity treemaps for C and C++ codebases

Estimates per-function complexity with lexical heuristics (no parser),
rolls it up per file and per directory, and exports the result as a
treemap sized by lines and coloured by complexity.
"""

__version__ = "0.3.0"

from .config import AnalysisConfig, Colorscale, load_config
from .export import build_document, dumps
from .pipeline import AnalysisResult, analyze_path, analyze_sources
from .tree import AggregationNode, TreeBuilder

__all__ = [
    "analyze_path",  # Main entry point
    "analyze_sources",
    "AnalysisResult",
    "AnalysisConfig",
    "Colorscale",
    "load_config",
    "AggregationNode",
    "TreeBuilder",
    "build_document",
    "dumps",
]
