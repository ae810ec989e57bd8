"""Shared CLI helpers."""

from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console

from ..config import AnalysisConfig, load_config
from ..exceptions import InvalidConfigError

console = Console()


def parse_policies(values: Optional[List[str]]) -> Dict[str, str]:
    """Parse repeated ``--policy EXT=POLICY`` options."""
    policies: Dict[str, str] = {}
    for value in values or []:
        ext, sep, name = value.partition("=")
        if not sep or not ext.strip() or not name.strip():
            raise InvalidConfigError("--policy", value, "expected EXT=POLICY, e.g. .c=return")
        policies[ext.strip()] = name.strip()
    return policies


def resolve_config(
    config: Optional[Path] = None,
    policies: Optional[List[str]] = None,
    colorscale: Optional[str] = None,
    workers: Optional[int] = None,
    size_metric: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> AnalysisConfig:
    """Build the analysis configuration from CLI options."""
    return load_config(
        config_file=config,
        policies=parse_policies(policies),
        colorscale=colorscale,
        workers=workers,
        size_metric=size_metric,
        verbose=verbose,
        quiet=quiet,
    )
