"""Live treemap dashboard (``cyclomap serve``).

Needs the optional ``serve`` extra: ``pip install "cyclomap[serve]"``.
"""

from __future__ import annotations

from importlib.util import find_spec

SERVE_DEPENDENCIES = ("starlette", "uvicorn", "watchfiles")


def missing_dependencies() -> list[str]:
    """Names of ``serve`` extra packages that cannot be imported."""
    return [name for name in SERVE_DEPENDENCIES if find_spec(name) is None]
