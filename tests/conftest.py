"""Shared test fixtures for cyclomap tests."""

import os
from pathlib import Path

import pytest

from cyclomap.models import FileReport, FunctionSpan

SIMPLE_FUNCTION = "int f(int x) { if (x) { return 1; } return 0; }\n"

TWO_FUNCTIONS = """\
#include <stdio.h>

/* Return the sign of x. */
int sign(int x)
{
    if (x > 0 && x != 0) {
        return 1;
    } else if (x < 0) {
        return -1;
    }
    return 0;
}

static void greet(const char *name)
{
    printf("hello %s, if you || me\\n", name);
}
"""


def make_report(path: str, lines: int, *complexities: int) -> FileReport:
    """FileReport with one function per complexity value."""
    functions = tuple(
        FunctionSpan(name=f"fn{i}", start_line=i + 1, end_line=i + 1, complexity=c)
        for i, c in enumerate(complexities)
    )
    return FileReport(path=path, lines=lines, functions=functions)


@pytest.fixture
def c_project(tmp_path: Path) -> Path:
    """Small C project with a nested directory, a hidden dir and noise."""
    root = tmp_path / "proj"
    (root / "src" / "util").mkdir(parents=True)
    (root / "src" / "main.c").write_text(TWO_FUNCTIONS)
    (root / "src" / "util" / "simple.c").write_text(SIMPLE_FUNCTION)
    (root / "src" / "util" / "empty.h").write_text("")
    (root / "README.txt").write_text("if (a && b) { }\n")

    (root / ".hidden").mkdir()
    (root / ".hidden" / "secret.c").write_text(SIMPLE_FUNCTION)
    (root / "build").mkdir()
    (root / "build" / "generated.c").write_text(SIMPLE_FUNCTION)
    return root


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch):
    """Keep user and project config files and CYCLOMAP_* vars out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in [k for k in list(os.environ) if k.startswith("CYCLOMAP_")]:
        monkeypatch.delenv(key)
    return tmp_path


@pytest.fixture
def report_factory():
    """Factory fixture around :func:`make_report`."""
    return make_report
