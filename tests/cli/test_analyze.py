"""Tests for the ``cyclomap`` command line."""

import json

import pytest
from typer.testing import CliRunner

from cyclomap import __version__
from cyclomap.cli import app
from cyclomap.cli._common import parse_policies
from cyclomap.exceptions import InvalidConfigError


@pytest.fixture
def runner(isolated_config):
    return CliRunner()


class TestAnalyzeCommand:
    """End-to-end runs of ``cyclomap analyze``."""

    def test_writes_tree_document(self, runner, c_project, tmp_path):
        out = tmp_path / "tree.json"
        result = runner.invoke(app, ["analyze", str(c_project), "-o", str(out)])
        assert result.exit_code == 0, result.output
        doc = json.loads(out.read_text())
        assert doc["root"]["id"] == "proj"
        assert doc["root"]["size"] == 18
        assert "Cyclomatic complexity" in result.output

    def test_plotly_format_and_colorscale(self, runner, c_project, tmp_path):
        out = tmp_path / "plotly.json"
        result = runner.invoke(
            app,
            ["analyze", str(c_project), "-o", str(out), "--format", "plotly", "--colorscale", "hot"],
        )
        assert result.exit_code == 0, result.output
        (trace,) = json.loads(out.read_text())["data"]
        assert trace["marker"]["colorscale"] == "Hot"

    def test_quiet_stdout_is_pure_json(self, runner, c_project):
        result = runner.invoke(app, ["analyze", str(c_project), "-q"])
        assert result.exit_code == 0
        assert json.loads(result.output)["root"]["name"] == "proj"

    def test_policy_option(self, runner, c_project, tmp_path):
        out = tmp_path / "tree.json"
        result = runner.invoke(
            app, ["analyze", str(c_project), "-o", str(out), "--policy", ".c=return"]
        )
        assert result.exit_code == 0, result.output
        doc = json.loads(out.read_text())
        simple = doc["root"]["children"][0]["children"][1]["children"][1]
        assert simple["id"] == "proj/src/util/simple.c"
        assert simple["weight"] == 1.5

    def test_bad_policy_option(self, runner, c_project):
        result = runner.invoke(app, ["analyze", str(c_project), "--policy", "c"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_debug_file(self, runner, c_project, tmp_path):
        debug = tmp_path / "debug.txt"
        result = runner.invoke(
            app, ["analyze", str(c_project), "-o", str(tmp_path / "t.json"), "--debug-file", str(debug)]
        )
        assert result.exit_code == 0, result.output
        lines = debug.read_text().splitlines()
        assert lines[0] == "file: proj/src/main.c, nloc: 17, cc: 2.50"

    def test_verbosity_from_environment(self, runner, c_project, tmp_path, monkeypatch):
        monkeypatch.setenv("CYCLOMAP_VERBOSITY", "quiet")
        out = tmp_path / "tree.json"
        result = runner.invoke(app, ["analyze", str(c_project), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert "Cyclomatic complexity" not in result.output
        assert out.exists()

    def test_verbose_flag_overrides_environment(self, runner, c_project, tmp_path, monkeypatch):
        monkeypatch.setenv("CYCLOMAP_VERBOSITY", "quiet")
        result = runner.invoke(app, ["analyze", str(c_project), "-o", str(tmp_path / "t.json"), "-v"])
        assert result.exit_code == 0, result.output
        assert "Cyclomatic complexity" in result.output

    def test_log_file(self, runner, c_project, tmp_path):
        log = tmp_path / "run.log"
        result = runner.invoke(
            app,
            ["analyze", str(c_project), "-o", str(tmp_path / "t.json"), "-v", "--log-file", str(log)],
        )
        assert result.exit_code == 0, result.output
        assert "source files" in log.read_text()

    def test_nothing_analyzed_exits_one(self, runner, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        out = tmp_path / "tree.json"
        result = runner.invoke(app, ["analyze", str(empty), "-o", str(out)])
        assert result.exit_code == 1
        assert json.loads(out.read_text())["root"]["size"] == 0

    def test_missing_path(self, runner, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "nope")])
        assert result.exit_code == 2

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestParsePolicies:
    def test_pairs(self):
        assert parse_policies([".c=return", "hpp = keyword"]) == {".c": "return", "hpp": "keyword"}

    def test_none(self):
        assert parse_policies(None) == {}

    @pytest.mark.parametrize("value", ["c", "=return", ".c="])
    def test_malformed(self, value):
        with pytest.raises(InvalidConfigError):
            parse_policies([value])
