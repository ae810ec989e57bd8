"""End-to-end tests for the analysis pipeline and the file walker."""

import pytest

from cyclomap.config import AnalysisConfig
from cyclomap.exceptions import ErrorCode, FileAccessError, InvalidPathError
from cyclomap.export import build_document, dumps
from cyclomap.models import SourceFile
from cyclomap.pipeline import analyze_path, analyze_sources, score_source
from cyclomap.walker import collect_files, read_source


class TestScoreSource:
    def test_example_function(self):
        report, diagnostics = score_source(
            SourceFile("f.c", "int f(int x) { if (x) { return 1; } return 0; }"), AnalysisConfig()
        )
        assert [f.complexity for f in report.functions] == [2]
        assert report.mean_complexity == 2.0
        assert report.lines == 1
        assert diagnostics == []

    def test_empty_file(self):
        report, diagnostics = score_source(SourceFile("e.c", ""), AnalysisConfig())
        assert (report.lines, report.functions, report.mean_complexity) == (0, (), 0.0)
        assert diagnostics == []

    def test_policy_per_extension(self):
        config = AnalysisConfig(policies={".c": "return"})
        text = "int f() { if (a) return 1; return 0; }\n"
        c_report, _ = score_source(SourceFile("f.c", text), config)
        cpp_report, _ = score_source(SourceFile("f.cpp", text), config)
        assert c_report.policy == "return"
        assert len(c_report.functions) == 2
        assert cpp_report.policy == "keyword"
        assert len(cpp_report.functions) == 1

    def test_code_size_metric(self):
        config = AnalysisConfig(size_metric="code")
        report, _ = score_source(SourceFile("f.c", "// header\n\nint x;\n"), config)
        assert report.lines == 1

    def test_malformed_segment_becomes_diagnostic(self):
        report, diagnostics = score_source(
            SourceFile("bad.c", "int f() {\n  if (a) {}\n"), AnalysisConfig()
        )
        assert report.degraded
        assert report.weight == 2.0
        assert [d.code for d in diagnostics] == [ErrorCode.CY200]


class TestAnalyzeSources:
    def test_spec_example_aggregation(self):
        two = "int f(int x) {\n  if (x) { return 1; }\n  return 0;\n}\n" + "\n" * 6
        four = "int g(int x) {\n  if (x && x > 1 || x < -1) { return 1; }\n  return 0;\n}\n" + "\n" * 26
        result = analyze_sources([("m/two.c", two), ("m/four.c", four)])
        assert result.tree.size == 40
        assert result.tree.weight == pytest.approx(3.5)

    def test_unsupported_extension_is_skipped(self):
        result = analyze_sources([("a/readme.md", "if (x) {}"), ("a/x.c", "int f() { return 0; }")])
        assert [r.path for r in result.reports] == ["a/x.c"]
        assert [d.code for d in result.diagnostics] == [ErrorCode.CY101]
        assert result.ok

    def test_no_successful_file(self):
        result = analyze_sources([("readme.md", "text")])
        assert not result.ok
        assert result.tree.size == 0

    def test_nothing_to_analyze(self):
        result = analyze_sources([])
        assert not result.ok
        assert result.tree.id == "."

    def test_duplicate_paths_keep_last(self):
        result = analyze_sources([("d/a.c", "int x;\n"), ("d/a.c", "int y;\nint z;\n")])
        assert len(result.reports) == 1
        assert result.reports[0].lines == 2

    def test_parallel_batch_matches_sequential(self):
        sources = [
            (f"many/f{i:02d}.c", f"int f{i}(int x) {{ if (x > {i}) {{ return 1; }} return 0; }}\n")
            for i in range(25)
        ]
        parallel = analyze_sources(sources, AnalysisConfig(workers=4))
        sequential = analyze_sources(sources, AnalysisConfig(workers=1))
        assert [r.path for r in parallel.reports] == sorted(p for p, _ in sources)
        assert dumps(build_document(parallel)) == dumps(build_document(sequential))


class TestAnalyzePath:
    def test_directory_walk(self, c_project):
        result = analyze_path(c_project)
        assert [r.path for r in result.reports] == [
            "proj/src/main.c",
            "proj/src/util/empty.h",
            "proj/src/util/simple.c",
        ]
        assert result.diagnostics == []
        assert result.tree.id == "proj"

    def test_function_complexities(self, c_project):
        result = analyze_path(c_project)
        main = next(r for r in result.reports if r.path == "proj/src/main.c")
        assert [(f.name, f.complexity) for f in main.functions] == [("sign", 4), ("greet", 1)]
        assert main.lines == 17

    def test_rollup_over_walk(self, c_project):
        tree = analyze_path(c_project).tree
        util = tree.find("proj/src/util")
        assert (util.size, util.weight) == (1, 2.0)
        assert tree.size == 18
        assert tree.weight == pytest.approx((17 * 2.5 + 1 * 2.0) / 18)

    def test_hidden_files_allowed(self, c_project):
        result = analyze_path(c_project, AnalysisConfig(allow_hidden_files=True))
        assert "proj/.hidden/secret.c" in [r.path for r in result.reports]

    def test_single_file(self, c_project):
        result = analyze_path(c_project / "src" / "main.c")
        assert [r.path for r in result.reports] == ["src/main.c"]
        assert result.tree.id == "src"

    def test_single_unsupported_file(self, c_project):
        result = analyze_path(c_project / "README.txt")
        assert not result.ok
        assert [d.code for d in result.diagnostics] == [ErrorCode.CY101]

    def test_oversized_file_is_reported(self, c_project):
        config = AnalysisConfig(max_file_size_mb=0.00001)
        result = analyze_path(c_project, config)
        assert [r.path for r in result.reports] == ["proj/src/util/empty.h"]
        assert {d.code for d in result.diagnostics} == {ErrorCode.CY100}

    def test_missing_path(self, tmp_path):
        with pytest.raises(InvalidPathError):
            analyze_path(tmp_path / "nope")

    def test_repeated_runs_are_identical(self, c_project):
        first = dumps(build_document(analyze_path(c_project)))
        second = dumps(build_document(analyze_path(c_project)))
        assert first == second


class TestWalker:
    def test_skip_dirs_and_extensions(self, c_project):
        names = [p.name for p in collect_files(c_project, AnalysisConfig())]
        assert names == ["main.c", "empty.h", "simple.c"]

    def test_custom_extensions(self, c_project):
        files = collect_files(c_project, AnalysisConfig(extensions=("txt",)))
        assert [p.name for p in files] == ["README.txt"]

    def test_read_replaces_undecodable_bytes(self, tmp_path):
        path = tmp_path / "latin.c"
        path.write_bytes(b"/* caf\xe9 */ int x;\n")
        assert "int x;" in read_source(path, AnalysisConfig())

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileAccessError):
            read_source(tmp_path / "gone.c", AnalysisConfig())
