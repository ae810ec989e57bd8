"""Tests for the Starlette dashboard app and the file watcher."""

from __future__ import annotations

import pytest

pytest.importorskip("httpx")

from starlette.testclient import TestClient  # noqa: E402

from cyclomap.config import AnalysisConfig  # noqa: E402
from cyclomap.server import missing_dependencies  # noqa: E402
from cyclomap.server.app import create_app  # noqa: E402
from cyclomap.server.state import ServerState  # noqa: E402
from cyclomap.server.watcher import FileWatcher, SourceFilter  # noqa: E402


@pytest.fixture
def ready_state(c_project):
    state = ServerState()
    watcher = FileWatcher(str(c_project), AnalysisConfig(), state)
    assert watcher.run_analysis()
    return state, watcher


class TestRoutes:
    def test_homepage(self):
        client = TestClient(create_app(ServerState()))
        response = client.get("/")
        assert response.status_code == 200
        assert "/api/plotly" in response.text

    def test_pending_documents(self):
        client = TestClient(create_app(ServerState()))
        assert client.get("/api/treemap").status_code == 202
        assert client.get("/api/plotly").json() == {"status": "analyzing"}

    def test_treemap_document(self, ready_state):
        state, _ = ready_state
        client = TestClient(create_app(state))
        response = client.get("/api/treemap")
        assert response.status_code == 200
        data = response.json()
        assert data["root"]["id"] == "proj"
        assert data["summary"]["files"] == 3

    def test_plotly_document(self, ready_state):
        state, _ = ready_state
        client = TestClient(create_app(state))
        (trace,) = client.get("/api/plotly").json()["data"]
        assert trace["ids"][0] == "proj"
        assert trace["parents"][0] == ""

    def test_health(self, ready_state):
        state, _ = ready_state
        client = TestClient(create_app(state))
        assert client.get("/health").json() == {"status": "ok", "ready": True, "analyzing": False}

    def test_refresh_without_watcher(self):
        client = TestClient(create_app(ServerState()))
        assert client.post("/api/refresh").status_code == 503

    def test_refresh_with_watcher(self, ready_state):
        state, watcher = ready_state
        client = TestClient(create_app(state, watcher))
        response = client.post("/api/refresh")
        assert response.status_code == 200
        assert response.json() == {"status": "refresh_started"}

    def test_refresh_requires_post(self):
        client = TestClient(create_app(ServerState()))
        assert client.get("/api/refresh").status_code == 405

    def test_unknown_path(self):
        client = TestClient(create_app(ServerState()))
        assert client.get("/api/nothing").status_code == 404


class TestFileWatcher:
    def test_run_analysis_publishes_both_formats(self, ready_state):
        state, _ = ready_state
        assert state.get_document("tree")["colorscale"] == "Blues"
        assert "data" in state.get_document("plotly")
        assert not state.analyzing

    def test_skips_when_already_running(self, c_project):
        state = ServerState()
        state.begin_analysis()
        watcher = FileWatcher(str(c_project), AnalysisConfig(), state)
        assert not watcher.run_analysis()
        assert not state.has_data()

    def test_failed_analysis_keeps_previous_documents(self, tmp_path):
        state = ServerState()
        state.update({"tree": {"old": True}})
        watcher = FileWatcher(str(tmp_path / "gone"), AnalysisConfig(), state)
        assert not watcher.run_analysis()
        assert state.get_document("tree") == {"old": True}
        assert not state.analyzing


class TestSourceFilter:
    def test_filters(self, tmp_path):
        source_filter = SourceFilter(AnalysisConfig(), str(tmp_path))
        assert source_filter(None, str(tmp_path / "src" / "a.c"))
        assert not source_filter(None, str(tmp_path / "src" / "a.py"))
        assert not source_filter(None, str(tmp_path / "build" / "a.c"))
        assert not source_filter(None, str(tmp_path / ".git" / "a.c"))

    def test_hidden_allowed(self, tmp_path):
        source_filter = SourceFilter(AnalysisConfig(allow_hidden_files=True), str(tmp_path))
        assert source_filter(None, str(tmp_path / ".cache" / "a.c"))


class TestServeDependencies:
    def test_all_present(self):
        assert missing_dependencies() == []

    def test_reports_missing(self, monkeypatch):
        import cyclomap.server as server

        monkeypatch.setattr(server, "find_spec", lambda name: None if name == "uvicorn" else object())
        assert server.missing_dependencies() == ["uvicorn"]
