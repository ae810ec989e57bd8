"""Starlette ASGI application for the treemap dashboard."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse
from starlette.routing import Route

from ..logging_config import get_logger
from .state import ServerState

if TYPE_CHECKING:
    from .watcher import FileWatcher

logger = get_logger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Cache template HTML after first read
_TEMPLATE_HTML: str | None = None


def _get_html() -> str:
    """Load the dashboard HTML template (cached after first read)."""
    global _TEMPLATE_HTML  # noqa: PLW0603
    if _TEMPLATE_HTML is None:
        _TEMPLATE_HTML = (_TEMPLATE_DIR / "index.html").read_text(encoding="utf-8")
    return _TEMPLATE_HTML


def create_app(state: ServerState, watcher: FileWatcher | None = None) -> Starlette:
    """Build the Starlette application wired to *state*.

    Args:
        state: The shared server state holding the export documents
        watcher: Optional watcher used to re-run the analysis on refresh
    """

    async def homepage(request: Request) -> HTMLResponse:
        return HTMLResponse(_get_html())

    def _document(fmt: str) -> JSONResponse:
        data = state.get_document(fmt)
        if data is None:
            return JSONResponse({"status": "analyzing"}, status_code=202)
        return JSONResponse(data)

    async def api_treemap(request: Request) -> JSONResponse:
        return _document("tree")

    async def api_plotly(request: Request) -> JSONResponse:
        return _document("plotly")

    async def api_refresh(request: Request) -> JSONResponse:
        """Force a full re-analysis. POST /api/refresh"""
        if watcher is None:
            return JSONResponse(
                {"error": "Refresh not available (no analysis configured)"},
                status_code=503,
            )
        if state.analyzing:
            return JSONResponse({"status": "already_running"}, status_code=409)

        # Run analysis in background thread to not block the request
        threading.Thread(target=watcher.run_analysis, daemon=True).start()
        return JSONResponse({"status": "refresh_started"})

    async def health(request: Request) -> JSONResponse:
        return JSONResponse(
            {"status": "ok", "ready": state.has_data(), "analyzing": state.analyzing}
        )

    routes = [
        Route("/", homepage),
        Route("/api/treemap", api_treemap),
        Route("/api/plotly", api_plotly),
        Route("/api/refresh", api_refresh, methods=["POST"]),
        Route("/health", health),
    ]

    return Starlette(routes=routes)
