"""Debounced file watcher that re-runs analysis on source changes."""

from __future__ import annotations

import threading
from pathlib import Path

from ..config import AnalysisConfig
from ..exceptions import CyclomapError
from ..export import build_document
from ..logging_config import get_logger
from ..pipeline import analyze_path
from .state import ServerState

logger = get_logger(__name__)

# Debounce: wait this long after last change before re-analyzing
DEBOUNCE_SECONDS = 1.0

# Cooldown: minimum gap between analysis runs
COOLDOWN_SECONDS = 0.5


class FileWatcher:
    """Runs the analysis for the dashboard and re-runs it when sources change.

    Uses ``watchfiles`` for file monitoring. Analysis runs in a background
    thread so the ASGI server is never blocked.
    """

    def __init__(self, root_dir: str, config: AnalysisConfig, state: ServerState) -> None:
        self.root_dir = str(Path(root_dir).resolve())
        self.config = config
        self.state = state

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the watcher thread."""
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="cyclomap-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the watcher to stop."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            if self._thread.is_alive():
                logger.warning("Watcher thread did not exit within 5 seconds")

    def run_analysis(self) -> bool:
        """Run one analysis cycle and publish both export documents.

        Returns False when another run was already in progress or the
        analysis failed; the previous documents stay in place then.
        """
        if not self.state.begin_analysis():
            logger.debug("Analysis already running; skipping")
            return False
        try:
            result = analyze_path(self.root_dir, self.config)
            self.state.update(
                {
                    "tree": build_document(result, self.config.colorscale, "tree"),
                    "plotly": build_document(result, self.config.colorscale, "plotly"),
                }
            )
            logger.info(
                f"Analysis complete: {len(result.reports)} files, "
                f"{len(result.diagnostics)} diagnostics"
            )
            return True
        except CyclomapError as e:
            logger.error(f"Analysis failed: {e}")
            return False
        finally:
            self.state.end_analysis()

    def _watch_loop(self) -> None:
        """Background thread: watch files, debounce changes, re-analyze."""
        from watchfiles import watch

        logger.info(f"Watching {self.root_dir} for changes")

        for changes in watch(
            self.root_dir,
            stop_event=self._stop_event,
            debounce=int(DEBOUNCE_SECONDS * 1000),
            watch_filter=SourceFilter(self.config, self.root_dir),
        ):
            if self._stop_event.is_set():
                break

            logger.info(f"Detected {len(changes)} changed file(s), re-analyzing...")
            self.run_analysis()

            if self._stop_event.wait(COOLDOWN_SECONDS):
                break


class SourceFilter:
    """watchfiles filter: only configured source files outside skipped dirs."""

    def __init__(self, config: AnalysisConfig, root_dir: str) -> None:
        self.config = config
        self.root = Path(root_dir)
        self._skip = set(config.skip_dirs)

    def __call__(self, change: object, path: str) -> bool:
        p = Path(path)
        try:
            parts = p.relative_to(self.root).parts
        except ValueError:
            parts = p.parts
        for part in parts[:-1]:
            if part in self._skip:
                return False
        if not self.config.allow_hidden_files and any(part.startswith(".") for part in parts):
            return False
        return self.config.is_supported(p.name)
