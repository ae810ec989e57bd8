"""Thread-safe shared state for the dashboard server."""

from __future__ import annotations

import threading
from typing import Any

from ..logging_config import get_logger

logger = get_logger(__name__)


class ServerState:
    """Holds the latest export documents for the dashboard.

    Thread-safe: the analysis thread writes via :meth:`update`,
    the Starlette async handlers read via :meth:`get_document`.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._documents: dict[str, dict[str, Any]] | None = None
        self._analyzing = False
        self._runs = 0

    def update(self, documents: dict[str, dict[str, Any]]) -> None:
        """Replace all documents at once (``{"tree": ..., "plotly": ...}``)."""
        with self._lock:
            self._documents = dict(documents)
            self._runs += 1
        logger.debug(f"Dashboard state updated (run {self._runs})")

    def get_document(self, fmt: str) -> dict[str, Any] | None:
        """Return the latest document in *fmt*, or None before the first run."""
        with self._lock:
            if self._documents is None:
                return None
            return self._documents.get(fmt)

    def has_data(self) -> bool:
        with self._lock:
            return self._documents is not None

    @property
    def runs(self) -> int:
        with self._lock:
            return self._runs

    @property
    def analyzing(self) -> bool:
        with self._lock:
            return self._analyzing

    def begin_analysis(self) -> bool:
        """Mark an analysis as running; False if one already is."""
        with self._lock:
            if self._analyzing:
                return False
            self._analyzing = True
            return True

    def end_analysis(self) -> None:
        with self._lock:
            self._analyzing = False
