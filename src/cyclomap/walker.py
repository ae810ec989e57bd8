"""Filesystem side of the pipeline: find source files and read them.

Only this module touches the disk; the scanner and everything after it work
on ``(path, text)`` pairs.
"""

import os
from pathlib import Path
from typing import List

from .config import AnalysisConfig
from .exceptions import FileAccessError, InvalidPathError
from .logging_config import get_logger

logger = get_logger(__name__)


def collect_files(root: Path, config: AnalysisConfig) -> List[Path]:
    """Recursively list analyzable files below *root*, sorted by path.

    Hidden entries and ``config.skip_dirs`` are pruned while walking; files
    with other extensions are ignored without a diagnostic. A file given as
    *root* is returned as-is so the caller can report an unsupported type.

    Raises:
        InvalidPathError: If *root* does not exist
    """
    root = Path(root)
    if not root.exists():
        raise InvalidPathError(root, "Path does not exist")
    if root.is_file():
        return [root]

    skip_dirs = set(config.skip_dirs)
    files: List[Path] = []
    skipped = 0

    for dirpath, dirnames, filenames in os.walk(root, followlinks=config.follow_symlinks):
        dirnames[:] = sorted(
            d for d in dirnames if d not in skip_dirs and _visible(d, config)
        )
        base = Path(dirpath)
        for filename in sorted(filenames):
            path = base / filename
            if not _visible(filename, config):
                continue
            if path.is_symlink() and not config.follow_symlinks:
                skipped += 1
                logger.debug(f"Skipped (symlink): {path}")
                continue
            if not config.is_supported(filename):
                continue
            files.append(path)

    logger.info(f"Found {len(files)} source files under {root} ({skipped} skipped)")
    return sorted(files)


def read_source(path: Path, config: AnalysisConfig) -> str:
    """Read a source file as UTF-8, replacing undecodable bytes.

    Raises:
        FileAccessError: If the file is too large or cannot be read
    """
    try:
        size = path.stat().st_size
    except OSError as e:
        raise FileAccessError(path, f"Cannot stat: {e}")
    if size > config.max_file_size_bytes:
        raise FileAccessError(
            path, f"File too large ({size} bytes, limit {config.max_file_size_bytes})"
        )

    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        raise FileAccessError(path, f"OS error: {e}")


def _visible(name: str, config: AnalysisConfig) -> bool:
    return config.allow_hidden_files or not name.startswith(".")
