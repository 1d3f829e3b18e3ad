"""
Path security validation utilities for Vote Jukebox.

Provides pure functions to validate file paths are within allowed library directories,
preventing directory traversal attacks and symlink escapes.
"""

from pathlib import Path
from typing import Optional

from jukebox.core.config import LibraryConfig


def is_path_within_library(file_path: Path, library_paths: list[str]) -> bool:
    """Pure function - validates path is within allowed directories.

    Uses Path.resolve() to handle symlinks and relative paths, then checks if the
    resolved path is a child of any configured library root directory.
    """
    try:
        resolved_path = file_path.resolve()

        for lib_path_str in library_paths:
            lib_path = Path(lib_path_str).expanduser().resolve()
            try:
                resolved_path.relative_to(lib_path)
                return True
            except ValueError:
                continue

        return False
    except (OSError, RuntimeError):
        # resolve() raises OSError for invalid paths, RuntimeError for symlink loops
        return False


def validate_track_path(file_path: Path, config: LibraryConfig) -> Optional[Path]:
    """Pure function - returns validated path or None.

    The path must exist and sit inside one of the configured library roots.
    """
    if not file_path.exists():
        return None

    if not is_path_within_library(file_path, config.library_paths):
        return None

    return file_path
