"""
Music library scanning.

Walks the configured library directories, reads tags, and syncs the results
into the track catalog (new files are added, unknown durations backfilled).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from jukebox.core.config import LibraryConfig

from .catalog import SqliteTrackCatalog
from .metadata import extract_track_metadata
from .models import ScannedTrack


@dataclass
class ScanResult:
    """Outcome of syncing the library into the catalog."""

    added: list[int] = field(default_factory=list)
    backfilled: list[int] = field(default_factory=list)
    unchanged: int = 0

    @property
    def total(self) -> int:
        return len(self.added) + len(self.backfilled) + self.unchanged


def is_supported_format(local_path: Path, supported_formats: list[str]) -> bool:
    """Check if file format is supported."""
    return local_path.suffix.lower() in supported_formats


def find_audio_files(directory: Path, config: LibraryConfig) -> list[Path]:
    """List supported audio files under a directory, sorted for stable ids."""
    pattern = "**/*" if config.scan_recursive else "*"
    return sorted(
        path
        for path in directory.glob(pattern)
        if path.is_file() and is_supported_format(path, config.supported_formats)
    )


def scan_directory(
    directory: Path,
    config: LibraryConfig,
    progress_callback: Optional[Callable[[str, ScannedTrack], None]] = None,
) -> list[ScannedTrack]:
    """Scan a directory for music files and extract metadata.

    Args:
        directory: Directory to scan
        config: Library configuration
        progress_callback: Optional callback function(local_path, track) for progress updates

    Returns:
        List of ScannedTrack objects
    """
    tracks = []

    try:
        files = find_audio_files(directory, config)
    except PermissionError:
        logger.warning(f"Permission denied accessing: {directory}")
        return tracks

    for local_path in files:
        track = extract_track_metadata(str(local_path))
        tracks.append(track)
        if progress_callback:
            progress_callback(str(local_path), track)

    return tracks


def scan_library(config: LibraryConfig) -> list[ScannedTrack]:
    """Scan all configured library paths for music files."""
    all_tracks = []

    for library_path in config.library_paths:
        path = Path(library_path).expanduser()
        if not path.exists():
            logger.warning(f"Library path does not exist: {path}")
            continue

        logger.info(f"Scanning library: {path}")
        tracks = scan_directory(path, config)
        logger.info(f"Found {len(tracks)} tracks in {path}")
        all_tracks.extend(tracks)

    return all_tracks


def sync_library(catalog: SqliteTrackCatalog, config: LibraryConfig) -> ScanResult:
    """Scan the library and bring the catalog up to date."""
    result = ScanResult()

    for scanned in scan_library(config):
        track, action = catalog.upsert_scanned(scanned)
        if action == "added":
            result.added.append(track.id)
        elif action == "backfilled":
            result.backfilled.append(track.id)
        else:
            result.unchanged += 1

    logger.info(
        f"Library sync complete: {len(result.added)} added, "
        f"{len(result.backfilled)} durations backfilled, {result.unchanged} unchanged"
    )
    return result
