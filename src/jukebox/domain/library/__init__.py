"""Library domain - track catalog and file scanning.

This domain handles:
- Track data model
- SQLite-backed track catalog (lookup, listing, duration backfill, deletion)
- Scanning library folders and reading tags with Mutagen
"""

from .models import Track, ScannedTrack, UNKNOWN_ARTIST, UNKNOWN_ALBUM
from .catalog import TrackCatalog, SqliteTrackCatalog
from .metadata import extract_track_metadata, format_duration
from .scanner import ScanResult, scan_library, sync_library

__all__ = [
    "Track",
    "ScannedTrack",
    "UNKNOWN_ARTIST",
    "UNKNOWN_ALBUM",
    "TrackCatalog",
    "SqliteTrackCatalog",
    "extract_track_metadata",
    "format_duration",
    "ScanResult",
    "scan_library",
    "sync_library",
]
