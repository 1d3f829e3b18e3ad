"""
Music library domain models.

Contains data structures for representing cataloged tracks.
"""

from typing import NamedTuple, Optional

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"


class Track(NamedTuple):
    """Represents a cataloged track.

    Immutable once cataloged; only the duration may be backfilled later,
    which produces a new row read rather than mutating this tuple.
    """

    id: int
    title: str
    artist: str = UNKNOWN_ARTIST
    album: str = UNKNOWN_ALBUM
    duration: Optional[float] = None  # in seconds, None/0 when unknown
    local_path: Optional[str] = None

    @property
    def has_known_duration(self) -> bool:
        return bool(self.duration and self.duration > 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "duration": self.duration,
            "local_path": self.local_path,
        }


class ScannedTrack(NamedTuple):
    """Metadata read from an audio file before it has a catalog id."""

    local_path: str
    title: str
    artist: str = UNKNOWN_ARTIST
    album: str = UNKNOWN_ALBUM
    duration: Optional[float] = None


def track_from_row(row) -> Track:
    """Convert a sqlite3.Row from the tracks table into a Track."""
    return Track(
        id=row["id"],
        title=row["title"],
        artist=row["artist"] or UNKNOWN_ARTIST,
        album=row["album"] or UNKNOWN_ALBUM,
        duration=row["duration"] or None,
        local_path=row["local_path"],
    )
