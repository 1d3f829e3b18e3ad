"""
Track catalog backed by the SQLite tracks table.

The scheduler needs `lookup`, `all` and `delete`; the remaining methods serve
the library scanner.
"""

import sqlite3
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger

from jukebox.core.database import get_db_connection
from jukebox.core.errors import StorageError, TrackNotFoundError

from .models import ScannedTrack, Track, UNKNOWN_ALBUM, UNKNOWN_ARTIST, track_from_row


class TrackCatalog(Protocol):
    """Cataloged tracks as the scheduler sees them."""

    def lookup(self, track_id: int) -> Optional[Track]: ...
    def all(self) -> list[Track]: ...
    def delete(self, track_id: int) -> None: ...


class SqliteTrackCatalog:
    """TrackCatalog implementation over the `tracks` table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def lookup(self, track_id: int) -> Optional[Track]:
        try:
            with get_db_connection(self.db_path) as conn:
                row = conn.execute(
                    "SELECT * FROM tracks WHERE id = ?", (track_id,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to look up track {track_id}: {e}") from e
        return track_from_row(row) if row else None

    def lookup_by_path(self, local_path: str) -> Optional[Track]:
        try:
            with get_db_connection(self.db_path) as conn:
                row = conn.execute(
                    "SELECT * FROM tracks WHERE local_path = ?", (local_path,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to look up {local_path}: {e}") from e
        return track_from_row(row) if row else None

    def all(self) -> list[Track]:
        try:
            with get_db_connection(self.db_path) as conn:
                rows = conn.execute("SELECT * FROM tracks ORDER BY id").fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list tracks: {e}") from e
        return [track_from_row(row) for row in rows]

    def add(
        self,
        local_path: str,
        title: str,
        artist: str = UNKNOWN_ARTIST,
        album: str = UNKNOWN_ALBUM,
        duration: Optional[float] = None,
    ) -> Track:
        """Insert a new track and return it with its assigned id."""
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO tracks (local_path, title, artist, album, duration)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (local_path, title, artist, album, duration or 0),
                )
                conn.commit()
                track_id = cursor.lastrowid
        except sqlite3.Error as e:
            raise StorageError(f"Failed to add track {local_path}: {e}") from e

        logger.debug(f"Cataloged track #{track_id}: {artist} - {title}")
        return Track(
            id=track_id,
            title=title,
            artist=artist,
            album=album,
            duration=duration or None,
            local_path=local_path,
        )

    def upsert_scanned(self, scanned: ScannedTrack) -> tuple[Track, str]:
        """Catalog a scanned file.

        Existing tracks are left untouched except for a duration backfill when
        the stored duration is unknown.

        Returns:
            (track, action) where action is 'added', 'backfilled' or 'unchanged'
        """
        existing = self.lookup_by_path(scanned.local_path)
        if existing is None:
            track = self.add(
                scanned.local_path,
                scanned.title,
                scanned.artist,
                scanned.album,
                scanned.duration,
            )
            return track, "added"

        if not existing.has_known_duration and scanned.duration:
            self.update_duration(existing.id, scanned.duration)
            return existing._replace(duration=scanned.duration), "backfilled"

        return existing, "unchanged"

    def update_duration(self, track_id: int, duration: float) -> None:
        """Backfill the duration of a cataloged track."""
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.execute(
                    "UPDATE tracks SET duration = ? WHERE id = ?", (duration, track_id)
                )
                conn.commit()
                updated = cursor.rowcount
        except sqlite3.Error as e:
            raise StorageError(f"Failed to update duration of track {track_id}: {e}") from e

        if updated == 0:
            raise TrackNotFoundError(track_id)
        logger.debug(f"Backfilled duration of track #{track_id}: {duration:.1f}s")

    def delete(self, track_id: int) -> None:
        """Delete a track; its votes go with it via ON DELETE CASCADE."""
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.execute("DELETE FROM tracks WHERE id = ?", (track_id,))
                conn.commit()
                deleted = cursor.rowcount
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete track {track_id}: {e}") from e

        if deleted == 0:
            raise TrackNotFoundError(track_id)
        logger.info(f"Deleted track #{track_id}")
