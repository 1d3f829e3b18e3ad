"""
Vote storage backed by the SQLite votes table.

Every method is a single statement, so each mutation is atomic on its own.
Uniqueness of (user, track) is enforced by the table constraint rather than
a read-then-insert check.
"""

import sqlite3
from pathlib import Path
from typing import Protocol

from loguru import logger

from jukebox.core.database import get_db_connection
from jukebox.core.errors import (
    AlreadyVotedError,
    StorageError,
    TrackNotFoundError,
    VoteNotFoundError,
)


class VoteStore(Protocol):
    """Durable (user, track) votes."""

    def add(self, user_id: str, track_id: int) -> None: ...
    def remove(self, user_id: str, track_id: int) -> None: ...
    def counts_by_track(self) -> dict[int, int]: ...
    def prune_all(self, track_id: int) -> int: ...
    def clear(self) -> int: ...


class SqliteVoteStore:
    """VoteStore implementation over the `votes` table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def add(self, user_id: str, track_id: int) -> None:
        """Record a vote.

        Raises:
            AlreadyVotedError: The user already voted for this track
            TrackNotFoundError: The track is not cataloged
            StorageError: Any other database failure
        """
        try:
            with get_db_connection(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO votes (user_id, track_id) VALUES (?, ?)",
                    (user_id, track_id),
                )
                conn.commit()
        except sqlite3.IntegrityError as e:
            message = str(e)
            if "UNIQUE" in message:
                raise AlreadyVotedError(user_id, track_id) from e
            if "FOREIGN KEY" in message:
                raise TrackNotFoundError(track_id) from e
            raise StorageError(f"Failed to add vote: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to add vote: {e}") from e

        logger.debug(f"Vote added: user={user_id} track={track_id}")

    def remove(self, user_id: str, track_id: int) -> None:
        """Retract a vote.

        Raises:
            VoteNotFoundError: The user has no vote for this track
            StorageError: Any other database failure
        """
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.execute(
                    "DELETE FROM votes WHERE user_id = ? AND track_id = ?",
                    (user_id, track_id),
                )
                conn.commit()
                removed = cursor.rowcount
        except sqlite3.Error as e:
            raise StorageError(f"Failed to remove vote: {e}") from e

        if removed == 0:
            raise VoteNotFoundError(user_id, track_id)
        logger.debug(f"Vote removed: user={user_id} track={track_id}")

    def counts_by_track(self) -> dict[int, int]:
        """Vote count per track, only tracks with at least one vote."""
        try:
            with get_db_connection(self.db_path) as conn:
                rows = conn.execute(
                    "SELECT track_id, COUNT(*) AS votes FROM votes GROUP BY track_id"
                ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to count votes: {e}") from e
        return {row["track_id"]: row["votes"] for row in rows}

    def prune_all(self, track_id: int) -> int:
        """Delete every vote for a track in one statement.

        Returns:
            Number of votes removed
        """
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.execute("DELETE FROM votes WHERE track_id = ?", (track_id,))
                conn.commit()
                pruned = cursor.rowcount
        except sqlite3.Error as e:
            raise StorageError(f"Failed to prune votes for track {track_id}: {e}") from e

        logger.info(f"Removed {pruned} votes for track #{track_id}")
        return pruned

    def clear(self) -> int:
        """Delete every vote for every track.

        Returns:
            Number of votes removed
        """
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.execute("DELETE FROM votes")
                conn.commit()
                cleared = cursor.rowcount
        except sqlite3.Error as e:
            raise StorageError(f"Failed to clear votes: {e}") from e

        logger.info(f"Cleared {cleared} votes")
        return cleared

    def votes_for_user(self, user_id: str) -> list[int]:
        """Track ids the user currently votes for, oldest vote first."""
        try:
            with get_db_connection(self.db_path) as conn:
                rows = conn.execute(
                    "SELECT track_id FROM votes WHERE user_id = ? ORDER BY id",
                    (user_id,),
                ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list votes for {user_id}: {e}") from e
        return [row["track_id"] for row in rows]
