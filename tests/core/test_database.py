"""Tests for database setup."""

import sqlite3
from unittest.mock import patch

import pytest

from jukebox.core.database import (
    BUSY_TIMEOUT,
    SCHEMA_VERSION,
    get_db_connection,
    init_database,
)
from jukebox.core.errors import StorageError


def test_init_creates_tables(db_path):
    """Schema has tracks, votes and the recorded version."""
    with get_db_connection(db_path) as conn:
        tables = {
            row["name"]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        version = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]

    assert {"tracks", "votes", "schema_version"} <= tables
    assert version == SCHEMA_VERSION


def test_init_is_idempotent(db_path):
    init_database(db_path)
    with get_db_connection(db_path) as conn:
        rows = conn.execute("SELECT version FROM schema_version").fetchall()
    assert [row[0] for row in rows] == [SCHEMA_VERSION]


def test_votes_unique_per_user_and_track(db_path):
    with get_db_connection(db_path) as conn:
        conn.execute("INSERT INTO tracks (local_path, title) VALUES ('/a.mp3', 'A')")
        conn.execute("INSERT INTO votes (user_id, track_id) VALUES ('alice', 1)")
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO votes (user_id, track_id) VALUES ('alice', 1)")


def test_connection_enables_foreign_keys(db_path):
    with get_db_connection(db_path) as conn:
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1


def test_connection_uses_busy_timeout(db_path):
    with patch("jukebox.core.database.sqlite3.connect", wraps=sqlite3.connect) as connect:
        with get_db_connection(db_path):
            pass

    assert connect.call_args.kwargs["timeout"] == BUSY_TIMEOUT
    assert BUSY_TIMEOUT <= 5.0


def test_held_write_lock_fails_fast(db_path, add_track, votes):
    track = add_track("A")
    blocker = sqlite3.connect(db_path, isolation_level=None)
    blocker.execute("BEGIN IMMEDIATE")
    try:
        with patch("jukebox.core.database.BUSY_TIMEOUT", 0.05):
            with pytest.raises(StorageError, match="locked"):
                votes.add("alice", track.id)
    finally:
        blocker.execute("ROLLBACK")
        blocker.close()

    votes.add("alice", track.id)
    assert votes.counts_by_track() == {track.id: 1}
