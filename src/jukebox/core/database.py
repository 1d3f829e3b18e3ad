"""
SQLite database operations for Vote Jukebox
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger

from .errors import StorageError

# Database schema version for migrations
SCHEMA_VERSION = 2

# Seconds a connection waits on another writer before "database is locked".
# Callers run on the event loop, so a held write lock stalls requests this long.
BUSY_TIMEOUT = 5.0


@contextmanager
def get_db_connection(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Get a database connection with proper cleanup and concurrency support."""
    try:
        conn = sqlite3.connect(db_path, timeout=BUSY_TIMEOUT)
    except sqlite3.Error as e:
        raise StorageError(f"Cannot open database {db_path}: {e}") from e
    conn.row_factory = sqlite3.Row  # Enable dict-like access

    try:
        # WAL mode enables concurrent reads during writes
        conn.execute("PRAGMA journal_mode=WAL")
        # Required for ON DELETE CASCADE from tracks to votes
        conn.execute("PRAGMA foreign_keys=ON")
        yield conn
    finally:
        conn.close()


def migrate_database(conn: sqlite3.Connection, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 1:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS tracks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                local_path TEXT UNIQUE NOT NULL,
                title TEXT NOT NULL,
                artist TEXT DEFAULT 'Unknown Artist',
                album TEXT DEFAULT 'Unknown Album',
                duration REAL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS votes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                track_id INTEGER NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (track_id) REFERENCES tracks (id) ON DELETE CASCADE,
                UNIQUE (user_id, track_id)
            )
        """)

        conn.commit()

    if current_version < 2:
        # Counting and pruning are both keyed by track id
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_votes_track_id ON votes (track_id)"
        )
        conn.commit()


def init_database(db_path: Path) -> None:
    """Initialize the database with required tables."""
    db_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with get_db_connection(db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
            current_version = row[0] if row and row[0] is not None else 0

            if current_version < SCHEMA_VERSION:
                logger.info(
                    f"Migrating database {db_path} from v{current_version} to v{SCHEMA_VERSION}"
                )
                migrate_database(conn, current_version)
                conn.execute(
                    "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                    (SCHEMA_VERSION,),
                )
                conn.commit()
    except sqlite3.Error as e:
        raise StorageError(f"Failed to initialize database {db_path}: {e}") from e
