"""Shared fixtures: a fresh SQLite database per test plus its catalog and vote store."""

from pathlib import Path
from typing import Callable, Optional

import pytest

from jukebox.core.database import init_database
from jukebox.domain.library import SqliteTrackCatalog, Track
from jukebox.domain.voting import SqliteVoteStore


@pytest.fixture
def anyio_backend() -> str:
    """The scheduler and renderer are built on asyncio."""
    return "asyncio"


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "jukebox.db"
    init_database(path)
    return path


@pytest.fixture
def catalog(db_path: Path) -> SqliteTrackCatalog:
    return SqliteTrackCatalog(db_path)


@pytest.fixture
def votes(db_path: Path) -> SqliteVoteStore:
    return SqliteVoteStore(db_path)


@pytest.fixture
def add_track(catalog: SqliteTrackCatalog) -> Callable[..., Track]:
    """Catalog a track under /music with the given title."""

    def _add(title: str, duration: Optional[float] = None, artist: str = "Test Artist") -> Track:
        return catalog.add(f"/music/{title}.mp3", title, artist=artist, duration=duration)

    return _add
