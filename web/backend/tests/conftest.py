"""Pytest configuration for backend tests.

Every test gets its own app wired to a temporary database and music folder.
"""

from pathlib import Path
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient

from jukebox.core.config import Config, DatabaseConfig, LibraryConfig, LoggingConfig
from jukebox.domain.library import Track
from web.backend.main import create_app


@pytest.fixture
def music_dir(tmp_path: Path) -> Path:
    path = tmp_path / "music"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path: Path, music_dir: Path) -> Config:
    config = Config()
    config.library = LibraryConfig(library_paths=[str(music_dir)], scan_on_startup=False)
    config.database = DatabaseConfig(path=str(tmp_path / "jukebox.db"))
    config.logging = LoggingConfig(log_file=str(tmp_path / "jukebox.log"), console_output=False)
    return config


@pytest.fixture
def app(config: Config):
    return create_app(config, configure_logging=False)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def add_track(client: TestClient, app, music_dir: Path) -> Callable[..., Track]:
    """Write a file into the music folder and catalog it."""

    def _add(title: str, duration: Optional[float] = 180.0) -> Track:
        path = music_dir / f"{title}.mp3"
        path.write_bytes(b"ID3fake-audio")
        return app.state.catalog.add(str(path), title, artist="Band", duration=duration)

    return _add
