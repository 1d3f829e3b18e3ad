"""
Tests for tag reading and filename fallbacks in metadata.py.
"""

from types import SimpleNamespace
from unittest.mock import patch

from mutagen import MutagenError

from jukebox.domain.library.metadata import (
    extract_metadata_from_filename,
    extract_track_metadata,
    format_duration,
)


class FakeAudio(dict):
    """Tag mapping with an `info.length` like mutagen's FileType."""

    def __init__(self, tags: dict, length: float = 0.0):
        super().__init__(tags)
        self.info = SimpleNamespace(length=length)


class TestExtractMetadataFromFilename:
    """Test parsing 'Artist - Title' filenames."""

    def test_artist_and_title(self):
        """Test splitting on the first ' - '."""
        result = extract_metadata_from_filename("/music/Daft Punk - One More Time.mp3")
        assert result == {"title": "One More Time", "artist": "Daft Punk"}

    def test_title_only(self):
        """Test a plain filename becomes the title."""
        result = extract_metadata_from_filename("/music/interlude.flac")
        assert result == {"title": "interlude", "artist": None}

    def test_empty_side_ignored(self):
        """Test ' - ' with an empty side is kept in the title."""
        result = extract_metadata_from_filename("/music/ - intro.mp3")
        assert result["artist"] is None


class TestExtractTrackMetadata:
    """Test reading tags with mutagen."""

    def test_reads_id3_tags_and_duration(self):
        """Test ID3 frames and info.length are used."""
        audio = FakeAudio(
            {"TIT2": ["Song"], "TPE1": ["Band"], "TALB": ["Album"]}, length=215.3
        )
        with patch("jukebox.domain.library.metadata.MutagenFile", return_value=audio):
            track = extract_track_metadata("/music/file.mp3")

        assert track.title == "Song"
        assert track.artist == "Band"
        assert track.album == "Album"
        assert track.duration == 215.3

    def test_vorbis_tags(self):
        """Test Vorbis comment keys."""
        audio = FakeAudio({"title": ["Nocturne"], "artist": ["Chopin"]}, length=300.0)
        with patch("jukebox.domain.library.metadata.MutagenFile", return_value=audio):
            track = extract_track_metadata("/music/file.ogg")

        assert (track.title, track.artist, track.album) == ("Nocturne", "Chopin", "Unknown Album")

    def test_falls_back_to_filename(self):
        """Test unrecognized files use the filename and defaults."""
        with patch("jukebox.domain.library.metadata.MutagenFile", return_value=None):
            track = extract_track_metadata("/music/Band - Song.wav")

        assert track.title == "Song"
        assert track.artist == "Band"
        assert track.album == "Unknown Album"
        assert track.duration is None

    def test_unreadable_file(self):
        """Test mutagen errors fall back instead of raising."""
        with patch(
            "jukebox.domain.library.metadata.MutagenFile",
            side_effect=MutagenError("bad header"),
        ):
            track = extract_track_metadata("/music/broken.mp3")

        assert track.title == "broken"
        assert track.artist == "Unknown Artist"

    def test_zero_length_is_unknown(self):
        """Test a zero duration is stored as unknown."""
        with patch(
            "jukebox.domain.library.metadata.MutagenFile",
            return_value=FakeAudio({}, length=0.0),
        ):
            track = extract_track_metadata("/music/empty.mp3")

        assert track.duration is None


class TestFormatDuration:
    def test_formats_minutes_seconds(self):
        assert format_duration(185.9) == "3:05"

    def test_unknown(self):
        assert format_duration(None) == "--:--"
        assert format_duration(0) == "--:--"
