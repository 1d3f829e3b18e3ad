"""
Music metadata extraction.

Reads title/artist/album/duration from audio files using Mutagen, falling back
to the filename when tags are missing or unreadable.
"""

from pathlib import Path
from typing import Any, Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError

from .models import ScannedTrack, UNKNOWN_ALBUM, UNKNOWN_ARTIST


def get_tag_value(audio_file: Any, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    for tag_name in tag_names:
        try:
            value = audio_file.get(tag_name)
            if value:
                if isinstance(value, list) and value:
                    return str(value[0])
                return str(value)
        except (KeyError, ValueError):
            # Some formats (like Vorbis) raise ValueError for non-existent keys
            continue
    return None


def extract_metadata_from_filename(local_path: str) -> dict[str, Any]:
    """Extract basic info from filename as fallback."""
    title = Path(local_path).stem
    artist = None

    # Try to parse "Artist - Title" format
    if " - " in title:
        parts = title.split(" - ", 1)
        if len(parts) == 2 and parts[0].strip() and parts[1].strip():
            artist = parts[0].strip()
            title = parts[1].strip()

    return {"title": title, "artist": artist}


def extract_track_metadata(local_path: str) -> ScannedTrack:
    """Extract metadata from audio file using mutagen."""
    fallback = extract_metadata_from_filename(local_path)

    try:
        audio_file = MutagenFile(local_path)
    except (MutagenError, OSError) as e:
        logger.warning(f"Unreadable audio file {local_path}: {e}")
        audio_file = None

    if audio_file is None:
        return ScannedTrack(
            local_path=local_path,
            title=fallback["title"],
            artist=fallback["artist"] or UNKNOWN_ARTIST,
        )

    # ID3 (MP3), MP4, and Vorbis/FLAC tags
    title = get_tag_value(audio_file, ["TIT2", "\xa9nam", "TITLE", "title"])
    artist = get_tag_value(audio_file, ["TPE1", "\xa9ART", "ARTIST", "artist"])
    album = get_tag_value(audio_file, ["TALB", "\xa9alb", "ALBUM", "album"])

    duration = None
    info = getattr(audio_file, "info", None)
    if info is not None and getattr(info, "length", None):
        duration = float(info.length)

    return ScannedTrack(
        local_path=local_path,
        title=title or fallback["title"],
        artist=artist or fallback["artist"] or UNKNOWN_ARTIST,
        album=album or UNKNOWN_ALBUM,
        duration=duration,
    )


def format_duration(seconds: Optional[float]) -> str:
    """Format duration in seconds to MM:SS format."""
    if not seconds or seconds < 0:
        return "--:--"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"
