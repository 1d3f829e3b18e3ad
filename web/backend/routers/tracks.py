import mimetypes
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from loguru import logger

from jukebox.core.config import Config
from jukebox.core.errors import TrackNotFoundError
from jukebox.core.path_security import validate_track_path
from jukebox.domain.library import SqliteTrackCatalog, Track
from jukebox.domain.playback import PlaybackState, Scheduler
from jukebox.domain.voting import SqliteVoteStore

from ..deps import get_catalog, get_config, get_scheduler, get_vote_store, require_admin
from ..schemas import CommandResponse, TrackListItem, TrackResponse
from .player import command_response

router = APIRouter()

AUDIO_MIME_TYPES: dict[str, str] = {
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
    ".ogg": "audio/ogg",
    ".wav": "audio/wav",
}


def get_mime_type(file_path: Path) -> str:
    """Pure function - deterministic MIME type detection."""
    mime = AUDIO_MIME_TYPES.get(file_path.suffix.lower())
    if mime:
        return mime
    guessed, _ = mimetypes.guess_type(str(file_path))
    return guessed or "application/octet-stream"


def track_status(track: Track, scheduler: Scheduler) -> str:
    """Pure function - 'playing'/'paused' for the current track, else 'available'."""
    if track.id != scheduler.session.current_track_id:
        return "available"
    if scheduler.session.state is PlaybackState.PAUSED:
        return "paused"
    return "playing"


@router.get("/tracks", response_model=list[TrackListItem])
async def list_tracks(
    catalog: SqliteTrackCatalog = Depends(get_catalog),
    votes: SqliteVoteStore = Depends(get_vote_store),
    scheduler: Scheduler = Depends(get_scheduler),
):
    """Whole catalog with vote counts and playing status."""
    counts = votes.counts_by_track()
    return [
        TrackListItem(
            **TrackResponse.from_track(track).model_dump(),
            votes=counts.get(track.id, 0),
            status=track_status(track, scheduler),
        )
        for track in catalog.all()
    ]


@router.delete(
    "/tracks/{track_id}",
    response_model=CommandResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_track(track_id: int, scheduler: Scheduler = Depends(get_scheduler)):
    """Remove a track and its votes; the current track is ended first."""
    events = await scheduler.remove_track(track_id)
    return command_response(scheduler, events)


@router.get("/tracks/{track_id}/stream")
async def stream_audio(
    track_id: int,
    catalog: SqliteTrackCatalog = Depends(get_catalog),
    config: Config = Depends(get_config),
):
    track = catalog.lookup(track_id)
    if track is None:
        raise TrackNotFoundError(track_id)
    if not track.local_path or not track.local_path.strip():
        raise HTTPException(404, "Track has no audio file")

    file_path = Path(track.local_path)

    # SECURITY: Validate path within library
    validated = validate_track_path(file_path, config.library)
    if not validated:
        logger.warning(f"Blocked access outside library: {file_path}")
        raise HTTPException(403, "Access denied")

    logger.info(f"Streaming track {track_id}: {validated.name}")
    return FileResponse(validated, media_type=get_mime_type(validated))
