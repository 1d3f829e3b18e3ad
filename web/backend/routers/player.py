"""Player router for playback status and admin playback commands."""

from typing import Optional

from fastapi import APIRouter, Depends
from loguru import logger

from jukebox.domain.playback import PlaybackEvent, Scheduler, event_name

from ..deps import get_scheduler, require_admin
from ..schemas import (
    CommandResponse,
    FinishedRequest,
    ForcePlayRequest,
    PlaybackStatusResponse,
)

router = APIRouter()


def command_response(scheduler: Scheduler, events: list[PlaybackEvent]) -> CommandResponse:
    """Pure function - describe committed events and the resulting status."""
    return CommandResponse(
        events=[event_name(event) for event in events],
        status=PlaybackStatusResponse.from_status(scheduler.get_status()),
    )


@router.get("/player/status", response_model=PlaybackStatusResponse)
async def get_status(scheduler: Scheduler = Depends(get_scheduler)):
    """Current track, state and timing, with server time for clock sync."""
    return PlaybackStatusResponse.from_status(scheduler.get_status())


@router.post(
    "/player/skip",
    response_model=CommandResponse,
    dependencies=[Depends(require_admin)],
)
async def skip(scheduler: Scheduler = Depends(get_scheduler)):
    """Drop the current track's votes and play the next candidate."""
    events = await scheduler.skip()
    logger.info("Skip requested via API")
    return command_response(scheduler, events)


@router.post(
    "/player/pause",
    response_model=CommandResponse,
    dependencies=[Depends(require_admin)],
)
async def pause(scheduler: Scheduler = Depends(get_scheduler)):
    events = await scheduler.pause()
    return command_response(scheduler, events)


@router.post(
    "/player/resume",
    response_model=CommandResponse,
    dependencies=[Depends(require_admin)],
)
async def resume(scheduler: Scheduler = Depends(get_scheduler)):
    events = await scheduler.resume()
    return command_response(scheduler, events)


@router.post(
    "/player/finished",
    response_model=CommandResponse,
    dependencies=[Depends(require_admin)],
)
async def finished(
    request: Optional[FinishedRequest] = None,
    scheduler: Scheduler = Depends(get_scheduler),
):
    """Completion report from an external player.

    A report naming a track other than the current one is ignored.
    """
    track_id = request.track_id if request else None
    events = await scheduler.report_finished(track_id)
    return command_response(scheduler, events)


@router.post(
    "/player/play",
    response_model=CommandResponse,
    dependencies=[Depends(require_admin)],
)
async def force_play(request: ForcePlayRequest, scheduler: Scheduler = Depends(get_scheduler)):
    """Play a track now, ignoring the ranking. Votes are left untouched."""
    events = await scheduler.force_play(request.track_id)
    return command_response(scheduler, events)
