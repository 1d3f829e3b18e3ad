"""Votes router: casting, retracting and listing votes, plus the ranked playlist."""

from fastapi import APIRouter, Depends, Query

from jukebox.domain.playback import Scheduler
from jukebox.domain.voting import SqliteVoteStore

from ..deps import get_scheduler, get_vote_store, require_admin
from ..schemas import (
    CandidateResponse,
    ClearVotesResponse,
    UserVotesResponse,
    VoteRequest,
    VoteResponse,
    candidate_response,
)
from .player import command_response

router = APIRouter()


@router.post("/votes", response_model=VoteResponse, status_code=201)
async def cast_vote(request: VoteRequest, scheduler: Scheduler = Depends(get_scheduler)):
    """Vote for a track. Starts playback when nothing is playing."""
    events = await scheduler.vote(request.user_id, request.track_id)
    result = command_response(scheduler, events)
    return VoteResponse(
        user_id=request.user_id,
        track_id=request.track_id,
        events=result.events,
        status=result.status,
    )


@router.delete("/votes/{track_id}", response_model=VoteResponse)
async def retract_vote(
    track_id: int,
    user_id: str = Query(alias="userId", min_length=1),
    scheduler: Scheduler = Depends(get_scheduler),
):
    """Retract a vote. The current track keeps playing."""
    events = await scheduler.unvote(user_id, track_id)
    result = command_response(scheduler, events)
    return VoteResponse(
        user_id=user_id,
        track_id=track_id,
        events=result.events,
        status=result.status,
    )


@router.get("/votes", response_model=UserVotesResponse)
async def list_user_votes(
    user_id: str = Query(alias="userId", min_length=1),
    votes: SqliteVoteStore = Depends(get_vote_store),
):
    return UserVotesResponse(user_id=user_id, track_ids=votes.votes_for_user(user_id))


@router.delete(
    "/votes",
    response_model=ClearVotesResponse,
    dependencies=[Depends(require_admin)],
)
async def clear_votes(scheduler: Scheduler = Depends(get_scheduler)):
    """Admin clear of every vote. Playback is not interrupted."""
    cleared = await scheduler.clear_votes()
    return ClearVotesResponse(cleared=cleared)


@router.get("/playlist", response_model=list[CandidateResponse])
async def get_playlist(scheduler: Scheduler = Depends(get_scheduler)):
    """Voted tracks, most votes first, ties by track id."""
    current_id = scheduler.session.current_track_id
    return [candidate_response(c, current_id) for c in scheduler.playlist()]
