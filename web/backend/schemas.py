from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from jukebox.domain.library.models import Track
from jukebox.domain.playback import PlaybackStatus
from jukebox.domain.voting import Candidate


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrackResponse(CamelModel):
    id: int
    title: str
    artist: str
    album: str
    duration: Optional[float] = None  # None when unknown

    @classmethod
    def from_track(cls, track: Track) -> "TrackResponse":
        return cls.model_validate(track.to_dict())


class TrackListItem(TrackResponse):
    votes: int = 0
    status: Literal["playing", "paused", "available"] = "available"


class PlaybackStatusResponse(CamelModel):
    state: Literal["idle", "playing", "paused"]
    track: Optional[TrackResponse] = None
    elapsed_seconds: float = 0
    remaining_seconds: Optional[float] = None  # None when duration is unknown
    started_at: Optional[float] = None
    server_time: float  # For client clock sync

    @classmethod
    def from_status(cls, status: PlaybackStatus) -> "PlaybackStatusResponse":
        return cls.model_validate(status.to_dict())


class CommandResponse(CamelModel):
    """Result of a scheduling command: events in commit order plus the new status."""

    events: list[str]
    status: PlaybackStatusResponse


class CandidateResponse(CamelModel):
    track: TrackResponse
    votes: int
    is_current: bool = False


class VoteRequest(CamelModel):
    user_id: str = Field(min_length=1)
    track_id: int


class VoteResponse(CommandResponse):
    user_id: str
    track_id: int


class UserVotesResponse(CamelModel):
    user_id: str
    track_ids: list[int]


class ClearVotesResponse(CamelModel):
    cleared: int


class ForcePlayRequest(CamelModel):
    track_id: int


class FinishedRequest(CamelModel):
    track_id: Optional[int] = None  # Omit to finish whatever is current


def candidate_response(candidate: Candidate, current_track_id: Optional[int]) -> CandidateResponse:
    return CandidateResponse(
        track=TrackResponse.from_track(candidate.track),
        votes=candidate.votes,
        is_current=candidate.track.id == current_track_id,
    )
