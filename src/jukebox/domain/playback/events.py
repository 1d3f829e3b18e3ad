"""
Playback transition events and the observer interface.

Each committed scheduler transition yields exactly one of these frozen
dataclasses. Scheduler operations return them and push them to observers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Union

from jukebox.domain.library.models import Track


class IdleReason(str, Enum):
    FINISHED = "finished"  # External completion report
    TIMER = "timer"  # Auto-advance timer elapsed
    SKIPPED = "skipped"  # Admin skip
    REMOVED = "removed"  # Track deleted from the catalog


@dataclass(frozen=True)
class TrackSelected:
    """A track became current and started from zero."""

    track: Track
    replaced: Optional[Track] = None  # Set when force-play preempted a track

    @property
    def forced(self) -> bool:
        return self.replaced is not None


@dataclass(frozen=True)
class BecameIdle:
    """The current track ended and its votes were pruned."""

    track: Track
    reason: IdleReason
    pruned_votes: int = 0


@dataclass(frozen=True)
class Paused:
    track: Track
    elapsed_seconds: float


@dataclass(frozen=True)
class Resumed:
    track: Track
    remaining_seconds: Optional[float]


PlaybackEvent = Union[TrackSelected, BecameIdle, Paused, Resumed]


def event_name(event: PlaybackEvent) -> str:
    """Wire name for an event, e.g. 'playback:track_selected'."""
    names = {
        TrackSelected: "track_selected",
        BecameIdle: "became_idle",
        Paused: "paused",
        Resumed: "resumed",
    }
    return f"playback:{names[type(event)]}"


class PlaybackObserver(Protocol):
    """Receives every committed transition, in order.

    An observer may also define ``async handle_playback_batch_end()``. The
    scheduler awaits it once after delivering all events of one operation,
    e.g. after both BecameIdle and the TrackSelected that follows a skip.
    """

    async def handle_playback_event(self, event: PlaybackEvent) -> None: ...
