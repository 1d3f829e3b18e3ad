"""
Playback session state machine.

Holds the single selected track and its timing. Elapsed time is always derived
from `started_at` and `paused_at`; resume shifts `started_at` forward by the
pause gap instead of tracking cumulative pause time.

The session does no I/O and knows nothing about votes or timers; the scheduler
is its only writer.
"""

from enum import Enum
from typing import Optional

from jukebox.core.errors import InvalidTransitionError
from jukebox.domain.library.models import Track


class PlaybackState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackSession:
    """Mutable state for what is playing right now.

    Invariants:
        paused_at is set only when state is PAUSED.
        current_track is None only when state is IDLE.
    """

    def __init__(self) -> None:
        self.state = PlaybackState.IDLE
        self.current_track: Optional[Track] = None
        self.started_at: Optional[float] = None
        self.paused_at: Optional[float] = None
        self.expected_duration: Optional[float] = None

    @property
    def is_idle(self) -> bool:
        return self.state is PlaybackState.IDLE

    @property
    def current_track_id(self) -> Optional[int]:
        return self.current_track.id if self.current_track else None

    def start(self, track: Track, now: float) -> None:
        """Select a track and start it from the beginning.

        Valid from any state; force-play uses it to replace a playing track.
        """
        self.state = PlaybackState.PLAYING
        self.current_track = track
        self.started_at = now
        self.paused_at = None
        self.expected_duration = track.duration if track.has_known_duration else None

    def pause(self, now: float) -> None:
        if self.state is not PlaybackState.PLAYING:
            raise InvalidTransitionError("pause", self.state.value)
        self.state = PlaybackState.PAUSED
        self.paused_at = now

    def resume(self, now: float) -> None:
        if self.state is not PlaybackState.PAUSED:
            raise InvalidTransitionError("resume", self.state.value)
        self.started_at = now - (self.paused_at - self.started_at)
        self.paused_at = None
        self.state = PlaybackState.PLAYING

    def clear(self) -> Track:
        """Drop the current track and go idle.

        Returns:
            The track that was selected
        """
        if self.state is PlaybackState.IDLE:
            raise InvalidTransitionError("stop", self.state.value)
        track = self.current_track
        self.state = PlaybackState.IDLE
        self.current_track = None
        self.started_at = None
        self.paused_at = None
        self.expected_duration = None
        return track

    def elapsed(self, now: float) -> float:
        """Seconds of the current track played so far (0 when idle)."""
        if self.started_at is None:
            return 0.0
        reference = self.paused_at if self.paused_at is not None else now
        return max(0.0, reference - self.started_at)

    def remaining(self, now: float) -> Optional[float]:
        """Seconds left, or None when idle or the duration is unknown."""
        if self.expected_duration is None:
            return None
        return max(0.0, self.expected_duration - self.elapsed(now))
