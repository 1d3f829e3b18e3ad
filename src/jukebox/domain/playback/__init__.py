"""Playback domain - session state machine and vote-driven scheduling.

This domain handles:
- The playback session (idle / playing / paused) and its derived timing
- The scheduler that selects tracks from votes and prunes them on completion
- Typed transition events and observers (web sync, mpv rendering)
"""

from .session import PlaybackSession, PlaybackState
from .events import (
    BecameIdle,
    IdleReason,
    Paused,
    PlaybackEvent,
    PlaybackObserver,
    Resumed,
    TrackSelected,
    event_name,
)
from .scheduler import PlaybackStatus, Scheduler
from .renderer import MpvRenderer, check_mpv_available

__all__ = [
    "PlaybackSession",
    "PlaybackState",
    "BecameIdle",
    "IdleReason",
    "Paused",
    "PlaybackEvent",
    "PlaybackObserver",
    "Resumed",
    "TrackSelected",
    "event_name",
    "PlaybackStatus",
    "Scheduler",
    "MpvRenderer",
    "check_mpv_available",
]
