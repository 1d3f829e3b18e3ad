import time
from typing import Optional

from fastapi import WebSocket
from loguru import logger

from jukebox.domain.playback import (
    BecameIdle,
    Paused,
    PlaybackEvent,
    Resumed,
    Scheduler,
    TrackSelected,
    event_name,
)


def event_payload(event: PlaybackEvent) -> dict:
    """JSON body for a playback event broadcast."""
    if isinstance(event, TrackSelected):
        return {
            "track": event.track.to_dict(),
            "replaced": event.replaced.to_dict() if event.replaced else None,
        }
    if isinstance(event, BecameIdle):
        return {
            "track": event.track.to_dict(),
            "reason": event.reason.value,
            "pruned_votes": event.pruned_votes,
        }
    if isinstance(event, Paused):
        return {"track": event.track.to_dict(), "elapsed_seconds": event.elapsed_seconds}
    if isinstance(event, Resumed):
        return {"track": event.track.to_dict(), "remaining_seconds": event.remaining_seconds}
    raise TypeError(f"Unknown playback event: {event!r}")


class SyncManager:
    """Manages WebSocket connections and broadcasts playback transitions.

    Subscribed to the scheduler as a PlaybackObserver. Every transition is
    sent as its own event, and each scheduler operation ends with one full
    `playback:state` snapshot, so clients that only care about state can
    ignore the events. The snapshot is taken after the operation commits:
    a skip sends became_idle, track_selected, then a state showing the next
    track.
    """

    def __init__(self, scheduler: Optional[Scheduler] = None):
        self.scheduler = scheduler
        self.connections: list[WebSocket] = []

    async def connect(self, ws: WebSocket) -> None:
        """Accept and store a new WebSocket connection."""
        await ws.accept()
        self.connections.append(ws)
        logger.debug(f"WebSocket connected ({len(self.connections)} open)")

    def disconnect(self, ws: WebSocket) -> None:
        """Remove a WebSocket connection."""
        if ws in self.connections:
            self.connections.remove(ws)

    def get_current_state(self) -> dict:
        """Get current playback state for new connections."""
        if self.scheduler is None:
            return {"playback": None}
        return {"playback": self.scheduler.get_status().to_dict()}

    async def handle_playback_event(self, event: PlaybackEvent) -> None:
        await self.broadcast(event_name(event), event_payload(event))

    async def handle_playback_batch_end(self) -> None:
        await self.broadcast("playback:state", self.get_current_state()["playback"])

    async def broadcast(self, event_type: str, data: Optional[dict]) -> None:
        """Send a message to all connected clients."""
        message = {
            "type": event_type,
            "data": data,
            "ts": time.time(),
        }
        dead_connections: list[WebSocket] = []

        for conn in self.connections:
            try:
                await conn.send_json(message)
            except Exception as e:
                logger.debug(f"Dropping WebSocket after failed send: {e}")
                dead_connections.append(conn)

        for conn in dead_connections:
            self.connections.remove(conn)
