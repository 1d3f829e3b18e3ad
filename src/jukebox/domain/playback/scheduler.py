"""
Vote-driven playback scheduler.

Decides what plays next and keeps votes consistent with the playback lifecycle:
- a track is selected only when the session is idle (no preemption by votes)
- when a track finishes, is skipped, or its timer elapses, all of its votes are
  pruned before the session goes idle, then the next candidate is selected
- force-play replaces the current track without touching anyone's votes

Every session mutation and every vote addition runs under one asyncio.Lock, so
"decide" and "commit" never interleave with another scheduling operation.
The auto-advance timer is an asyncio.Task tagged with a generation number and
the track id it was armed for; a callback whose tag no longer matches the live
session is ignored.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from jukebox.core.errors import (
    InvalidTransitionError,
    StorageError,
    TrackNotFoundError,
)
from jukebox.domain.library.catalog import TrackCatalog
from jukebox.domain.library.models import Track
from jukebox.domain.voting.ranking import Candidate, rank_candidates, top_candidate
from jukebox.domain.voting.store import VoteStore

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
from .session import PlaybackSession, PlaybackState


@dataclass(frozen=True)
class PlaybackStatus:
    """Read-only snapshot of the session for polling clients."""

    state: PlaybackState
    track: Optional[Track]
    elapsed_seconds: float
    remaining_seconds: Optional[float]
    started_at: Optional[float]
    server_time: float

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "track": self.track.to_dict() if self.track else None,
            "elapsed_seconds": self.elapsed_seconds,
            "remaining_seconds": self.remaining_seconds,
            "started_at": self.started_at,
            "server_time": self.server_time,
        }


class Scheduler:
    """Owns the playback session and drives it from votes and commands."""

    def __init__(
        self,
        catalog: TrackCatalog,
        votes: VoteStore,
        auto_advance: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.catalog = catalog
        self.votes = votes
        self.auto_advance = auto_advance
        self.session = PlaybackSession()
        self._clock = clock
        self._lock = asyncio.Lock()
        self._observers: list[PlaybackObserver] = []
        self._timer_task: Optional[asyncio.Task] = None
        self._timer_generation = 0

    # === Observers ===

    def subscribe(self, observer: PlaybackObserver) -> None:
        """Register an observer for committed transitions.

        Observers are awaited while the scheduler lock is held, so they must
        not call back into the scheduler directly; spawn a task instead.
        """
        self._observers.append(observer)

    def unsubscribe(self, observer: PlaybackObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    async def _publish(self, events: list[PlaybackEvent]) -> None:
        if not events:
            return
        for event in events:
            for observer in list(self._observers):
                try:
                    await observer.handle_playback_event(event)
                except Exception:
                    logger.exception(
                        f"Playback observer {observer!r} failed on {event_name(event)}"
                    )
        for observer in list(self._observers):
            batch_end = getattr(observer, "handle_playback_batch_end", None)
            if batch_end is None:
                continue
            try:
                await batch_end()
            except Exception:
                logger.exception(f"Playback observer {observer!r} failed at batch end")

    # === Votes ===

    async def vote(self, user_id: str, track_id: int) -> list[PlaybackEvent]:
        """Record a vote and start playback if nothing is selected.

        Raises:
            TrackNotFoundError: Track is not cataloged
            AlreadyVotedError: User already voted for this track
            StorageError: Database failure
        """
        async with self._lock:
            if self.catalog.lookup(track_id) is None:
                raise TrackNotFoundError(track_id)
            self.votes.add(user_id, track_id)
            logger.info(f"Vote from {user_id} for track #{track_id}")
            return await self._select_if_idle()

    async def unvote(self, user_id: str, track_id: int) -> list[PlaybackEvent]:
        """Retract a vote. Never changes what is playing."""
        self.votes.remove(user_id, track_id)
        logger.info(f"Vote from {user_id} for track #{track_id} retracted")
        return await self.on_vote_removed(track_id)

    async def on_vote_added(self, track_id: int) -> list[PlaybackEvent]:
        """Scheduling hook for a vote recorded by another writer."""
        async with self._lock:
            return await self._select_if_idle()

    async def restore(self) -> list[PlaybackEvent]:
        """Select from votes persisted before a restart; call once on startup."""
        async with self._lock:
            return await self._select_if_idle()

    async def on_vote_removed(self, track_id: int) -> list[PlaybackEvent]:
        """Scheduling hook for a retracted vote.

        The current track keeps playing regardless of its remaining votes, and
        an idle session has nothing new to select.
        """
        if track_id == self.session.current_track_id:
            logger.debug(f"Vote removed for current track #{track_id}, playback continues")
        return []

    async def clear_votes(self) -> int:
        """Admin clear of every vote. The current track keeps playing."""
        async with self._lock:
            return self.votes.clear()

    def playlist(self) -> list[Candidate]:
        """Ranked candidates, including the current track if it still has votes."""
        return rank_candidates(self.votes.counts_by_track(), self.catalog.all())

    # === Playback commands ===

    async def skip(self) -> list[PlaybackEvent]:
        """Prune the current track's votes and move to the next candidate.

        Skipping while paused re-selects as well.
        """
        async with self._lock:
            if self.session.is_idle:
                raise InvalidTransitionError("skip", self.session.state.value)
            return await self._finish_current(IdleReason.SKIPPED)

    async def report_finished(self, track_id: Optional[int] = None) -> list[PlaybackEvent]:
        """Completion report from an external renderer.

        Args:
            track_id: Track the reporter was playing. A report for any other
                track is stale and ignored.
        """
        async with self._lock:
            if track_id is not None and track_id != self.session.current_track_id:
                logger.debug(
                    f"Ignoring finish report for track #{track_id}, "
                    f"current is {self.session.current_track_id}"
                )
                return []
            if self.session.is_idle:
                raise InvalidTransitionError("finish", self.session.state.value)
            return await self._finish_current(IdleReason.FINISHED)

    async def force_play(self, track_id: int) -> list[PlaybackEvent]:
        """Play a specific track now, bypassing the ranking.

        The preempted track keeps its votes and can be selected again later.
        """
        async with self._lock:
            track = self.catalog.lookup(track_id)
            if track is None:
                raise TrackNotFoundError(track_id)
            replaced = self.session.current_track
            if replaced:
                logger.info(f"Force play: {replaced.title} replaced by {track.title}")
            events = [self._start(track, replaced=replaced)]
            await self._publish(events)
            return events

    async def pause(self) -> list[PlaybackEvent]:
        async with self._lock:
            now = self._clock()
            self.session.pause(now)
            self._cancel_timer()
            track = self.session.current_track
            elapsed = self.session.elapsed(now)
            logger.info(f"Paused {track.title} at {elapsed:.1f}s")
            events = [Paused(track=track, elapsed_seconds=elapsed)]
            await self._publish(events)
            return events

    async def resume(self) -> list[PlaybackEvent]:
        async with self._lock:
            now = self._clock()
            self.session.resume(now)
            self._arm_timer()
            track = self.session.current_track
            remaining = self.session.remaining(now)
            logger.info(f"Resumed {track.title}")
            events = [Resumed(track=track, remaining_seconds=remaining)]
            await self._publish(events)
            return events

    async def remove_track(self, track_id: int) -> list[PlaybackEvent]:
        """Delete a track from the catalog; its votes are removed with it.

        Deleting the current track ends it and selects the next candidate.
        """
        async with self._lock:
            self.catalog.delete(track_id)
            if track_id != self.session.current_track_id:
                return []
            self._cancel_timer()
            track = self.session.clear()
            return await self._reselect_after(
                BecameIdle(track=track, reason=IdleReason.REMOVED)
            )

    # === Timer ===

    @property
    def has_pending_timer(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    async def on_timer_expiry(self, generation: int, track_id: int) -> list[PlaybackEvent]:
        """Timer callback; no-op unless the timer is still the live one."""
        async with self._lock:
            if (
                generation != self._timer_generation
                or track_id != self.session.current_track_id
                or self.session.state is not PlaybackState.PLAYING
            ):
                logger.debug(f"Ignoring stale timer for track #{track_id}")
                return []
            return await self._finish_current(IdleReason.TIMER)

    def _arm_timer(self) -> None:
        self._cancel_timer()
        if not self.auto_advance or self.session.state is not PlaybackState.PLAYING:
            return
        remaining = self.session.remaining(self._clock())
        if remaining is None:
            return

        self._timer_generation += 1
        self._timer_task = asyncio.create_task(
            self._run_timer(remaining, self._timer_generation, self.session.current_track_id)
        )
        logger.debug(
            f"Timer armed for track #{self.session.current_track_id}: {remaining:.1f}s"
        )

    def _cancel_timer(self) -> None:
        self._timer_generation += 1
        task, self._timer_task = self._timer_task, None
        # The firing timer reaches here through on_timer_expiry; it must not cancel itself
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def _run_timer(self, delay: float, generation: int, track_id: int) -> None:
        await asyncio.sleep(delay)
        try:
            await self.on_timer_expiry(generation, track_id)
        except StorageError:
            logger.exception(f"Auto-advance failed for track #{track_id}")

    # === Transitions ===

    def _start(self, track: Track, replaced: Optional[Track] = None) -> TrackSelected:
        self.session.start(track, self._clock())
        self._arm_timer()
        logger.info(f"Now playing: {track.artist} - {track.title}")
        return TrackSelected(track=track, replaced=replaced)

    def _select_next(self) -> list[PlaybackEvent]:
        candidate = top_candidate(self.votes.counts_by_track(), self.catalog.all())
        if candidate is None:
            logger.info("Playlist is empty, waiting for votes...")
            return []
        return [self._start(candidate.track)]

    async def _select_if_idle(self) -> list[PlaybackEvent]:
        if not self.session.is_idle:
            return []
        events = self._select_next()
        await self._publish(events)
        return events

    async def _finish_current(self, reason: IdleReason) -> list[PlaybackEvent]:
        track = self.session.current_track
        # Prune first: a storage failure here must leave the session untouched
        pruned = self.votes.prune_all(track.id)
        self._cancel_timer()
        self.session.clear()
        logger.info(f"Track finished ({reason.value}): {track.title}")
        return await self._reselect_after(
            BecameIdle(track=track, reason=reason, pruned_votes=pruned)
        )

    async def _reselect_after(self, idle: BecameIdle) -> list[PlaybackEvent]:
        try:
            selected = self._select_next()
        except StorageError:
            # Idle is committed; selection is retried on the next trigger
            await self._publish([idle])
            raise
        events = [idle, *selected]
        await self._publish(events)
        return events

    # === Status ===

    def get_status(self) -> PlaybackStatus:
        now = self._clock()
        return PlaybackStatus(
            state=self.session.state,
            track=self.session.current_track,
            elapsed_seconds=self.session.elapsed(now),
            remaining_seconds=self.session.remaining(now),
            started_at=self.session.started_at,
            server_time=now,
        )

    async def close(self) -> None:
        """Cancel the outstanding timer; call on shutdown."""
        async with self._lock:
            self._cancel_timer()
