"""Tests for the playback session state machine."""

import pytest

from jukebox.core.errors import InvalidTransitionError
from jukebox.domain.library.models import Track
from jukebox.domain.playback.session import PlaybackSession, PlaybackState


@pytest.fixture
def track() -> Track:
    return Track(id=1, title="Song", duration=180.0)


class TestTransitions:
    def test_new_session_is_idle(self) -> None:
        session = PlaybackSession()
        assert session.state is PlaybackState.IDLE
        assert session.current_track is None
        assert session.remaining(0) is None
        assert session.elapsed(0) == 0.0

    def test_start_plays_track(self, track: Track) -> None:
        session = PlaybackSession()
        session.start(track, now=100.0)
        assert session.state is PlaybackState.PLAYING
        assert session.current_track_id == 1
        assert session.started_at == 100.0
        assert session.paused_at is None
        assert session.expected_duration == 180.0

    def test_pause_and_resume(self, track: Track) -> None:
        session = PlaybackSession()
        session.start(track, now=0.0)
        session.pause(now=30.0)
        assert session.state is PlaybackState.PAUSED
        assert session.paused_at == 30.0

        session.resume(now=80.0)
        assert session.state is PlaybackState.PLAYING
        assert session.paused_at is None
        assert session.started_at == 50.0

    def test_clear_returns_track(self, track: Track) -> None:
        session = PlaybackSession()
        session.start(track, now=0.0)
        assert session.clear() == track
        assert session.is_idle
        assert session.started_at is None

    def test_clear_from_paused(self, track: Track) -> None:
        session = PlaybackSession()
        session.start(track, now=0.0)
        session.pause(now=5.0)
        session.clear()
        assert session.is_idle
        assert session.paused_at is None


class TestInvalidTransitions:
    @pytest.mark.parametrize("command", ["pause", "resume"])
    def test_idle_rejects_pause_and_resume(self, command: str) -> None:
        session = PlaybackSession()
        with pytest.raises(InvalidTransitionError):
            getattr(session, command)(0.0)
        assert session.is_idle

    def test_idle_rejects_clear(self) -> None:
        with pytest.raises(InvalidTransitionError):
            PlaybackSession().clear()

    def test_resume_while_playing_changes_nothing(self, track: Track) -> None:
        session = PlaybackSession()
        session.start(track, now=10.0)
        with pytest.raises(InvalidTransitionError):
            session.resume(20.0)
        assert session.state is PlaybackState.PLAYING
        assert session.started_at == 10.0

    def test_pause_while_paused(self, track: Track) -> None:
        session = PlaybackSession()
        session.start(track, now=0.0)
        session.pause(now=10.0)
        with pytest.raises(InvalidTransitionError):
            session.pause(20.0)
        assert session.paused_at == 10.0


class TestTiming:
    def test_elapsed_and_remaining_while_playing(self, track: Track) -> None:
        session = PlaybackSession()
        session.start(track, now=0.0)
        assert session.elapsed(45.0) == 45.0
        assert session.remaining(45.0) == 135.0

    def test_elapsed_frozen_while_paused(self, track: Track) -> None:
        session = PlaybackSession()
        session.start(track, now=0.0)
        session.pause(now=30.0)
        assert session.elapsed(500.0) == 30.0
        assert session.remaining(500.0) == 150.0

    def test_remaining_never_negative(self, track: Track) -> None:
        session = PlaybackSession()
        session.start(track, now=0.0)
        assert session.remaining(1000.0) == 0.0

    @pytest.mark.parametrize("duration", [None, 0])
    def test_unknown_duration_has_no_remaining(self, duration) -> None:
        session = PlaybackSession()
        session.start(Track(id=2, title="Live set", duration=duration), now=0.0)
        assert session.expected_duration is None
        assert session.remaining(60.0) is None
        assert session.elapsed(60.0) == 60.0
