"""Tests for the player router."""

import pytest
from fastapi.testclient import TestClient

from jukebox.core.config import Config
from web.backend.main import create_app


def vote(client, user_id: str, track_id: int):
    return client.post("/api/votes", json={"userId": user_id, "trackId": track_id})


class TestStatus:
    def test_idle_status(self, client):
        response = client.get("/api/player/status")
        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "idle"
        assert data["track"] is None
        assert data["remainingSeconds"] is None
        assert "serverTime" in data

    def test_playing_status_is_camel_case(self, client, add_track):
        track = add_track("Opener", duration=200.0)
        vote(client, "alice", track.id)

        data = client.get("/api/player/status").json()

        assert data["state"] == "playing"
        assert data["track"]["id"] == track.id
        assert data["track"]["title"] == "Opener"
        assert data["remainingSeconds"] <= 200.0
        assert data["startedAt"] is not None
        assert "local_path" not in data["track"]


class TestCommands:
    def test_skip_moves_to_next(self, client, add_track):
        first = add_track("First")
        second = add_track("Second")
        vote(client, "alice", first.id)
        vote(client, "bob", second.id)

        response = client.post("/api/player/skip")

        assert response.status_code == 200
        body = response.json()
        assert body["events"] == ["playback:became_idle", "playback:track_selected"]
        assert body["status"]["track"]["id"] == second.id

    def test_skip_while_idle_is_400(self, client):
        response = client.post("/api/player/skip")
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot skip while idle"

    def test_pause_and_resume(self, client, add_track):
        track = add_track("Song")
        vote(client, "alice", track.id)

        paused = client.post("/api/player/pause")
        assert paused.status_code == 200
        assert paused.json()["status"]["state"] == "paused"

        assert client.post("/api/player/pause").status_code == 400

        resumed = client.post("/api/player/resume")
        assert resumed.json()["events"] == ["playback:resumed"]
        assert resumed.json()["status"]["state"] == "playing"

    def test_finished_without_body(self, client, add_track):
        track = add_track("Song")
        vote(client, "alice", track.id)

        response = client.post("/api/player/finished")

        assert response.status_code == 200
        assert response.json()["status"]["state"] == "idle"
        assert client.get("/api/playlist").json() == []

    def test_finished_for_stale_track_is_ignored(self, client, add_track):
        current = add_track("Current")
        other = add_track("Other")
        vote(client, "alice", current.id)

        response = client.post("/api/player/finished", json={"trackId": other.id})

        assert response.json()["events"] == []
        assert response.json()["status"]["track"]["id"] == current.id

    def test_force_play_keeps_votes(self, client, add_track):
        voted = add_track("Voted")
        forced = add_track("Forced")
        vote(client, "alice", voted.id)

        response = client.post("/api/player/play", json={"trackId": forced.id})

        assert response.status_code == 200
        assert response.json()["status"]["track"]["id"] == forced.id
        playlist = client.get("/api/playlist").json()
        assert [(c["track"]["id"], c["votes"]) for c in playlist] == [(voted.id, 1)]

    def test_force_play_unknown_track_is_404(self, client):
        response = client.post("/api/player/play", json={"trackId": 999})
        assert response.status_code == 404


class TestAdminToken:
    @pytest.fixture
    def client(self, config: Config):
        config.web.admin_token = "s3cret"
        with TestClient(create_app(config, configure_logging=False)) as client:
            yield client

    def test_missing_token_rejected(self, client):
        assert client.post("/api/player/skip").status_code == 403

    def test_wrong_token_rejected(self, client):
        response = client.post("/api/player/pause", headers={"X-Admin-Token": "guess"})
        assert response.status_code == 403

    def test_valid_token_accepted(self, client):
        response = client.post("/api/player/skip", headers={"X-Admin-Token": "s3cret"})
        # Authorized, but nothing is playing
        assert response.status_code == 400

    def test_status_does_not_need_token(self, client):
        response = client.get("/api/player/status")
        assert response.status_code == 200
