"""Tests for the tracks router: listing, deletion and streaming."""

from pathlib import Path

from web.backend.routers.tracks import get_mime_type


def vote(client, user_id: str, track_id: int):
    return client.post("/api/votes", json={"userId": user_id, "trackId": track_id})


class TestListTracks:
    def test_lists_counts_and_status(self, client, add_track):
        playing = add_track("Playing")
        queued = add_track("Queued")
        idle = add_track("Idle", duration=None)
        vote(client, "alice", playing.id)
        vote(client, "bob", queued.id)
        vote(client, "carol", queued.id)

        tracks = {t["id"]: t for t in client.get("/api/tracks").json()}

        assert tracks[playing.id]["status"] == "playing"
        assert tracks[playing.id]["votes"] == 1
        assert tracks[queued.id]["status"] == "available"
        assert tracks[queued.id]["votes"] == 2
        assert tracks[idle.id]["votes"] == 0
        assert tracks[idle.id]["duration"] is None

    def test_paused_status(self, client, add_track):
        track = add_track("Song")
        vote(client, "alice", track.id)
        client.post("/api/player/pause")

        tracks = client.get("/api/tracks").json()

        assert tracks[0]["status"] == "paused"


class TestDeleteTrack:
    def test_delete_current_track_selects_next(self, client, add_track):
        current = add_track("Current")
        queued = add_track("Queued")
        vote(client, "alice", current.id)
        vote(client, "bob", queued.id)

        response = client.delete(f"/api/tracks/{current.id}")

        assert response.status_code == 200
        assert response.json()["events"] == ["playback:became_idle", "playback:track_selected"]
        assert response.json()["status"]["track"]["id"] == queued.id
        assert [t["id"] for t in client.get("/api/tracks").json()] == [queued.id]

    def test_delete_unknown_track_is_404(self, client):
        assert client.delete("/api/tracks/999").status_code == 404


class TestStream:
    def test_streams_file(self, client, add_track):
        track = add_track("Song")

        response = client.get(f"/api/tracks/{track.id}/stream")

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/mpeg"
        assert response.content == b"ID3fake-audio"

    def test_unknown_track_is_404(self, client):
        assert client.get("/api/tracks/999/stream").status_code == 404

    def test_file_outside_library_is_403(self, client, app, tmp_path):
        outside = tmp_path / "outside.mp3"
        outside.write_bytes(b"secret")
        track = app.state.catalog.add(str(outside), "Outside")

        assert client.get(f"/api/tracks/{track.id}/stream").status_code == 403

    def test_missing_file_is_403(self, client, add_track, music_dir):
        track = add_track("Gone")
        (music_dir / "Gone.mp3").unlink()

        assert client.get(f"/api/tracks/{track.id}/stream").status_code == 403


class TestGetMimeType:
    def test_known_audio_types(self):
        assert get_mime_type(Path("a.mp3")) == "audio/mpeg"
        assert get_mime_type(Path("a.FLAC")) == "audio/flac"
        assert get_mime_type(Path("a.m4a")) == "audio/mp4"

    def test_unknown_type(self):
        assert get_mime_type(Path("a.unknownext")) == "application/octet-stream"
