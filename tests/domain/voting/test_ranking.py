"""Tests for candidate ranking."""

from jukebox.domain.library.models import Track
from jukebox.domain.voting.ranking import Candidate, rank_candidates, top_candidate


def make_tracks(*ids: int) -> list[Track]:
    return [Track(id=i, title=f"Track {i}") for i in ids]


class TestRankCandidates:
    def test_orders_by_votes_descending(self) -> None:
        tracks = make_tracks(1, 2, 3)
        ranked = rank_candidates({1: 1, 2: 3, 3: 2}, tracks)
        assert [c.track.id for c in ranked] == [2, 3, 1]
        assert [c.votes for c in ranked] == [3, 2, 1]

    def test_ties_broken_by_lowest_track_id(self) -> None:
        """Equal counts are ordered by track id regardless of input order."""
        tracks = make_tracks(7, 3, 5)
        ranked = rank_candidates({7: 2, 3: 2, 5: 2}, tracks)
        assert [c.track.id for c in ranked] == [3, 5, 7]

    def test_excludes_tracks_without_votes(self) -> None:
        tracks = make_tracks(1, 2)
        ranked = rank_candidates({1: 0, 2: 1}, tracks)
        assert [c.track.id for c in ranked] == [2]

    def test_ignores_counts_for_uncataloged_tracks(self) -> None:
        """A count for a track missing from the catalog never becomes a candidate."""
        tracks = make_tracks(1)
        ranked = rank_candidates({1: 1, 99: 10}, tracks)
        assert ranked == [Candidate(track=tracks[0], votes=1)]

    def test_empty(self) -> None:
        assert rank_candidates({}, make_tracks(1, 2)) == []


class TestTopCandidate:
    def test_top_has_maximum_count(self) -> None:
        counts = {1: 4, 2: 9, 3: 9, 4: 1}
        top = top_candidate(counts, make_tracks(1, 2, 3, 4))
        assert top.votes == max(counts.values())
        assert top.track.id == 2

    def test_deterministic(self) -> None:
        counts = {1: 2, 2: 2}
        tracks = make_tracks(2, 1)
        assert top_candidate(counts, tracks) == top_candidate(counts, list(reversed(tracks)))

    def test_none_when_no_votes(self) -> None:
        assert top_candidate({}, make_tracks(1)) is None
