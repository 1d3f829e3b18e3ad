"""
Candidate ranking.

Pure functions: given vote counts and the catalog's tracks, produce the
ordered list of tracks eligible to play next.
"""

from typing import Iterable, Mapping, NamedTuple, Optional

from jukebox.domain.library.models import Track


class Candidate(NamedTuple):
    """A cataloged track with at least one active vote."""

    track: Track
    votes: int


def _sort_key(candidate: Candidate) -> tuple[int, int]:
    # Most votes first, then lowest track id
    return (-candidate.votes, candidate.track.id)


def rank_candidates(
    counts: Mapping[int, int], tracks: Iterable[Track]
) -> list[Candidate]:
    """Order tracks by vote count, descending, ties by track id ascending.

    Tracks without votes are excluded. Counts for ids that are not among
    `tracks` (deleted or never cataloged) are ignored.
    """
    candidates = [
        Candidate(track=track, votes=counts[track.id])
        for track in tracks
        if counts.get(track.id, 0) > 0
    ]
    return sorted(candidates, key=_sort_key)


def top_candidate(
    counts: Mapping[int, int], tracks: Iterable[Track]
) -> Optional[Candidate]:
    """Return the highest ranked candidate, or None when nothing has votes."""
    ranked = rank_candidates(counts, tracks)
    return ranked[0] if ranked else None
