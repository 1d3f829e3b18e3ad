"""Voting domain - vote storage and candidate ranking."""

from .store import VoteStore, SqliteVoteStore
from .ranking import Candidate, rank_candidates, top_candidate

__all__ = [
    "VoteStore",
    "SqliteVoteStore",
    "Candidate",
    "rank_candidates",
    "top_candidate",
]
