"""Jukebox exceptions for error handling.

Storage and scheduling errors are raised to the caller unchanged; the web layer
maps each family to an HTTP status.
"""


class JukeboxError(Exception):
    """Base exception for jukebox operations."""

    pass


class NotFoundError(JukeboxError):
    """Raised when a track or vote does not exist."""

    pass


class TrackNotFoundError(NotFoundError):
    """Raised when a track id is not in the catalog."""

    def __init__(self, track_id: int, message: str = None):
        self.track_id = track_id
        super().__init__(message or f"Track #{track_id} not found")


class VoteNotFoundError(NotFoundError):
    """Raised when retracting a vote that was never cast."""

    def __init__(self, user_id: str, track_id: int):
        self.user_id = user_id
        self.track_id = track_id
        super().__init__(f"No vote from {user_id!r} for track #{track_id}")


class ConflictError(JukeboxError):
    """Raised when a mutation collides with existing state."""

    pass


class AlreadyVotedError(ConflictError):
    """Raised when a user votes twice for the same track."""

    def __init__(self, user_id: str, track_id: int):
        self.user_id = user_id
        self.track_id = track_id
        super().__init__(f"{user_id!r} already voted for track #{track_id}")


class StorageError(JukeboxError):
    """Raised when the database fails during a vote or catalog operation."""

    pass


class InvalidTransitionError(JukeboxError):
    """Raised when a playback command does not apply to the current state."""

    def __init__(self, command: str, state: str):
        self.command = command
        self.state = state
        super().__init__(f"Cannot {command} while {state}")
