"""Vote Jukebox - collaborative, vote-driven playlist server."""

__version__ = "0.1.0"
