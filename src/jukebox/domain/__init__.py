"""Domain layer - library, voting and playback."""
