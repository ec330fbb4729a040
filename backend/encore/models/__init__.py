"""SQLAlchemy models for Encore."""
from encore.models.artist import Artist
from encore.models.album import Album
from encore.models.song import Song, SongSource, SongSourceType

__all__ = [
    "Artist",
    "Album",
    "Song",
    "SongSource",
    "SongSourceType",
]
