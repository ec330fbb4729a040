"""Pydantic schemas for API request/response validation."""
from encore.schemas.catalog import (
    SongSourceResponse,
    SongResponse,
    SaveSongResponse,
    ManualSongCreate,
    SearchHit,
    SearchResponse,
    SplitSongGroup,
    SpotifySearchRequest,
    SpotifyTrackResult,
    SpotifySearchResponse,
)
from encore.schemas.common import MessageResponse
from encore.schemas.imports import (
    RowError,
    ParsedSong,
    CSVParseResult,
    ImportDraft,
    CSVPreviewRequest,
    CSVPreviewResponse,
    CSVCommitRequest,
    CSVCommitResponse,
    PlaylistAddRequest,
    PlaylistAddResponse,
    PlaylistRemoveResponse,
    PlaylistEntry,
    PlaylistResponse,
)
from encore.schemas.track import TrackRecord

__all__ = [
    "SongSourceResponse",
    "SongResponse",
    "SaveSongResponse",
    "ManualSongCreate",
    "SearchHit",
    "SearchResponse",
    "SplitSongGroup",
    "SpotifySearchRequest",
    "SpotifyTrackResult",
    "SpotifySearchResponse",
    "MessageResponse",
    "RowError",
    "ParsedSong",
    "CSVParseResult",
    "ImportDraft",
    "CSVPreviewRequest",
    "CSVPreviewResponse",
    "CSVCommitRequest",
    "CSVCommitResponse",
    "PlaylistAddRequest",
    "PlaylistAddResponse",
    "PlaylistRemoveResponse",
    "PlaylistEntry",
    "PlaylistResponse",
    "TrackRecord",
]
