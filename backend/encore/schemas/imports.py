"""CSV import and import playlist schemas."""
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List


class RowError(BaseModel):
    """Error attributed to a CSV source line (1-based, header is line 1)."""
    row: int
    message: str


class ParsedSong(BaseModel):
    """One parsed CSV row."""
    title: str = ""
    artist: str = ""
    album: Optional[str] = None
    duration: Optional[int] = None  # seconds
    genre: Optional[str] = None
    row_number: int
    errors: List[str] = []

    @property
    def is_valid(self) -> bool:
        return bool(self.title) and bool(self.artist) and not self.errors


class CSVParseResult(BaseModel):
    """Outcome of parsing a CSV document."""
    success: bool
    songs: List[ParsedSong] = []
    total_rows: int = 0
    valid_rows: int = 0
    invalid_rows: int = 0
    errors: List[RowError] = []


class ImportDraft(BaseModel):
    """Parsed rows staged between preview and commit."""
    draft_id: str
    actor_id: str
    songs: List[ParsedSong] = []
    created_at: datetime


class CSVPreviewRequest(BaseModel):
    """Preview request."""
    csv_data: str = Field(..., min_length=1)


class CSVPreviewResponse(BaseModel):
    """Preview response."""
    draft_id: str
    preview: List[ParsedSong] = []
    total_rows: int
    valid_rows: int
    invalid_rows: int
    errors: List[RowError] = []


class CSVCommitRequest(BaseModel):
    """Commit request."""
    draft_id: str = Field(..., min_length=1)
    background: bool = False


class CSVCommitResponse(BaseModel):
    """Commit response. The commit succeeds even when some rows fail."""
    success: bool = True
    inserted: int = 0
    updated: int = 0
    errors: List[RowError] = []
    song_ids: List[int] = []
    total_saved: int = 0
    invalid_rows: int = 0
    task_id: Optional[str] = None


class PlaylistAddRequest(BaseModel):
    """Add a song to the import playlist."""
    song_id: int


class PlaylistAddResponse(BaseModel):
    added: bool
    total: int
    song_id: int


class PlaylistRemoveResponse(BaseModel):
    removed: bool
    total: int


class PlaylistEntry(BaseModel):
    """Song in the import playlist with its 1-based position."""
    position: int
    song_id: int
    title: str
    artist_name: str
    album_title: Optional[str] = None
    duration_sec: Optional[int] = None
    album_art: Optional[str] = None
    genres: Optional[List[str]] = None
    added_at: float


class PlaylistResponse(BaseModel):
    songs: List[PlaylistEntry] = []
    total: int = 0
