"""Catalog schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class SongSourceResponse(BaseModel):
    """Provenance entry."""
    model_config = ConfigDict(from_attributes=True)

    source: str
    source_id: str


class SongResponse(BaseModel):
    """Song with provenance."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    artist_id: int
    artist_name: str
    album_id: Optional[int] = None
    album_title: Optional[str] = None
    duration_sec: Optional[int] = None
    genres: Optional[List[str]] = None
    popularity: Optional[int] = None
    album_art: Optional[str] = None
    signature: str
    sources: List[SongSourceResponse] = []


class SaveSongResponse(BaseModel):
    """Upsert outcome. ``inserted`` is False for songs that already existed."""
    inserted: bool
    song: Optional[SongResponse] = None
    existing_id: Optional[int] = None
    message: Optional[str] = None


class ManualSongCreate(BaseModel):
    """Manual catalog entry."""
    title: str = Field(..., min_length=1, max_length=500)
    artist: str = Field(..., min_length=1, max_length=255)
    album: Optional[str] = Field(None, max_length=255)
    release_year: Optional[int] = Field(None, ge=1000, le=9999)
    duration_sec: Optional[int] = Field(None, ge=0)
    genres: Optional[List[str]] = None


class SearchHit(BaseModel):
    """Single search result."""
    id: int
    title: str
    artist_name: str
    album_title: Optional[str] = None
    duration_sec: Optional[int] = None
    genres: Optional[List[str]] = None
    album_art: Optional[str] = None
    popularity: Optional[int] = None
    score: Optional[float] = None


class SearchResponse(BaseModel):
    """Catalog search response."""
    songs: List[SearchHit] = []
    cached: bool = False


class SplitSongGroup(BaseModel):
    """Songs by one artist with the same normalized title but different signatures."""
    artist_id: int
    artist_name: str
    title_norm: str
    count: int
    songs: List[SongResponse] = []


class SpotifySearchRequest(BaseModel):
    """Upstream search request."""
    q: str = Field(..., min_length=1)
    limit: int = Field(20, ge=1, le=50)


class SpotifyTrackResult(BaseModel):
    """Trimmed upstream search result."""
    source_id: str
    title: str
    artist: str
    album_name: Optional[str] = None
    duration: Optional[int] = None
    album_art: Optional[str] = None
    spotify_url: Optional[str] = None
    popularity: Optional[int] = None


class SpotifySearchResponse(BaseModel):
    """Upstream search response."""
    tracks: List[SpotifyTrackResult] = []
