"""Upstream track record schemas."""
from pydantic import BaseModel, Field
from typing import Optional, List


class TrackRecord(BaseModel):
    """Track as handed over by an external search/catalog API.

    The first entry of ``artists`` is the primary artist.
    """
    source: str = "spotify"
    source_id: str
    title: str
    artists: List[str] = []
    artist_ids: List[Optional[str]] = []
    duration_ms: Optional[int] = None
    album_name: Optional[str] = None
    album_id: Optional[str] = None
    release_date: Optional[str] = None  # "1975", "1975-10", "1975-10-31"
    image_url: Optional[str] = None
    popularity: Optional[int] = Field(None, ge=0, le=100)
    external_url: Optional[str] = None

    def _primary_index(self) -> Optional[int]:
        for index, name in enumerate(self.artists):
            if name and name.strip():
                return index
        return None

    @property
    def primary_artist(self) -> Optional[str]:
        """First non-blank artist name."""
        index = self._primary_index()
        return self.artists[index] if index is not None else None

    @property
    def primary_artist_id(self) -> Optional[str]:
        index = self._primary_index()
        if index is None or index >= len(self.artist_ids):
            return None
        return self.artist_ids[index]
