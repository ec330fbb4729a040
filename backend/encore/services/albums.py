"""Album registry: albums are unique per (artist, normalized title, year)."""
import logging
from typing import Optional, List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from encore.database import is_unique_violation
from encore.models.album import Album
from encore.services.exceptions import InvalidTrackError
from encore.utils.normalize import normalize_name

logger = logging.getLogger(__name__)


class AlbumRegistry:
    """Find-or-create access to the albums table."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, album_id: int) -> Optional[Album]:
        """Get album by ID."""
        return self.db.query(Album).filter(Album.id == album_id).first()

    def find(self, title: str, artist_id: int, release_year: Optional[int] = None) -> Optional[Album]:
        """Look up an album by the same key the unique index enforces.

        A missing year and year 0 share one bucket, see uq_album_artist_title_year.
        """
        return self.db.query(Album).filter(
            Album.artist_id == artist_id,
            Album.title_norm == normalize_name(title),
            func.coalesce(Album.release_year, 0) == (release_year or 0),
        ).first()

    def find_or_create(
        self,
        title: str,
        artist_id: int,
        release_year: Optional[int] = None,
        source: Optional[str] = None,
        source_id: Optional[str] = None,
        image_url: Optional[str] = None,
        genres: Optional[List[str]] = None,
    ) -> Album:
        """Return the album for this artist/title/year, creating it if needed."""
        if not normalize_name(title):
            raise InvalidTrackError("album", "Album title is required")

        album = self.find(title, artist_id, release_year)
        if album:
            return album

        album = Album(
            title=title.strip(),
            artist_id=artist_id,
            release_year=release_year or None,
            source=source,
            source_id=source_id,
            image_url=image_url,
            genres=genres,
        )
        self.db.add(album)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if not is_unique_violation(e):
                raise
            logger.info(
                f"Album '{normalize_name(title)}' ({release_year}) for artist {artist_id} "
                "created concurrently, using existing row"
            )
            existing = self.find(title, artist_id, release_year)
            if existing is None:
                raise
            return existing

        logger.info(f"Created album {album.title} (id={album.id}, artist={artist_id}, year={release_year})")
        return album
