"""Artist registry: one canonical artist per normalized name."""
import logging
from typing import Optional, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from encore.database import is_unique_violation
from encore.models.artist import Artist
from encore.services.exceptions import InvalidTrackError
from encore.utils.normalize import normalize_name

logger = logging.getLogger(__name__)


class ArtistRegistry:
    """Find-or-create access to the artists table."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, artist_id: int) -> Optional[Artist]:
        """Get artist by ID."""
        return self.db.query(Artist).filter(Artist.id == artist_id).first()

    def get_by_name(self, name: str) -> Optional[Artist]:
        """Get artist by display name, ignoring case and outer whitespace."""
        return self.db.query(Artist).filter(
            Artist.name_norm == normalize_name(name)
        ).first()

    def find_or_create(
        self,
        name: str,
        source: Optional[str] = None,
        source_id: Optional[str] = None,
        image_url: Optional[str] = None,
        genres: Optional[List[str]] = None,
        popularity: Optional[int] = None,
    ) -> Artist:
        """Return the artist for ``name``, creating it on first sighting.

        An existing artist keeps its name and provenance. Image and genres
        are only filled in when the stored row has none.
        """
        name_norm = normalize_name(name)
        if not name_norm:
            raise InvalidTrackError("artist", "Artist name is required")

        artist = self.get_by_name(name)
        if artist:
            self._attach_metadata(artist, image_url, genres)
            return artist

        artist = Artist(
            name=name.strip(),
            source=source,
            source_id=source_id,
            image_url=image_url,
            genres=genres,
            popularity=popularity,
        )
        self.db.add(artist)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if not is_unique_violation(e):
                raise
            # Another writer created the same artist first
            logger.info(f"Artist '{name_norm}' created concurrently, using existing row")
            existing = self.get_by_name(name)
            if existing is None:
                raise
            return existing

        logger.info(f"Created artist {artist.name} (id={artist.id}, source={source})")
        return artist

    def _attach_metadata(
        self,
        artist: Artist,
        image_url: Optional[str],
        genres: Optional[List[str]],
    ) -> None:
        """Fill empty image/genre fields on an existing artist."""
        updated = False
        if image_url and not artist.image_url:
            artist.image_url = image_url
            updated = True
        if genres and not artist.genres:
            artist.genres = list(genres)
            updated = True
        if updated:
            self.db.commit()
