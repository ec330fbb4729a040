"""Album model."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from encore.database import Base
from encore.utils.normalize import normalize_name


class Album(Base):
    """Album, scoped to the artist that owns it."""

    __tablename__ = "albums"

    id = Column(Integer, primary_key=True, index=True)
    artist_id = Column(Integer, ForeignKey("artists.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    title_norm = Column(String(255), nullable=False)
    release_year = Column(Integer)  # NULL is its own bucket, see index below

    source = Column(String(20))
    source_id = Column(String(255))

    image_url = Column(String(1000))
    genres = Column(JSON)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    artist = relationship("Artist", back_populates="albums")

    @validates("title")
    def _sync_title_norm(self, key, value):
        self.title_norm = normalize_name(value)
        return value

    def __repr__(self):
        return f"<Album {self.title}>"


# NULLs never collide in a plain unique constraint, so the year is
# coalesced to 0 to make "no year" albums unique per artist/title too.
Index(
    "uq_album_artist_title_year",
    Album.artist_id,
    Album.title_norm,
    func.coalesce(Album.release_year, 0),
    unique=True,
)
