"""Artist model."""
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from encore.database import Base
from encore.utils.normalize import normalize_name


class Artist(Base):
    """Canonical artist, one row per normalized name."""

    __tablename__ = "artists"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    name_norm = Column(String(255), nullable=False, unique=True, index=True)

    # Provenance of the first sighting
    source = Column(String(20))  # spotify, csv, youtube, manual
    source_id = Column(String(255))

    image_url = Column(String(1000))
    genres = Column(JSON)
    popularity = Column(Integer)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    albums = relationship("Album", back_populates="artist", lazy="dynamic")

    @validates("name")
    def _sync_name_norm(self, key, value):
        self.name_norm = normalize_name(value)
        return value

    def __repr__(self):
        return f"<Artist {self.name}>"
