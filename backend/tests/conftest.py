"""Pytest fixtures for Encore tests."""
import os

# Isolate tests from any local .env before settings are loaded
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["SPOTIFY_CLIENT_ID"] = ""
os.environ["SPOTIFY_CLIENT_SECRET"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from encore.main import app
from encore.database import Base, get_db
from encore.dependencies import get_cache_backend
from encore.services.auth import create_token, ROLE_ADMIN, ROLE_MEMBER
from encore.services.cache import MemoryCache, reset_cache

# In-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def fresh_cache():
    """Drop the shared cache backend between tests."""
    reset_cache()
    yield
    reset_cache()


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def memory_cache():
    """In-process cache shared by the app and the test."""
    return MemoryCache()


@pytest.fixture(scope="function")
def client(db, memory_cache):
    """Create a test client with the test database and cache."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache_backend] = lambda: memory_cache
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Authorization headers for a regular member."""
    token = create_token("member-1", ROLE_MEMBER)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    """Authorization headers for an admin."""
    token = create_token("admin-1", ROLE_ADMIN)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def catalog(db):
    """Catalog service bound to the test database."""
    from encore.services.catalog import CatalogService
    return CatalogService(db)


@pytest.fixture
def track_record():
    """Upstream track record for 'Bohemian Rhapsody'."""
    from encore.schemas.track import TrackRecord
    return TrackRecord(
        source="spotify",
        source_id="123",
        title="Bohemian Rhapsody",
        artists=["Queen"],
        artist_ids=["1dfeR4HaWDbWqFHLkxsg1d"],
        duration_ms=354320,
        album_name="A Night at the Opera",
        album_id="1GbtB4zTqAsyfZEsm1RZfx",
        release_date="1975-11-21",
        image_url="https://i.scdn.co/image/opera.jpg",
        popularity=84,
    )


@pytest.fixture
def sample_songs(catalog):
    """A few catalog songs for search tests."""
    from encore.schemas.catalog import ManualSongCreate

    songs = {}
    for title, artist, album, genres, duration in [
        ("Bohemian Rhapsody", "Queen", "A Night at the Opera", ["rock"], 354),
        ("Don't Stop Me Now", "Queen", "Jazz", ["rock"], 209),
        ("Dancing Queen", "ABBA", "Arrival", ["pop"], 231),
        ("Africa", "Toto", "Toto IV", ["soft rock"], 295),
    ]:
        result = catalog.save_manual(
            ManualSongCreate(title=title, artist=artist, album=album, genres=genres, duration_sec=duration),
            "seed",
        )
        songs[title] = result.song
    return songs
