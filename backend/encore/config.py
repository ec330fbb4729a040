"""Application configuration from environment variables."""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Database
    database_url: str = "sqlite:///./encore.db"

    # Redis (search cache, import drafts, celery broker)
    # Empty value selects the in-process cache backend
    redis_url: str = ""

    # Authentication (tokens are issued by the identity provider)
    jwt_secret: str = "change-me-in-production-use-random-string"
    jwt_algorithm: str = "HS256"
    jwt_expiry_hours: int = 24

    # Spotify (client credentials flow)
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_timeout: float = 15.0

    # Catalog
    signature_bucket_seconds: int = 3  # Duration bucket width for song signatures

    # Search
    search_cache_ttl: int = 60  # seconds
    search_default_limit: int = 20
    search_max_limit: int = 50

    # CSV imports
    import_draft_ttl: int = 24 * 60 * 60  # Drafts expire after 24h
    import_preview_rows: int = 10
    csv_max_duration: int = 3600  # seconds

    # Logging
    log_level: str = "info"
    log_path: str = ""

    # CORS (comma separated)
    cors_origins: str = "*"

    class Config:
        env_file = (".env", "../.env")  # Check both backend/ and parent dir
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
