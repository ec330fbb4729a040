#!/usr/bin/env python3
"""Validate environment configuration before startup."""
import os
import sys


def validate():
    """Validate all required environment variables."""
    errors = []
    warnings = []

    # Required variables
    required = [
        ("DATABASE_URL", "Database connection URL"),
        ("JWT_SECRET", "JWT secret key"),
    ]

    for var, description in required:
        if not os.getenv(var):
            errors.append(f"Missing required: {var} ({description})")

    database_url = os.getenv("DATABASE_URL", "")
    if database_url.startswith("sqlite"):
        warnings.append("DATABASE_URL points at SQLite - full-text search falls back to substring matching")

    # Check JWT secret strength
    jwt_secret = os.getenv("JWT_SECRET", "")
    if jwt_secret and len(jwt_secret) < 32:
        warnings.append("JWT_SECRET should be at least 32 characters")
    if jwt_secret and "change" in jwt_secret.lower():
        warnings.append("JWT_SECRET appears to be a placeholder - generate a real secret")

    # Drafts, playlists and the Celery broker all live in Redis
    redis_url = os.getenv("REDIS_URL", "")
    if not redis_url:
        warnings.append("REDIS_URL not set - drafts and playlists are kept in process memory")
    elif not redis_url.startswith(("redis://", "rediss://", "unix://")):
        errors.append(f"REDIS_URL is not a redis URL: {redis_url}")

    # Optional integrations - check pairs
    if os.getenv("SPOTIFY_CLIENT_ID") and not os.getenv("SPOTIFY_CLIENT_SECRET"):
        warnings.append("SPOTIFY_CLIENT_ID set but SPOTIFY_CLIENT_SECRET missing")
    if os.getenv("SPOTIFY_CLIENT_SECRET") and not os.getenv("SPOTIFY_CLIENT_ID"):
        warnings.append("SPOTIFY_CLIENT_SECRET set but SPOTIFY_CLIENT_ID missing")

    bucket = os.getenv("SIGNATURE_BUCKET_SECONDS")
    if bucket is not None:
        if not bucket.isdigit() or int(bucket) < 1:
            errors.append(f"SIGNATURE_BUCKET_SECONDS must be a positive integer: {bucket}")
        elif int(bucket) != 3:
            warnings.append(
                "SIGNATURE_BUCKET_SECONDS differs from 3 - existing signatures will no longer match"
            )

    # Report results
    print("=" * 60)
    print("Encore Environment Validation")
    print("=" * 60)

    if errors:
        print("\nERRORS:")
        for error in errors:
            print(f"  [X] {error}")

    if warnings:
        print("\nWARNINGS:")
        for warning in warnings:
            print(f"  [!] {warning}")

    if not errors and not warnings:
        print("\n  All checks passed.")

    print("\n" + "=" * 60)

    if errors:
        print("RESULT: Configuration INVALID - fix errors before starting")
        sys.exit(1)

    if warnings:
        print("RESULT: Configuration valid with warnings")
    else:
        print("RESULT: Configuration valid")

    sys.exit(0)


if __name__ == "__main__":
    validate()
