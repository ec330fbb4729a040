"""Database connection and session management."""
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker, declarative_base
from encore.config import settings

# Configure engine based on database type
_engine_options = {}

if settings.database_url.startswith("sqlite"):
    # SQLite: no pool settings needed
    _engine_options = {
        "connect_args": {"check_same_thread": False}
    }
else:
    # PostgreSQL: full connection pool
    _engine_options = {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20
    }

engine = create_engine(settings.database_url, **_engine_options)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# SQLSTATE for unique_violation (PostgreSQL)
UNIQUE_VIOLATION = "23505"


def get_db():
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def is_unique_violation(error: IntegrityError) -> bool:
    """Check whether an IntegrityError came from a unique index.

    Other integrity failures (NOT NULL, foreign keys) must propagate, only
    duplicate keys are resolved by re-reading the existing row.
    """
    orig = getattr(error, "orig", None)
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    message = str(orig if orig is not None else error).lower()
    return "unique constraint" in message or "duplicate key" in message
