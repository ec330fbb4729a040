"""Encore API - Main application entry point."""
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from encore.api import api_router
from encore.api.health import router as health_router
from encore import __version__
from encore.config import settings
from encore.database import Base, engine
from encore.logging_config import setup_logging

# Initialize logging
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    # Startup: SQLite development databases are created in place,
    # PostgreSQL is managed by alembic
    if settings.database_url.startswith("sqlite"):
        import encore.models  # noqa: F401  register tables
        Base.metadata.create_all(bind=engine)
        logger.info("Created SQLite tables")
    yield
    # Shutdown (nothing needed)


app = FastAPI(
    title="Encore",
    description="Song catalog and import engine for live-event song requests",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
# In production, set CORS_ORIGINS env var to your domain(s)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")

# Include health routes (not under /api prefix)
app.include_router(health_router)


@app.get("/")
def root():
    """Root endpoint - API info."""
    return {
        "name": "Encore",
        "version": __version__,
        "docs": "/docs",
    }
