"""API routes."""
from fastapi import APIRouter
from encore.api import catalog, imports

api_router = APIRouter()

# Catalog
api_router.include_router(catalog.router, tags=["catalog"])

# Imports
api_router.include_router(imports.router, tags=["imports"])
