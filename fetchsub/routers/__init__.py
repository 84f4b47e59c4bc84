"""
Routers package for API endpoints.

This package contains all API route handlers organized by functionality.
"""

from .extract import router as extract_router
from .download import router as download_router
from .playlist import router as playlist_router
from .coins import router as coins_router
from .subscriptions import router as subscriptions_router
from .health import router as health_router
from .admin import router as admin_router

__all__ = [
    "extract_router",
    "download_router",
    "playlist_router",
    "coins_router",
    "subscriptions_router",
    "health_router",
    "admin_router",
]
