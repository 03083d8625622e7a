"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.sort import router as sort_router

__all__ = [
    "sort_router",
]
