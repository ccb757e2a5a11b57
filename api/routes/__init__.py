"""API route modules."""

from .health_routes import router as health_router
from .ious_routes import router as ious_router

__all__ = [
    "health_router",
    "ious_router",
]
