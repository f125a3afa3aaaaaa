"""FastAPI routers for the kinfolk API."""

from .collaboration import router as collaboration_router
from .me import router as me_router
from .people import router as people_router
from .records import router as records_router

__all__ = [
    "collaboration_router",
    "me_router",
    "people_router",
    "records_router",
]
