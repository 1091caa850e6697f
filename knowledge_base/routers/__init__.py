"""API routers package.

This package contains all FastAPI routers for the application.
Each router handles a specific domain of the API.
"""

from .auth import router as auth_router
from .documents import router as documents_router
from .notifications import router as notifications_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "documents_router",
    "notifications_router",
    "users_router",
]
