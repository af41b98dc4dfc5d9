"""API routes."""

from .auth_routes import router as auth_router
from .documents import router as documents_router
from .github import router as github_router

__all__ = [
    "auth_router",
    "documents_router",
    "github_router",
]
