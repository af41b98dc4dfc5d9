"""Pydantic schemas for API validation."""

from .document import (
    GenerationOptions,
    GenerateRequest,
    GenerateResponse,
    DocumentResponse,
    DocumentListItem,
    DocumentListResponse,
)
from .repository import (
    RepositoryRef,
    RepositoryMetadata,
    FetchedFile,
    RepositorySummary,
    RepositoryListResponse,
)

__all__ = [
    "GenerationOptions",
    "GenerateRequest",
    "GenerateResponse",
    "DocumentResponse",
    "DocumentListItem",
    "DocumentListResponse",
    "RepositoryRef",
    "RepositoryMetadata",
    "FetchedFile",
    "RepositorySummary",
    "RepositoryListResponse",
]
