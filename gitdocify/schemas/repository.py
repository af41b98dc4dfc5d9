"""Repository schemas.

``RepositoryRef``, ``RepositoryMetadata`` and ``FetchedFile`` are transient
values that live for one generation request. ``RepositorySummary`` is the
API shape for the repository picker.
"""

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel

from ..exceptions import ValidationError


@dataclass(frozen=True)
class RepositoryRef:
    """``owner/repo`` pair. Both parts are non-empty."""

    owner: str
    repo: str

    @classmethod
    def parse(cls, full_name: str) -> "RepositoryRef":
        """Parse ``"owner/repo"``. Raises ValidationError on any other shape."""
        parts = full_name.strip().split("/") if isinstance(full_name, str) else []
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise ValidationError("Repository must be in format 'owner/repo'", field="repository")
        return cls(owner=parts[0].strip(), repo=parts[1].strip())

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class RepositoryMetadata:
    """Snapshot of repository metadata, fetched once per request."""

    name: str
    default_branch: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = 0
    forks: int = 0
    license_name: Optional[str] = None


@dataclass(frozen=True)
class FetchedFile:
    path: str
    content: str

    @property
    def extension(self) -> str:
        """Text after the last dot of the file name, or ``""``."""
        basename = self.path.rsplit("/", 1)[-1]
        if "." not in basename:
            return ""
        return basename.rsplit(".", 1)[-1]


class RepositorySummary(BaseModel):
    """One entry in the authenticated user's repository list."""

    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    private: bool = False
    html_url: str
    language: Optional[str] = None
    stargazers_count: int = 0
    forks_count: int = 0
    updated_at: Optional[str] = None
    topics: List[str] = []


class RepositoryListResponse(BaseModel):
    repositories: List[RepositorySummary]
