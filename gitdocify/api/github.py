"""GitHub API endpoints."""

import logging

from fastapi import APIRouter, Depends

from ..core.auth import SessionContext, require_github_session
from ..schemas.repository import RepositoryListResponse
from ..services.documentation_service import GitHubClientFactory
from .dependencies import get_github_client_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/github", tags=["github"])

REPOSITORY_PAGE_SIZE = 50


@router.get("/repositories", response_model=RepositoryListResponse)
def list_repositories(
    session: SessionContext = Depends(require_github_session),
    github_client_factory: GitHubClientFactory = Depends(get_github_client_factory),
):
    """The caller's repositories, most recently updated first."""
    with github_client_factory(session.access_token) as client:
        repositories = client.list_repositories(per_page=REPOSITORY_PAGE_SIZE)
    logger.info("Listed repositories", extra={"user_id": session.user_id, "count": len(repositories)})
    return RepositoryListResponse(repositories=repositories)
