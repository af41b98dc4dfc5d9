"""Business logic services."""

from .documentation_service import DocumentationService, GenerationResult
from .generation_service import DocumentGenerator
from .github_client import GitHubClient, RequestPacer
from .oauth_service import OAuthService

__all__ = [
    "DocumentationService",
    "GenerationResult",
    "DocumentGenerator",
    "GitHubClient",
    "RequestPacer",
    "OAuthService",
]
