"""Injectable service dependencies.

Endpoints receive their external collaborators through these functions so
tests can swap them with ``app.dependency_overrides``.
"""

from functools import partial

from fastapi import Request

from ..core.config import settings
from ..services.documentation_service import GitHubClientFactory
from ..services.generation_service import DocumentGenerator
from ..services.github_client import GitHubClient, get_default_pacer
from ..services.oauth_service import OAuthService


def get_generator(request: Request) -> DocumentGenerator:
    """The process-wide generator built at startup."""
    return request.app.state.generator


def get_github_client_factory() -> GitHubClientFactory:
    """Build GitHub clients that share the process-wide request pacer."""
    return partial(
        GitHubClient,
        api_url=settings.github_api_url,
        pacer=get_default_pacer(settings.github_request_interval),
    )


def get_oauth_service() -> OAuthService:
    return OAuthService(settings)
