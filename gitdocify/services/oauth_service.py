"""OAuth authorization-code flow for GitHub and Google sign-in.

Deep module: callers ask for an authorization URL, then hand back the
``code`` from the callback and receive an access token plus a normalized
profile. Provider differences live in the ``PROVIDERS`` table.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlencode

import httpx

from ..core.config import Settings
from ..exceptions import OAuthError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthProvider:
    """Static endpoints and scopes for one identity provider."""

    name: str
    authorize_url: str
    token_url: str
    scope: str
    extra_authorize_params: dict = field(default_factory=dict)


@dataclass(frozen=True)
class OAuthProfile:
    """Provider-independent view of the signed-in account."""

    provider: str
    account_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None


PROVIDERS: dict[str, OAuthProvider] = {
    "github": OAuthProvider(
        name="github",
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        # repo scope is what lets the generator read private repositories.
        scope="read:user user:email repo",
    ),
    "google": OAuthProvider(
        name="google",
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        scope="openid email profile",
        extra_authorize_params={"prompt": "consent", "access_type": "offline", "response_type": "code"},
    ),
}

GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class OAuthService:
    """Runs the server side of the OAuth dance for configured providers.

    Args:
        settings: Application settings (client ids/secrets, URLs).
        transport: Optional httpx transport, used by tests to stub providers.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 20.0,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._timeout = timeout

    def get_provider(self, name: str) -> OAuthProvider:
        """Return a configured provider or raise ValidationError."""
        provider = PROVIDERS.get(name)
        if provider is None:
            raise ValidationError(f"Unknown sign-in provider: {name}", field="provider")
        if name not in self._settings.configured_providers():
            raise ValidationError(f"Sign-in provider '{name}' is not configured", field="provider")
        return provider

    def redirect_uri(self, provider: str) -> str:
        return f"{self._settings.api_base_url.rstrip('/')}/api/auth/{provider}/callback"

    def authorization_url(self, provider_name: str, state: str) -> str:
        provider = self.get_provider(provider_name)
        client_id, _ = self._credentials(provider_name)
        params = {
            "client_id": client_id,
            "redirect_uri": self.redirect_uri(provider_name),
            "scope": provider.scope,
            "state": state,
            **provider.extra_authorize_params,
        }
        return f"{provider.authorize_url}?{urlencode(params)}"

    def exchange_code(self, provider_name: str, code: str) -> str:
        """Trade an authorization code for an access token.

        Raises:
            OAuthError: on HTTP failure or when the provider omits the token.
        """
        provider = self.get_provider(provider_name)
        client_id, client_secret = self._credentials(provider_name)
        data = {
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "redirect_uri": self.redirect_uri(provider_name),
        }
        if provider_name == "google":
            data["grant_type"] = "authorization_code"

        with self._client() as client:
            try:
                resp = client.post(provider.token_url, data=data, headers={"Accept": "application/json"})
                resp.raise_for_status()
                body = resp.json()
            except (httpx.HTTPError, ValueError) as exc:
                logger.error("Token exchange failed for %s: %s", provider_name, type(exc).__name__)
                raise OAuthError("OAuth token exchange failed", provider=provider_name) from exc

        access_token = body.get("access_token") if isinstance(body, dict) else None
        if not access_token:
            logger.error(
                "Token exchange for %s returned no access_token (error=%s)",
                provider_name, body.get("error") if isinstance(body, dict) else None,
            )
            raise OAuthError("OAuth token exchange failed (no access token)", provider=provider_name)
        return access_token

    def fetch_profile(self, provider_name: str, access_token: str) -> OAuthProfile:
        """Load the signed-in account's profile from the provider."""
        self.get_provider(provider_name)
        headers = {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}

        if provider_name == "github":
            url = f"{self._settings.github_api_url.rstrip('/')}/user"
        else:
            url = GOOGLE_USERINFO_URL

        with self._client() as client:
            try:
                resp = client.get(url, headers=headers)
                resp.raise_for_status()
                data = resp.json()
            except (httpx.HTTPError, ValueError) as exc:
                logger.error("Profile fetch failed for %s: %s", provider_name, type(exc).__name__)
                raise OAuthError("Could not load account profile", provider=provider_name) from exc

        account_id = data.get("id" if provider_name == "github" else "sub") if isinstance(data, dict) else None
        if not account_id:
            raise OAuthError("Account profile has no identifier", provider=provider_name)

        if provider_name == "github":
            return OAuthProfile(
                provider="github",
                account_id=str(account_id),
                email=data.get("email"),
                name=data.get("name") or data.get("login"),
                image_url=data.get("avatar_url"),
            )
        return OAuthProfile(
            provider="google",
            account_id=str(account_id),
            email=data.get("email"),
            name=data.get("name"),
            image_url=data.get("picture"),
        )

    def _credentials(self, provider_name: str) -> tuple[str, str]:
        if provider_name == "github":
            return self._settings.github_client_id, self._settings.github_client_secret
        return self._settings.google_client_id, self._settings.google_client_secret

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self._timeout, transport=self._transport)
