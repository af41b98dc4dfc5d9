"""OAuth sign-in and session endpoints.

    GET  /api/auth/providers            configured sign-in providers
    GET  /api/auth/{provider}/login     redirect to the provider's consent page
    GET  /api/auth/{provider}/callback  finish sign-in, set the session cookie
    GET  /api/auth/session              current session (or ``authenticated: false``)
    POST /api/auth/logout               clear the session cookie

The CSRF ``state`` value is a signed short-lived token, also stored in a
cookie; the callback requires both to match.
"""

import logging
from typing import List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..core.auth import SessionContext, optional_session
from ..core.config import Environment, settings
from ..core.token_factory import create_session_token, create_state_token, verify_state_token
from ..database import get_db
from ..exceptions import OAuthError
from ..services import auth_service
from ..services.oauth_service import OAuthService
from .dependencies import get_oauth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

STATE_COOKIE_NAME = "gitdocify_oauth_state"
STATE_MAX_AGE_SECONDS = 600


# --- Response schemas ---


class ProvidersResponse(BaseModel):
    providers: List[str]


class SessionUser(BaseModel):
    user_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None


class SessionResponse(BaseModel):
    authenticated: bool
    provider: Optional[str] = None
    has_github_credential: bool = False
    user: Optional[SessionUser] = None


# --- Helpers ---


def _secure_cookies() -> bool:
    return settings.environment == Environment.PRODUCTION


def _error_redirect(error: str) -> RedirectResponse:
    url = f"{settings.app_base_url.rstrip('/')}/auth/error?{urlencode({'error': error})}"
    return RedirectResponse(url, status_code=302)


# --- Endpoints ---


@router.get("/providers", response_model=ProvidersResponse)
def list_providers():
    return ProvidersResponse(providers=settings.configured_providers())


@router.get("/{provider}/login")
def login(provider: str, oauth: OAuthService = Depends(get_oauth_service)):
    """Start the authorization-code flow."""
    state = create_state_token(provider, settings.session_secret, expires_seconds=STATE_MAX_AGE_SECONDS)
    url = oauth.authorization_url(provider, state)

    response = RedirectResponse(url, status_code=302)
    response.set_cookie(
        STATE_COOKIE_NAME,
        state,
        max_age=STATE_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=_secure_cookies(),
    )
    return response


@router.get("/{provider}/callback")
def callback(
    provider: str,
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    oauth: OAuthService = Depends(get_oauth_service),
):
    """Finish sign-in: verify state, exchange the code, upsert the user."""
    if error:
        logger.warning("Provider returned an OAuth error", extra={"provider": provider, "oauth_error": error})
        return _error_redirect(error)

    oauth.get_provider(provider)

    cookie_state = request.cookies.get(STATE_COOKIE_NAME)
    if (
        not code
        or not state
        or state != cookie_state
        or not verify_state_token(state, provider, settings.session_secret)
    ):
        raise OAuthError("Invalid or expired sign-in state", provider=provider)

    access_token = oauth.exchange_code(provider, code)
    profile = oauth.fetch_profile(provider, access_token)
    user = auth_service.upsert_oauth_user(db, profile, access_token)

    session_token = create_session_token(
        user.user_id,
        provider,
        settings.session_secret,
        expires_hours=settings.session_max_age_days * 24,
    )
    logger.info("User signed in", extra={"user_id": user.user_id, "provider": provider})

    response = RedirectResponse(f"{settings.app_base_url.rstrip('/')}/dashboard", status_code=302)
    response.set_cookie(
        settings.session_cookie_name,
        session_token,
        max_age=settings.session_max_age_days * 24 * 3600,
        httponly=True,
        samesite="lax",
        secure=_secure_cookies(),
    )
    response.delete_cookie(STATE_COOKIE_NAME)
    return response


@router.get("/session", response_model=SessionResponse)
def get_session(session: Optional[SessionContext] = Depends(optional_session)):
    if session is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True,
        provider=session.provider,
        has_github_credential=session.has_github_credential,
        user=SessionUser(
            user_id=session.user_id,
            display_name=session.display_name,
            email=session.email,
        ),
    )


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(settings.session_cookie_name)
    return {"success": True}
