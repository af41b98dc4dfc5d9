"""Session gate: FastAPI dependencies resolving the signed-in user.

Public interface:
    ``require_session``          returns SessionContext or raises 401.
    ``optional_session``         returns SessionContext or None, never raises.
    ``require_github_session``   ``require_session`` plus the GitHub credential check.
    ``ensure_github_credential`` the credential check on its own, for endpoints
                                 that only need it for some request shapes.

The session token is read from the session cookie first, then from an
``Authorization: Bearer`` header.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import settings
from .token_factory import decode_session_token
from ..database import get_db
from ..exceptions import AuthenticationError, MissingCredentialError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class SessionContext:
    """Resolved session available to every authenticated endpoint."""

    user_id: str
    provider: str
    access_token: Optional[str] = None
    display_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def has_github_credential(self) -> bool:
        return self.provider == "github" and bool(self.access_token)

    def __repr__(self) -> str:
        # Keep the access token out of reprs and tracebacks.
        return f"SessionContext(user_id={self.user_id!r}, provider={self.provider!r})"


def _session_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


def _resolve(token: Optional[str], db: Session) -> Optional[SessionContext]:
    if not token:
        return None

    payload = decode_session_token(token, settings.session_secret)
    if payload is None:
        return None

    from ..models.user import User

    user = db.query(User).filter(User.user_id == payload.sub).first()
    if user is None:
        logger.info("Session references unknown user", extra={"user_id": payload.sub})
        return None

    return SessionContext(
        user_id=user.user_id,
        provider=payload.provider,
        access_token=user.access_token,
        display_name=user.display_name,
        email=user.email,
    )


def require_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> SessionContext:
    """Require a valid session. Raises AuthenticationError (401) otherwise."""
    session = _resolve(_session_token(request, credentials), db)
    if session is None:
        raise AuthenticationError()
    return session


def optional_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[SessionContext]:
    """Resolve a session if one is present. Never raises."""
    return _resolve(_session_token(request, credentials), db)


def ensure_github_credential(session: SessionContext) -> str:
    """Return the GitHub access token or raise MissingCredentialError (403)."""
    if not session.has_github_credential:
        raise MissingCredentialError()
    return session.access_token


def require_github_session(
    session: SessionContext = Depends(require_session),
) -> SessionContext:
    """Require a session established through GitHub with a usable token."""
    ensure_github_credential(session)
    return session
