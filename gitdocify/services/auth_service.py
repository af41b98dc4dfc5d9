"""Authentication service: OAuth account upsert.

The service layer owns the user lifecycle; the auth routes are thin
wrappers around it.
"""

import logging

from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from ..models.user import User
from .oauth_service import OAuthProfile

logger = logging.getLogger(__name__)


def make_user_id(provider: str, account_id: str) -> str:
    return f"{provider}:{account_id}"


def upsert_oauth_user(db: Session, profile: OAuthProfile, access_token: str) -> User:
    """Create or refresh the user behind an OAuth sign-in.

    Profile fields and the access token are overwritten on every sign-in so
    a re-consented GitHub token replaces a revoked one.
    """
    user_id = make_user_id(profile.provider, profile.account_id)
    user = db.query(User).filter(User.user_id == user_id).first()

    if user is None:
        user = User(user_id=user_id, provider=profile.provider)
        db.add(user)
        logger.info("New user signed in", extra={"user_id": user_id, "provider": profile.provider})

    user.display_name = profile.name
    user.email = profile.email
    user.image_url = profile.image_url
    user.access_token = access_token
    user.last_login_at = func.now()

    db.commit()
    db.refresh(user)
    return user
