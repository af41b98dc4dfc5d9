"""Pure functions for creating and decoding signed session tokens.

Sessions are HS256 JWTs carrying the user id and the identity provider the
user signed in with. The same signing helpers produce the short-lived OAuth
``state`` tokens used to protect the authorization-code callback.
"""

import hashlib
import hmac
import base64
import json
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

_ISSUER = "gitdocify"


@dataclass(frozen=True)
class SessionPayload:
    """Decoded session token. Immutable."""
    sub: str
    provider: str
    exp: datetime


def create_session_token(
    subject: str,
    provider: str,
    secret: str,
    expires_hours: int = 24 * 30,
) -> str:
    """Create a signed session token.

    Args:
        subject: User id (``"github:583231"``).
        provider: Identity provider the session was established with.
        secret: HMAC signing key.
        expires_hours: Hours until expiry.

    Returns:
        Encoded JWT string.
    """
    now = time.time()
    return _sign(
        {
            "sub": subject,
            "provider": provider,
            "iat": int(now),
            "exp": int(now + expires_hours * 3600),
            "iss": _ISSUER,
        },
        secret,
    )


def decode_session_token(token: str, secret: str) -> Optional[SessionPayload]:
    """Decode and validate a session token.

    Returns ``None`` on any validation failure (bad signature, expired,
    malformed, wrong token kind) rather than raising.
    """
    payload = _verify(token, secret)
    if payload is None or "provider" not in payload or payload.get("kind"):
        return None
    return SessionPayload(
        sub=payload.get("sub", ""),
        provider=payload.get("provider", ""),
        exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def create_state_token(provider: str, secret: str, expires_seconds: int = 600) -> str:
    """Create a signed OAuth ``state`` value bound to *provider*."""
    now = time.time()
    return _sign(
        {
            "kind": "oauth_state",
            "provider": provider,
            "nonce": secrets.token_urlsafe(16),
            "exp": int(now + expires_seconds),
            "iss": _ISSUER,
        },
        secret,
    )


def verify_state_token(token: str, provider: str, secret: str) -> bool:
    """Check a ``state`` value was issued by us, for *provider*, and is unexpired."""
    payload = _verify(token, secret)
    return (
        payload is not None
        and payload.get("kind") == "oauth_state"
        and payload.get("provider") == provider
    )


# --- signing ---

def _sign(payload: dict, secret: str) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    segments = [
        _b64encode(json.dumps(header).encode()),
        _b64encode(json.dumps(payload).encode()),
    ]
    signing_input = b".".join(segments)
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    segments.append(_b64encode(signature))
    return b".".join(segments).decode()


def _verify(token: str, secret: str) -> Optional[dict]:
    try:
        parts = token.encode().split(b".")
        if len(parts) != 3:
            return None

        signing_input = parts[0] + b"." + parts[1]
        expected_sig = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
        actual_sig = _b64decode(parts[2])

        if not hmac.compare_digest(expected_sig, actual_sig):
            return None

        payload = json.loads(_b64decode(parts[1]))
        if not isinstance(payload, dict):
            return None

        if time.time() > payload.get("exp", 0):
            return None

        return payload
    except (json.JSONDecodeError, KeyError, ValueError, IndexError, UnicodeError):
        return None


# --- base64url helpers (no padding, URL-safe) ---

def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    padding = 4 - len(data) % 4
    if padding != 4:
        data += b"=" * padding
    return base64.urlsafe_b64decode(data)
